import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

import requests

from ..errors import BackendError
from .base import Provider
from .models import (
    OLLAMA,
    OPENAI,
    OPENAI_CHAT_PREFIXES,
    XAI,
    FeatureFlags,
    ProviderInfo,
    RemoteModel,
)
from .stream import StreamCloser

if TYPE_CHECKING:
    # noreorder
    from openai import OpenAI  # fmt: skip

logger = logging.getLogger(__name__)

# the SDK refuses to build a client without a key, local servers ignore it
PLACEHOLDER_API_KEY = "ollama"


def get_client(api_key: str, base_url: str) -> "OpenAI":
    from openai import OpenAI  # fmt: skip

    return OpenAI(
        api_key=api_key or PLACEHOLDER_API_KEY,
        base_url=base_url,
        max_retries=0,
    )


class OpenAICompatProvider(Provider):
    """A provider speaking the OpenAI chat completions protocol.

    One class serves every such backend, configured by its :class:`ProviderInfo`.

    Args:
        info: name, credentials, default base URL and aliases of the backend
        model_prefixes: if set, only list models whose ID starts with one of these
    """

    def __init__(
        self,
        info: ProviderInfo,
        model_prefixes: tuple[str, ...] | None = None,
    ):
        super().__init__(info)
        self.model_prefixes = model_prefixes

    def _base_url(self, base_url: str | None) -> str:
        url = base_url or self.info.base_url
        if not url:
            raise ValueError(f"No base URL for provider {self.name}")
        return url

    def stream(
        self,
        prompt: str,
        model_id: str,
        api_key: str,
        base_url: str | None,
        features: FeatureFlags,
        closer: StreamCloser | None = None,
    ) -> Iterator[str]:
        from openai import NOT_GIVEN  # fmt: skip

        client = get_client(api_key, self._base_url(base_url))
        response = client.chat.completions.create(
            model=model_id,
            messages=[{"role": "user", "content": prompt}],
            stream=True,
            web_search_options=(
                {"search_context_size": "medium"} if features.web_search else NOT_GIVEN
            ),
        )
        if closer is not None:
            closer.register(response.close)
        stop_reason = None
        for chunk in response:
            if not chunk.choices:
                continue
            choice = chunk.choices[0]
            stop_reason = choice.finish_reason or stop_reason
            if choice.delta.content is not None:
                yield choice.delta.content
        logger.debug(f"Stop reason: {stop_reason}")

    def list_models(self, api_key: str, base_url: str | None) -> list[RemoteModel]:
        client = get_client(api_key, self._base_url(base_url))
        try:
            models = [RemoteModel(id=m.id) for m in client.models.list()]
        except Exception as e:
            raise BackendError(self.name, e) from e
        if self.model_prefixes:
            models = [m for m in models if m.id.startswith(self.model_prefixes)]
        return models


class OllamaProvider(OpenAICompatProvider):
    """Ollama's OpenAI-compatible endpoint, listing models from its native API."""

    def __init__(self, info: ProviderInfo = OLLAMA):
        super().__init__(info)

    def list_models(self, api_key: str, base_url: str | None) -> list[RemoteModel]:
        base = self._base_url(base_url).rstrip("/")
        tags_url = base.removesuffix("/v1") + "/api/tags"
        try:
            response = requests.get(tags_url, timeout=10)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise BackendError(
                self.name, f"failed to connect to Ollama at {tags_url}: {e}"
            ) from e
        except ValueError as e:
            raise BackendError(
                self.name, f"failed to parse Ollama response: {e}"
            ) from e
        try:
            return [RemoteModel(id=m["name"]) for m in data.get("models", [])]
        except (AttributeError, KeyError, TypeError) as e:
            raise BackendError(
                self.name, f"unexpected Ollama response from {tags_url}: {e!r}"
            ) from e


def openai_provider() -> OpenAICompatProvider:
    return OpenAICompatProvider(OPENAI, model_prefixes=OPENAI_CHAT_PREFIXES)


def xai_provider() -> OpenAICompatProvider:
    return OpenAICompatProvider(XAI)
