import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from ..errors import BackendError
from .base import Provider
from .models import GEMINI, FeatureFlags, ProviderInfo, RemoteModel
from .stream import StreamCloser

if TYPE_CHECKING:
    # noreorder
    from google import genai  # fmt: skip
    from google.genai import types  # fmt: skip

logger = logging.getLogger(__name__)

THINKING_BUDGET = 10000


def get_client(api_key: str, base_url: str | None = None) -> "genai.Client":
    from google import genai  # fmt: skip
    from google.genai import types  # fmt: skip

    http_options = types.HttpOptions(base_url=base_url) if base_url else None
    return genai.Client(api_key=api_key, http_options=http_options)


def _make_config(features: FeatureFlags) -> "types.GenerateContentConfig | None":
    from google.genai import types  # fmt: skip

    if not (features.thinking or features.web_search):
        return None
    kwargs: dict = {}
    if features.thinking:
        kwargs["thinking_config"] = types.ThinkingConfig(thinking_budget=THINKING_BUDGET)
    if features.web_search:
        kwargs["tools"] = [types.Tool(google_search=types.GoogleSearch())]
    return types.GenerateContentConfig(**kwargs)


class GeminiProvider(Provider):
    def __init__(self, info: ProviderInfo = GEMINI):
        super().__init__(info)

    def stream(
        self,
        prompt: str,
        model_id: str,
        api_key: str,
        base_url: str | None,
        features: FeatureFlags,
        closer: StreamCloser | None = None,
    ) -> Iterator[str]:
        # the SDK stream has no close, a canceled request stops at the next chunk
        client = get_client(api_key, base_url)
        for chunk in client.models.generate_content_stream(
            model=model_id,
            contents=prompt,
            config=_make_config(features),
        ):
            # chunks carrying only grounding metadata have no text
            if chunk.text:
                yield chunk.text

    def list_models(self, api_key: str, base_url: str | None) -> list[RemoteModel]:
        client = get_client(api_key, base_url)
        models = []
        try:
            for m in client.models.list():
                if "generateContent" not in (m.supported_actions or []):
                    continue
                models.append(
                    RemoteModel(
                        id=(m.name or "").removeprefix("models/"),
                        name=m.display_name,
                    )
                )
        except Exception as e:
            raise BackendError(self.name, e) from e
        return models
