import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from ..errors import BackendError
from .base import Provider
from .models import ANTHROPIC, FeatureFlags, ProviderInfo, RemoteModel
from .stream import StreamCloser

if TYPE_CHECKING:
    # noreorder
    from anthropic import Anthropic  # fmt: skip

logger = logging.getLogger(__name__)

MAX_TOKENS = 8192
# max_tokens must be larger than the thinking budget
MAX_TOKENS_THINKING = 16000
THINKING_BUDGET = 10000

WEB_SEARCH_TOOL = {"type": "web_search_20250305", "name": "web_search"}


def get_client(api_key: str, base_url: str | None = None) -> "Anthropic":
    from anthropic import Anthropic  # fmt: skip

    # failures surface to the caller as-is, we never retry
    return Anthropic(api_key=api_key, base_url=base_url or None, max_retries=0)


class AnthropicProvider(Provider):
    def __init__(self, info: ProviderInfo = ANTHROPIC):
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
        from anthropic import NOT_GIVEN  # fmt: skip

        client = get_client(api_key, base_url)
        with client.messages.stream(
            model=model_id,
            max_tokens=MAX_TOKENS_THINKING if features.thinking else MAX_TOKENS,
            messages=[{"role": "user", "content": prompt}],
            thinking=(
                {"type": "enabled", "budget_tokens": THINKING_BUDGET}
                if features.thinking
                else NOT_GIVEN
            ),
            tools=[WEB_SEARCH_TOOL] if features.web_search else NOT_GIVEN,
        ) as stream:
            if closer is not None:
                closer.register(stream.close)
            for event in stream:
                match event.type:
                    case "content_block_delta":
                        # thinking and tool input deltas are not part of the answer
                        if event.delta.type == "text_delta":
                            yield event.delta.text
                    case "message_delta":
                        logger.debug(f"Stop reason: {event.delta.stop_reason}")
                    case _:
                        pass

    def list_models(self, api_key: str, base_url: str | None) -> list[RemoteModel]:
        client = get_client(api_key, base_url)
        try:
            # iterating the page fetches the following pages
            return [
                RemoteModel(id=m.id, name=m.display_name)
                for m in client.models.list()
            ]
        except Exception as e:
            raise BackendError(self.name, e) from e
