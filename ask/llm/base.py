import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator

from .models import FeatureFlags, ProviderInfo, RemoteModel
from .stream import Emit, StreamCloser, run_streaming

logger = logging.getLogger(__name__)


class Provider(ABC):
    """A backend that can stream a reply to a single prompt.

    Subclasses implement :meth:`stream` and :meth:`list_models` for their SDK;
    model aliases, feature gating and error wrapping are shared.
    """

    def __init__(self, info: ProviderInfo):
        self.info = info

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def env_key(self) -> str:
        return self.info.env_key

    @property
    def default_model(self) -> str:
        return self.info.default_model

    def model_aliases(self) -> list[str]:
        return list(self.info.aliases)

    def resolve_model(self, alias: str) -> str:
        """Map an alias to a model ID. Anything else is taken as an ID already."""
        return self.info.aliases.get(alias, alias)

    def wants(self, features: FeatureFlags) -> FeatureFlags:
        """Requested features, minus the ones this backend can't do."""
        thinking = features.thinking and self.info.supports_thinking
        web_search = features.web_search and self.info.supports_web_search
        if features.thinking and not thinking:
            logger.debug(f"{self.name} does not support extended thinking, ignoring")
        if features.web_search and not web_search:
            logger.debug(f"{self.name} does not support web search, ignoring")
        return FeatureFlags(thinking=thinking, web_search=web_search)

    def run(
        self,
        prompt: str,
        model: str,
        api_key: str,
        base_url: str | None,
        features: FeatureFlags,
        emit: Emit,
        cancel: threading.Event | None = None,
    ) -> None:
        """Stream a reply to ``prompt``, passing text to ``emit`` as it arrives."""
        model_id = self.resolve_model(model)
        if not model_id:
            model_id = self.resolve_model(self.default_model)
        logger.debug(f"Requesting {self.name}/{model_id}")
        closer = StreamCloser() if cancel is not None else None
        chunks = self.stream(
            prompt, model_id, api_key, base_url, self.wants(features), closer=closer
        )
        run_streaming(self.name, chunks, emit, cancel=cancel, closer=closer)

    @abstractmethod
    def stream(
        self,
        prompt: str,
        model_id: str,
        api_key: str,
        base_url: str | None,
        features: FeatureFlags,
        closer: StreamCloser | None = None,
    ) -> Iterator[str]:
        """Yield text fragments of the reply. Nothing is sent until iterated.

        If ``closer`` is given, the SDK stream registers its ``close`` with it
        once open, so a canceled request can drop the connection.
        """

    @abstractmethod
    def list_models(self, api_key: str, base_url: str | None) -> list[RemoteModel]:
        """List the models the backend currently offers.

        Raises:
            BackendError: if the request fails
        """
