from collections.abc import Iterable, Iterator
from functools import lru_cache

from ..errors import UnknownProviderError
from .base import Provider


class ProviderRegistry:
    """Providers by name.

    Usage::

        registry = ProviderRegistry([AnthropicProvider()])
        provider = registry.get("anthropic")
    """

    def __init__(self, providers: Iterable[Provider] = ()):
        self._providers: dict[str, Provider] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: Provider) -> None:
        if provider.name in self._providers:
            raise ValueError(f"Provider {provider.name} already registered")
        self._providers[provider.name] = provider

    def get(self, name: str) -> Provider:
        try:
            return self._providers[name]
        except KeyError:
            raise UnknownProviderError(name, self.names()) from None

    def names(self) -> list[str]:
        return list(self._providers)

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __iter__(self) -> Iterator[Provider]:
        return iter(self._providers.values())

    def __len__(self) -> int:
        return len(self._providers)


@lru_cache(maxsize=1)
def default_registry() -> ProviderRegistry:
    """The built-in providers. Built on first use, never modified afterwards."""
    from .llm_anthropic import AnthropicProvider
    from .llm_gemini import GeminiProvider
    from .llm_openai import OllamaProvider, openai_provider, xai_provider

    return ProviderRegistry(
        [
            AnthropicProvider(),
            openai_provider(),
            xai_provider(),
            GeminiProvider(),
            OllamaProvider(),
        ]
    )
