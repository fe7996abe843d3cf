"""Exceptions raised by ask."""

from collections.abc import Iterable


class AskError(Exception):
    """Base class for errors reported to the user."""


class UnknownProviderError(AskError):
    """Raised when a provider name is not registered."""

    def __init__(self, name: str, available: Iterable[str] = ()):
        self.name = name
        self.available = list(available)
        msg = f"Unknown provider: {name!r}"
        if self.available:
            msg += f" (available: {', '.join(self.available)})"
        super().__init__(msg)


class MissingCredentialError(AskError):
    """Raised when a provider requires an API key and none is configured.

    The message names the environment variable to set, never a key value.
    """

    def __init__(self, provider: str, env_key: str):
        self.provider = provider
        self.env_key = env_key
        super().__init__(
            f"{provider} requires an API key. "
            f'Set "{env_key}" env var or "api_key" in config (run: ask config).'
        )


class BackendError(AskError):
    """Wraps a transport or API failure from a provider."""

    def __init__(self, provider: str, cause: BaseException | str):
        self.provider = provider
        self.cause = cause
        super().__init__(f"{provider} API error: {cause}")


class CancellationError(AskError):
    """Raised when the caller aborts an in-flight request."""

    def __init__(self, provider: str | None = None):
        self.provider = provider
        msg = f"{provider} request canceled" if provider else "request canceled"
        super().__init__(msg)


class ExecutableNotFoundError(AskError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name!r} not found in PATH")
