import logging
import sys
import threading

from ..config import Config
from ..errors import MissingCredentialError
from .base import Provider
from .models import FeatureFlags, RemoteModel
from .registry import ProviderRegistry, default_registry
from .stream import Emit

logger = logging.getLogger(__name__)

__all__ = [
    "FeatureFlags",
    "Provider",
    "ProviderRegistry",
    "RemoteModel",
    "default_registry",
    "get_provider",
    "list_remote_models",
    "resolve_api_key",
    "run_api",
]


def _write_stdout(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def get_provider(config: Config, registry: ProviderRegistry | None = None) -> Provider:
    """Get the provider selected in the config."""
    registry = registry or default_registry()
    return registry.get(config.resolved_provider)


def resolve_api_key(provider: Provider, config: Config) -> str:
    """Find the API key for a provider: its env var first, then the config.

    Providers without an env var (local servers) never require a key.
    """
    api_key = config.get_env(provider.env_key) or config.api_key
    if not api_key and provider.env_key:
        raise MissingCredentialError(provider.name, provider.env_key)
    return api_key or ""


def run_api(
    prompt: str,
    model: str | None,
    config: Config,
    features: FeatureFlags,
    *,
    dry_run: bool = False,
    registry: ProviderRegistry | None = None,
    emit: Emit | None = None,
    cancel: threading.Event | None = None,
) -> None:
    """Send a prompt to the configured provider and stream the reply to ``emit``.

    Raises:
        UnknownProviderError: the configured provider doesn't exist
        MissingCredentialError: the provider needs an API key and none is set
        BackendError: the request failed
        CancellationError: the request was canceled
    """
    provider = get_provider(config, registry)
    api_key = resolve_api_key(provider, config)

    model = model or provider.default_model
    model_id = provider.resolve_model(model)

    if dry_run:
        print(
            f"[{provider.name}] model={model_id} thinking={features.thinking} "
            f"search={features.web_search} prompt={prompt!r}"
        )
        return

    logger.debug(f"Using {provider.name} model {model_id}")
    provider.run(
        prompt,
        model,
        api_key,
        config.base_url or None,
        features,
        emit or _write_stdout,
        cancel=cancel,
    )


def list_remote_models(
    config: Config,
    *,
    registry: ProviderRegistry | None = None,
    provider: Provider | None = None,
) -> list[RemoteModel]:
    """List the models a provider offers, by default the configured one."""
    provider = provider or get_provider(config, registry)
    api_key = resolve_api_key(provider, config)
    return provider.list_models(api_key, config.base_url or None)
