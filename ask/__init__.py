from .__version__ import __version__
from .argv import classify
from .config import Config, get_config
from .errors import (
    AskError,
    BackendError,
    CancellationError,
    MissingCredentialError,
    UnknownProviderError,
)
from .llm import FeatureFlags, run_api

__all__ = [
    "AskError",
    "BackendError",
    "CancellationError",
    "Config",
    "FeatureFlags",
    "MissingCredentialError",
    "UnknownProviderError",
    "__version__",
    "classify",
    "get_config",
    "run_api",
]
