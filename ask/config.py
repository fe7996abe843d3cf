import logging
import os
from contextvars import ContextVar
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError
from typing_extensions import Self

from .dirs import get_config_path
from .util import path_with_tilde

logger = logging.getLogger(__name__)

MODES = ("cli", "api")
THEMES = ("auto", "dark", "light")
DEFAULT_PROVIDER = "anthropic"


@dataclass
class Config:
    """
    User configuration, as stored in ``config.toml``.

    Command-line flags take precedence over these values; unset values fall back to them.
    """

    # "cli" forwards queries to the claude CLI, "api" talks to a provider directly
    mode: str = "cli"
    provider: str = ""
    api_key: str = ""
    base_url: str = ""
    default_model: str = ""
    raw_output: bool = False
    theme: str = "auto"
    thinking: bool = False
    web_search: bool = False

    env: dict[str, str] = field(default_factory=dict)

    @property
    def resolved_provider(self) -> str:
        """The configured provider name, defaulting to anthropic."""
        return self.provider or DEFAULT_PROVIDER

    @classmethod
    def from_dict(cls, doc: dict) -> Self:
        """Create a Config from a dictionary. Warns about unknown keys."""
        doc = dict(doc)
        known = {f.name for f in fields(cls)}
        kwargs = {k: doc.pop(k) for k in list(doc) if k in known}
        if doc:
            logger.warning(f"Unknown keys in config: {list(doc.keys())}")
        config = cls(**kwargs)
        if config.mode not in MODES:
            logger.warning(f"Unknown mode {config.mode!r} in config, using 'cli'")
            config.mode = "cli"
        if config.theme not in THEMES:
            logger.warning(f"Unknown theme {config.theme!r} in config, using 'auto'")
            config.theme = "auto"
        return config

    def to_dict(self) -> dict:
        return asdict(self)

    def get_env(self, key: str, default: str | None = None) -> str | None:
        """Gets an environment variable, checks the config file if it's not set in the environment."""
        if not key:
            return default
        return os.environ.get(key) or self.env.get(key) or default

    def get_env_bool(self, key: str, default: bool | None = None) -> bool | None:
        if env_value := self.get_env(key):
            return env_value.lower() in ("1", "true", "yes", "on")
        return default


def load_config(path: Path | None = None) -> Config:
    """Load the configuration file.

    A missing file gives the default configuration, as does a file that can't be parsed.
    """
    if path is None:
        path = get_config_path()
    if not path.exists():
        return Config()
    try:
        with open(path) as config_file:
            doc = tomlkit.load(config_file).unwrap()
    except (OSError, TOMLKitError) as e:
        logger.warning(f"Failed to read config at {path_with_tilde(path)}: {e}")
        return Config()
    try:
        return Config.from_dict(doc)
    except TypeError as e:
        logger.warning(f"Invalid config at {path_with_tilde(path)}: {e}")
        return Config()


def save_config(config: Config, path: Path | None = None) -> Path:
    """Write the configuration file, creating its directory if needed."""
    if path is None:
        path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    doc = tomlkit.document()
    for key, value in config.to_dict().items():
        if key == "env":
            continue
        doc[key] = value
    env = tomlkit.table()
    env.update(config.env)
    doc["env"] = env
    with open(path, "w") as config_file:
        tomlkit.dump(doc, config_file)
    # may contain an API key
    path.chmod(0o600)
    return path


# Each context (thread/async task) gets its own configuration
_config_var: ContextVar[Config | None] = ContextVar("config", default=None)


def get_config() -> Config:
    """Get the current configuration, loading it on first use."""
    config = _config_var.get()
    if config is None:
        config = load_config()
        _config_var.set(config)
    return config


def set_config(config: Config | None):
    """Set the configuration. ``None`` makes the next get_config() reload from disk."""
    _config_var.set(config)


def reload_config() -> Config:
    """Reload the configuration file."""
    config = load_config()
    _config_var.set(config)
    return config
