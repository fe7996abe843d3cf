import os
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir


def get_config_dir() -> Path:
    # used in testing, so must take precedence
    if "XDG_CONFIG_HOME" in os.environ:
        return Path(os.environ["XDG_CONFIG_HOME"]) / "ask"
    return Path(user_config_dir("ask"))


def get_data_dir() -> Path:
    if "XDG_DATA_HOME" in os.environ:
        return Path(os.environ["XDG_DATA_HOME"]) / "ask"
    return Path(user_data_dir("ask"))


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def get_history_file() -> Path:
    return get_data_dir() / "history.jsonl"
