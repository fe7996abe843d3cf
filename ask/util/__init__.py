"""
Shared consoles and small helpers.
"""

import sys
import time
from pathlib import Path

from rich.console import Console

# replies go to stdout, logs and errors to stderr
console = Console(log_path=False)
console_err = Console(stderr=True, log_path=False)


def path_with_tilde(path: Path) -> str:
    home = str(Path.home())
    path_str = str(path)
    if path_str.startswith(home):
        return path_str.replace(home, "~", 1)
    return path_str


def is_piped() -> bool:
    """True if stdin is not attached to a terminal."""
    return not sys.stdin.isatty()


def epoch_to_age(epoch: float) -> str:
    age = time.time() - epoch
    if age < 60:
        return "just now"
    elif age < 3600:
        return f"{int(age / 60)}m ago"
    elif age < 86400:
        return f"{int(age / 3600)}h ago"
    return f"{int(age / 86400)}d ago"
