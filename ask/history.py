import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path

from .dirs import get_history_file

logger = logging.getLogger(__name__)

# long prompts are usually piped files, not worth re-running
MAX_PROMPT_LENGTH = 1000


@dataclass(frozen=True)
class HistoryEntry:
    prompt: str
    timestamp: float


def save_history(prompt: str, path: Path | None = None) -> None:
    if not prompt.strip() or len(prompt) > MAX_PROMPT_LENGTH:
        return
    path = path or get_history_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    entry = HistoryEntry(prompt=prompt, timestamp=time.time())
    with open(path, "a") as f:
        f.write(json.dumps(asdict(entry)) + "\n")


def load_history(limit: int | None = 100, path: Path | None = None) -> list[HistoryEntry]:
    """Past prompts, newest first, each prompt listed once."""
    path = path or get_history_file()
    if not path.exists():
        return []

    entries: list[HistoryEntry] = []
    with open(path) as f:
        for lineno, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                entries.append(HistoryEntry(**json.loads(line)))
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping invalid history line {lineno}: {e}")

    seen: set[str] = set()
    result: list[HistoryEntry] = []
    for entry in reversed(entries):
        if entry.prompt in seen:
            continue
        seen.add(entry.prompt)
        result.append(entry)
        if limit is not None and len(result) >= limit:
            break
    return result


def clear_history(path: Path | None = None) -> None:
    path = path or get_history_file()
    path.unlink(missing_ok=True)
