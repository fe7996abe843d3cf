import sys

from rich.prompt import Prompt

from .util import console


def read_stdin() -> str:
    chunk_size = 1024  # 1 KB
    all_data = ""

    while True:
        chunk = sys.stdin.read(chunk_size)
        if not chunk:
            break
        all_data += chunk

    return all_data


def build_prompt(words: list[str] | tuple[str, ...], piped: str | None = None) -> str:
    """Join prompt words, appending piped input as a fenced block.

    Returns an empty string if there is neither.
    """
    prompt = " ".join(words).strip()
    if not piped or not piped.strip():
        return prompt
    stdin_block = f"```stdin\n{piped.rstrip()}\n```"
    if not prompt:
        return stdin_block
    return f"{prompt}\n\n{stdin_block}"


def read_interactive_prompt() -> str | None:  # pragma: no cover
    """Ask for a prompt on the terminal, so no shell escaping is needed.

    Returns None if the user cancels with Ctrl-C or Ctrl-D.
    """
    try:
        return Prompt.ask("[bold cyan]ask[/bold cyan]", console=console).strip()
    except (KeyboardInterrupt, EOFError):
        console.print()
        return None
