import sys

from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown

from .util import console as default_console

# theme setting -> pygments style for code blocks
CODE_THEMES = {
    "auto": "monokai",
    "dark": "monokai",
    "light": "friendly",
}


class StreamRenderer:
    """Output sink for a streamed reply.

    In raw mode text is written to stdout as-is. Otherwise the reply so far is
    re-rendered as markdown on every fragment. Either way output starts with
    the first fragment, nothing waits for the full reply.
    """

    def __init__(self, raw: bool = False, theme: str = "auto", console: Console | None = None):
        self.raw = raw
        self.code_theme = CODE_THEMES.get(theme, CODE_THEMES["auto"])
        self.console = console or default_console
        self.text = ""
        self._live: Live | None = None

    def __enter__(self) -> "StreamRenderer":
        if not self.raw:
            self._live = Live(
                console=self.console,
                auto_refresh=False,
                vertical_overflow="visible",
            )
            self._live.start()
        return self

    def __exit__(self, *exc) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None
        elif self.text and not self.text.endswith("\n"):
            sys.stdout.write("\n")
            sys.stdout.flush()

    def emit(self, text: str) -> None:
        self.text += text
        if self._live is None:
            sys.stdout.write(text)
            sys.stdout.flush()
        else:
            self._live.update(
                Markdown(self.text, code_theme=self.code_theme), refresh=True
            )

    def render_all(self, text: str) -> None:
        """Render a complete reply in one go."""
        with self:
            self.emit(text)
