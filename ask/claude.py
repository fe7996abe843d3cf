"""
Forwards a query to the claude CLI, for when ask runs in "cli" mode.
"""

import logging
import shlex
import shutil
import subprocess

from .errors import BackendError, ExecutableNotFoundError
from .render import StreamRenderer

logger = logging.getLogger(__name__)

CLAUDE_BIN = "claude"


def find_claude() -> str:
    if path := shutil.which(CLAUDE_BIN):
        return path
    raise ExecutableNotFoundError(CLAUDE_BIN)


def build_claude_command(
    prompt: str,
    model: str | None,
    passthrough: list[str] | None = None,
    executable: str = CLAUDE_BIN,
) -> list[str]:
    """Build the claude invocation. Unknown ask flags are appended as given."""
    cmd = [executable, "-p", prompt]
    if model:
        cmd += ["--model", model]
    cmd += passthrough or []
    return cmd


def run_claude(
    prompt: str,
    model: str | None,
    passthrough: list[str] | None = None,
    dry_run: bool = False,
    raw: bool = False,
    theme: str = "auto",
) -> None:
    """Run claude on the prompt.

    Raw output goes straight to the terminal, otherwise it is rendered as markdown.

    Raises:
        ExecutableNotFoundError: claude isn't installed
        BackendError: claude exited with an error
    """
    if dry_run:
        print(shlex.join(build_claude_command(prompt, model, passthrough)))
        return

    cmd = build_claude_command(prompt, model, passthrough, executable=find_claude())
    logger.debug(f"Running: {shlex.join(cmd[:1] + cmd[3:])}")

    if raw:
        proc = subprocess.run(cmd)
    else:
        proc = subprocess.run(cmd, stdout=subprocess.PIPE, text=True)
        if proc.stdout:
            StreamRenderer(raw=False, theme=theme).render_all(proc.stdout)

    if proc.returncode != 0:
        raise BackendError(CLAUDE_BIN, f"exited with status {proc.returncode}")
