import logging
import sys
from collections.abc import Generator
from contextlib import contextmanager

import click
from pick import pick
from rich.table import Table

from . import __version__
from .argv import SUBCOMMANDS, classify, first_positional_arg, needs_reorder
from .claude import run_claude
from .config import Config, get_config
from .errors import AskError, CancellationError
from .history import clear_history, load_history, save_history
from .init import init_env, init_logging
from .llm import FeatureFlags, default_registry, list_remote_models, run_api
from .prompt import build_prompt, read_interactive_prompt, read_stdin
from .render import StreamRenderer
from .setup import run_config_wizard
from .util import console, epoch_to_age, is_piped

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

docstring = """
ask is a fast CLI tool for single-shot LLM queries from the terminal.

It supports multiple providers (Anthropic, OpenAI, Gemini, xAI, Ollama),
rendered markdown output, pipe input, and query history.

Flags ask doesn't know are passed on to the claude CLI.

\b
Examples:
  ask "how to rebase"
  ask -m opus "complex question"
  ask --raw "question"             # skip markdown rendering
  ask                              # interactive mode (no shell escaping needed)
  git diff | ask "review this code"
  cat error.log | ask "analyze this error"
"""

commands_epilog = """
\b
Commands:
  config         Interactive configuration wizard
  history, h     Browse and re-run past queries
  models         List available models for the current provider
"""


def _is_verbose(config: Config) -> bool:
    return bool(config.get_env_bool("ASK_VERBOSE", False))


@contextmanager
def report_errors(verbose: bool = False) -> Generator[None, None, None]:
    """Turn ask errors into an error message and exit status."""
    try:
        yield
    except (CancellationError, KeyboardInterrupt):
        # intentional, nothing to report
        sys.exit(130)
    except AskError as e:
        if verbose:
            logger.exception(e)
        else:
            logger.error(f"Error: {e}")
        sys.exit(1)


def run_query(
    prompt: str,
    config: Config,
    model: str | None,
    features: FeatureFlags,
    raw: bool = False,
    dry_run: bool = False,
    passthrough: list[str] | None = None,
) -> None:
    if config.mode != "api":
        run_claude(
            prompt,
            model,
            passthrough,
            dry_run=dry_run,
            raw=raw,
            theme=config.theme,
        )
        return

    if passthrough:
        logger.warning(f"Ignoring unknown flags in api mode: {' '.join(passthrough)}")
    if dry_run:
        run_api(prompt, model, config, features, dry_run=True)
        return
    with StreamRenderer(raw=raw, theme=config.theme) as output:
        run_api(prompt, model, config, features, emit=output.emit)


def _bool_option(*names: str, help: str):
    # a flag which also accepts --flag=true/false, None when not given
    return click.option(
        *names,
        type=click.BOOL,
        is_flag=False,
        flag_value=True,
        default=None,
        help=help,
    )


@click.command(
    "ask",
    help=docstring,
    epilog=commands_epilog,
    context_settings=CONTEXT_SETTINGS,
)
@click.argument("prompt", nargs=-1)
@click.option(
    "-m",
    "--model",
    default=None,
    help="Model alias or full ID (provider-specific: sonnet, gpt4o, flash, etc.)",
)
@_bool_option("--dry-run", help="Print the request instead of sending it.")
@_bool_option("--raw", help="Output raw text without markdown rendering.")
@_bool_option("--think", help="Enable extended thinking.")
@_bool_option("--search", help="Enable web search.")
@click.version_option(
    __version__,
    "-v",
    "--version",
    prog_name="ask",
    message="%(prog)s version %(version)s",
)
@click.pass_context
def ask(
    ctx: click.Context,
    prompt: tuple[str, ...],
    model: str | None,
    dry_run: bool | None,
    raw: bool | None,
    think: bool | None,
    search: bool | None,
):
    """Main entrypoint for queries."""
    config = get_config()
    verbose = _is_verbose(config)
    init_logging(verbose)

    passthrough: list[str] = (ctx.obj or {}).get("passthrough", [])

    # flags win over config
    model = model or config.default_model or None
    raw = config.raw_output if raw is None else raw
    features = FeatureFlags(
        thinking=config.thinking if think is None else think,
        web_search=config.web_search if search is None else search,
    )

    piped_input = read_stdin() if is_piped() else None
    text = build_prompt(prompt, piped_input)
    if not text:
        if piped_input is not None:
            click.echo(ctx.get_help())
            return
        text = read_interactive_prompt()
        if text is None:
            # canceled with Ctrl-C/Ctrl-D
            return
        if not text:
            click.echo(ctx.get_help())
            return

    save_history(text)
    with report_errors(verbose):
        run_query(
            text,
            config,
            model,
            features,
            raw=raw,
            dry_run=bool(dry_run),
            passthrough=passthrough,
        )


@click.group("ask", context_settings=CONTEXT_SETTINGS)
def commands():
    """ask subcommands."""
    init_logging(_is_verbose(get_config()))


@commands.command("models")
@click.option(
    "--remote",
    is_flag=True,
    help="Query the provider API for all available models.",
)
def models_cmd(remote: bool):
    """List available models for the current provider.

    With --remote, query the provider API for all available models.
    """
    config = get_config()
    verbose = _is_verbose(config)
    provider_name = config.resolved_provider if config.mode == "api" else "anthropic"

    with report_errors(verbose):
        provider = default_registry().get(provider_name)

        console.print(f"Provider: {provider_name}\n")
        table = Table(box=None, padding=(0, 3))
        table.add_column("ALIAS")
        table.add_column("MODEL ID")
        for alias in provider.model_aliases():
            marker = " (default)" if alias == provider.default_model else ""
            table.add_row(alias, provider.resolve_model(alias) + marker)
        console.print(table)

        if remote:
            remote_models = list_remote_models(config, provider=provider)
            aliased = {provider.resolve_model(a) for a in provider.model_aliases()}
            extra = sorted(
                (m for m in remote_models if m.id not in aliased), key=lambda m: m.id
            )
            if extra:
                console.print("\n  Additional models:")
                for m in extra:
                    console.print(f"    {m}", highlight=False)

    console.print("\nTip: pass any full model ID with -m")


@commands.group("history", invoke_without_command=True)
@click.pass_context
def history_cmd(ctx: click.Context):
    """Browse and re-run past queries."""
    if ctx.invoked_subcommand:
        return

    entries = load_history()
    if not entries:
        console.print("No history yet.")
        return

    options = [
        f"{entry.prompt.splitlines()[0]}  ({epoch_to_age(entry.timestamp)})"
        for entry in entries
    ]
    try:
        _, index = pick(options, "Re-run a past query:")  # type: ignore
    except KeyboardInterrupt:
        return
    prompt = entries[int(index)].prompt  # type: ignore

    config = get_config()
    save_history(prompt)
    with report_errors(_is_verbose(config)):
        run_query(
            prompt,
            config,
            config.default_model or None,
            FeatureFlags(thinking=config.thinking, web_search=config.web_search),
            raw=config.raw_output,
        )


@history_cmd.command("clear")
def history_clear_cmd():
    """Clear all query history."""
    clear_history()
    console.print("History cleared.")


@commands.command("config")
def config_cmd():
    """Interactive configuration wizard."""
    run_config_wizard()


@commands.command("help")
@click.argument("command", required=False)
@click.pass_context
def help_cmd(ctx: click.Context, command: str | None):
    """Show help for ask or one of its commands."""
    if command is None:
        click.echo(ask.get_help(click.Context(ask, info_name="ask")))
        return
    cmd = commands.get_command(ctx, command)
    if cmd is None:
        raise click.UsageError(f"No such command: {command}")
    assert ctx.parent
    click.echo(cmd.get_help(click.Context(cmd, info_name=command, parent=ctx.parent)))


commands.add_command(history_cmd, "h")


def main(argv: list[str] | None = None):
    """Console entrypoint: route to a subcommand, or reorder and run a query."""
    init_env()
    args = list(sys.argv[1:] if argv is None else argv)

    if not needs_reorder(args):
        if first_positional_arg(args) in SUBCOMMANDS:
            commands.main(args=args, prog_name="ask")
        else:
            ask.main(args=args, prog_name="ask", obj={"passthrough": []})
        return

    classified = classify(args)
    if classified.missing_value:
        # click reports the missing value and exits with a usage error
        ask.main(args=[classified.missing_value], prog_name="ask")
        return
    ask.main(
        args=classified.args,
        prog_name="ask",
        obj={"passthrough": classified.passthrough},
    )
