"""Interactive configuration wizard."""

from dataclasses import replace

from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.text import Text

from .config import MODES, THEMES, Config, load_config, save_config
from .llm import default_registry
from .llm.models import PROVIDERS
from .util import console, path_with_tilde


def _mask(secret: str) -> str:
    if not secret:
        return "(not set)"
    return secret[:6] + "..." if len(secret) > 10 else "***"


def _summary(config: Config) -> Table:
    table = Table(title="Configuration", show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("mode", config.mode)
    if config.mode == "api":
        table.add_row("provider", config.resolved_provider)
        table.add_row("api_key", _mask(config.api_key))
        table.add_row("base_url", config.base_url or "(default)")
    table.add_row("default_model", config.default_model or "(default)")
    table.add_row("raw_output", str(config.raw_output))
    table.add_row("theme", config.theme)
    table.add_row("thinking", str(config.thinking))
    table.add_row("web_search", str(config.web_search))
    return table


def ask_config(current: Config) -> Config:  # pragma: no cover
    """Walk through every setting, using the current values as defaults."""
    config = replace(current, env=dict(current.env))

    config.mode = Prompt.ask(
        "Mode ([cyan]cli[/cyan] uses the claude CLI, [cyan]api[/cyan] calls a provider directly)",
        choices=list(MODES),
        default=current.mode,
    )

    provider_name = "anthropic"
    if config.mode == "api":
        provider_name = Prompt.ask(
            "Provider", choices=list(PROVIDERS), default=current.resolved_provider
        )
        config.provider = provider_name
        provider = default_registry().get(provider_name)

        if provider.env_key:
            api_key = Prompt.ask(
                f"API key (leave empty to keep current, or use ${provider.env_key})",
                password=True,
                default="",
                show_default=False,
            )
            if api_key:
                config.api_key = api_key
        config.base_url = Prompt.ask(
            "Base URL (leave empty for the default)",
            default=current.base_url if provider_name == current.provider else "",
            show_default=False,
        )

    provider = default_registry().get(provider_name)
    aliases = ", ".join(provider.model_aliases())
    config.default_model = Prompt.ask(
        f"Default model (alias: {aliases}, or a full model ID)",
        default=current.default_model or provider.default_model,
    )
    config.raw_output = Confirm.ask(
        "Output raw text instead of rendered markdown?", default=current.raw_output
    )
    config.theme = Prompt.ask("Theme", choices=list(THEMES), default=current.theme)
    config.thinking = Confirm.ask("Enable extended thinking?", default=current.thinking)
    config.web_search = Confirm.ask("Enable web search?", default=current.web_search)
    return config


def run_config_wizard() -> None:  # pragma: no cover
    console.print(
        Panel.fit(
            Text("ask configuration", style="bold green"),
            style="green",
            padding=(0, 2),
        )
    )
    try:
        config = ask_config(load_config())
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]Canceled, nothing saved.[/yellow]")
        return

    console.print()
    console.print(_summary(config))
    console.print()
    if not Confirm.ask("Save?", default=True):
        console.print("[yellow]Nothing saved.[/yellow]")
        return

    path = save_config(config)
    console.print(f"[green]Saved config to {path_with_tilde(path)}[/green]")
