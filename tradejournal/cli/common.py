"""Helpers shared by the CLI command modules."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from tradejournal.config import Settings, get_settings, load_config

# Console for rich output
console = Console()


def get_cli_settings(ctx: Optional[click.Context] = None) -> Settings:
    """Resolve settings, honouring the group's ``--config`` option."""
    ctx = ctx or click.get_current_context()
    obj = ctx.find_object(dict) or {}
    config_path: Optional[Path] = obj.get("config_path")
    return get_settings(load_config(config_path))


def get_data_store(settings: Settings):
    """Get the data store instance."""
    from tradejournal.db.store import DataStore

    return DataStore(settings.db_path)


def fail(message: str, title: str = "Error") -> None:
    """Print an error panel and exit with status 1."""
    console.print(Panel(
        f"[red]{message}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def pnl_markup(value: float, symbol: str = "$") -> str:
    """Colored, signed money amount for tables."""
    color = "green" if value >= 0 else "red"
    sign = "+" if value >= 0 else "-"
    return f"[{color}]{sign}{symbol}{abs(value):,.2f}[/{color}]"
