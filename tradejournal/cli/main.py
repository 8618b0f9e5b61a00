"""Main CLI entry point for Trade Journal.

This module provides the main click group and lazy loading
for heavy imports to improve startup time.
"""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Command modules are only imported when they are actually invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]

        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)

        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Lazily load a command from its module path."""
        import importlib

        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        # Commands are looked up by their click name, since "import" is not
        # a valid attribute name
        cmd = None
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if isinstance(attr, click.Command) and attr.name == cmd_name:
                cmd = attr
                break

        if cmd is None:
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(cmd)
        return cmd


# Define lazy subcommands mapping
LAZY_SUBCOMMANDS = {
    # Journal
    "add": "tradejournal.cli.journal",
    "trades": "tradejournal.cli.journal",
    "delete": "tradejournal.cli.journal",
    "goal": "tradejournal.cli.journal",
    # Import / export
    "import": "tradejournal.cli.data",
    "export": "tradejournal.cli.data",
    # Analysis
    "analyze": "tradejournal.cli.analyze",
    "streak": "tradejournal.cli.analyze",
    "timing": "tradejournal.cli.analyze",
    "tags": "tradejournal.cli.analyze",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="tradejournal")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.config/tradejournal/config.toml).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """Trade Journal - log trades and analyze your trading performance.

    Journal trades by hand or import broker reports, then get a graded
    performance report with tag, timing and streak analysis. An optional
    AI coach adds narrative feedback.

    \b
    Quick Start:
      tradejournal add EURUSD --pnl 120 --tag strategy:Breakout
      tradejournal import statement.htm
      tradejournal analyze
    """
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
