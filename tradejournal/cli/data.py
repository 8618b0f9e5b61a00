"""Import and export commands for Trade Journal CLI."""

from pathlib import Path
from typing import Optional

import click
from rich.panel import Panel

from tradejournal.cli.common import console, fail, get_cli_settings, get_data_store
from tradejournal.errors import ImportFormatError
from tradejournal.importers import load_trades_file
from tradejournal.importers.backup import dump_backup


@click.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--replace",
    is_flag=True,
    help="Replace the whole journal instead of merging into it.",
)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
def import_trades(path: Path, replace: bool, yes: bool) -> None:
    """Import trades from a broker report or a JSON backup.

    \b
    Supported files:
      .htm, .html   Account history report (MetaTrader 4 style)
      .xlsx         Positions report (MetaTrader 5 style)
      .json         Trade Journal backup

    Imported trades are merged by ID; with --replace the journal is
    cleared first.

    \b
    Examples:
      tradejournal import Statement.htm
      tradejournal import backup.json --replace
    """
    store = get_data_store(get_cli_settings())

    try:
        imported = load_trades_file(path)
    except ImportFormatError as e:
        fail(str(e), title="Import Failed")

    if replace:
        if not yes:
            click.confirm(
                f"Replace the journal with {len(imported)} trade(s) from {path.name}?",
                abort=True,
            )
        count = store.replace_all_trades(imported)
    else:
        count = store.bulk_upsert_trades(imported)

    console.print(Panel(
        f"[green]Imported {count} trade(s)[/green] from [cyan]{path.name}[/cyan]",
        title="[bold]Import[/bold]",
        border_style="green",
    ))


@click.command()
@click.argument(
    "path",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    required=False,
)
def export(path: Optional[Path]) -> None:
    """Export the journal as a JSON backup.

    Writes to PATH, or to standard output when no path is given.

    \b
    Examples:
      tradejournal export backup.json
      tradejournal export > backup.json
    """
    store = get_data_store(get_cli_settings())
    data = dump_backup(store.get_trades())

    if path is None:
        click.echo(data)
        return

    path.write_text(data, encoding="utf-8")
    console.print(f"[green]✓[/green] Exported journal to [cyan]{path}[/cyan]")
