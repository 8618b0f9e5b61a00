"""Journal commands for Trade Journal CLI.

Add, list and delete trades, and manage the P&L goal.
"""

from datetime import date, datetime, time
from typing import Optional

import click
from pydantic import ValidationError
from rich.panel import Panel
from rich.table import Table

from tradejournal.analysis.journal import (
    MIN_PAIR_USES,
    all_tag_keys,
    daily_summaries,
    filter_by_tags,
    learned_pairs,
    period_summaries,
    suggest_tags_for_pair,
)
from tradejournal.analysis.tags import format_tag
from tradejournal.cli.common import console, fail, get_cli_settings, get_data_store, pnl_markup
from tradejournal.models import Trade, TradeTags


def _parse_time(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    try:
        return time.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a valid HH:MM time.", param_hint="--time")


def _stars(rating: Optional[int]) -> str:
    return "★" * rating if rating else "-"


@click.command()
@click.argument("pair")
@click.option("--pnl", "-p", type=float, required=True, help="Realized P&L of the trade.")
@click.option(
    "--date",
    "trade_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Trade date (YYYY-MM-DD). Defaults to today.",
)
@click.option("--time", "trade_time", default=None, help="Trade time (HH:MM).")
@click.option(
    "--type",
    "trade_type",
    type=click.Choice(["long", "short"]),
    default=None,
    help="Trade direction.",
)
@click.option(
    "--tag",
    "-t",
    "tags",
    multiple=True,
    help="Tag as category:value, e.g. strategy:Breakout. Repeatable.",
)
@click.option("--rating", type=click.IntRange(1, 5), default=None, help="1-5 star rating.")
@click.option("--notes", default="", help="Free-form notes.")
def add(
    pair: str,
    pnl: float,
    trade_date: Optional[datetime],
    trade_time: Optional[str],
    trade_type: Optional[str],
    tags: tuple[str, ...],
    rating: Optional[int],
    notes: str,
) -> None:
    """Log a new trade.

    Tags without a known category prefix are stored as custom tags.

    \b
    Examples:
      tradejournal add EURUSD --pnl 120 --type long -t strategy:Breakout
      tradejournal add GBPJPY -p -45.5 --date 2024-03-01 --time 09:30
    """
    settings = get_cli_settings()
    store = get_data_store(settings)

    try:
        trade = Trade(
            date=trade_date.date() if trade_date else date.today(),
            time=_parse_time(trade_time),
            pair=pair,
            pnl=pnl,
            type=trade_type,
            tags=TradeTags.from_keys(tags),
            rating=rating,
            notes=notes,
        )
    except ValidationError as e:
        fail(f"Invalid trade: {e.errors()[0]['msg']}")

    store.add_trade(trade)
    console.print(
        f"[green]✓[/green] Logged {trade.pair} {pnl_markup(trade.pnl, settings.currency_symbol)} "
        f"[dim]({trade.id})[/dim]"
    )

    journal = store.get_trades()
    pair_uses = sum(1 for t in journal if t.pair == trade.pair)
    if pair_uses == MIN_PAIR_USES:
        console.print(f"[dim]{trade.pair} is now one of your usual pairs[/dim]")
    elif pair_uses == 1:
        usual = learned_pairs(journal)
        if usual:
            console.print(f"[dim]First {trade.pair} trade. Your usual pairs: {', '.join(usual)}[/dim]")

    if not tags:
        suggestions = suggest_tags_for_pair(journal, trade.pair)
        if suggestions:
            console.print(
                "[dim]Tags you often use with this pair: "
                + ", ".join(format_tag(s) for s in suggestions)
                + "[/dim]"
            )


@click.command()
@click.option(
    "--from",
    "from_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Only trades on or after this date.",
)
@click.option(
    "--to",
    "to_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Only trades on or before this date.",
)
@click.option("--limit", "-n", type=int, default=None, help="Show at most N trades.")
@click.option(
    "--tag",
    "-t",
    "tags",
    multiple=True,
    help="Only trades carrying this tag (key or bare value). Repeatable, all must match.",
)
@click.option("--daily", is_flag=True, help="Show daily totals instead of trades.")
@click.option("--weekly", is_flag=True, help="Show weekly totals instead of trades.")
@click.option("--monthly", is_flag=True, help="Show monthly totals instead of trades.")
@click.option("--yearly", is_flag=True, help="Show yearly totals instead of trades.")
def trades(
    from_date: Optional[datetime],
    to_date: Optional[datetime],
    limit: Optional[int],
    tags: tuple[str, ...],
    daily: bool,
    weekly: bool,
    monthly: bool,
    yearly: bool,
) -> None:
    """List journaled trades, most recent first.

    \b
    Examples:
      tradejournal trades                    # All trades
      tradejournal trades --from 2024-03-01  # Since March
      tradejournal trades -t Breakout        # Only Breakout trades
      tradejournal trades --daily            # Daily P&L
      tradejournal trades --monthly          # P&L and win rate per month
    """
    flags = {"day": daily, "week": weekly, "month": monthly, "year": yearly}
    chosen = [period for period, flag in flags.items() if flag]
    if len(chosen) > 1:
        fail("Use only one of --daily, --weekly, --monthly and --yearly.")
    summary = chosen[0] if chosen else None

    settings = get_cli_settings()
    store = get_data_store(settings)
    symbol = settings.currency_symbol

    journal = store.get_trades(
        from_date=from_date.date() if from_date else None,
        to_date=to_date.date() if to_date else None,
    )
    if tags:
        everything = journal
        journal = filter_by_tags(everything, tags)
        if everything and not journal:
            known = ", ".join(all_tag_keys(everything)) or "none"
            console.print(f"[yellow]No trades tagged {', '.join(tags)}[/yellow]")
            console.print(f"[dim]Tags in use: {known}[/dim]")
            return

    if not journal:
        console.print(Panel(
            "[dim]No trades found[/dim]",
            title="[bold]Trade Journal[/bold]",
            border_style="dim",
        ))
        return

    if summary == "day":
        table = Table(title="Daily P&L", show_header=True, header_style="bold cyan")
        table.add_column("Date", style="dim")
        table.add_column("Trades", justify="right")
        table.add_column("P&L", justify="right")
        for day, totals in reversed(list(daily_summaries(journal).items())):
            table.add_row(day.isoformat(), str(totals.trade_count), pnl_markup(totals.total_pnl, symbol))
        console.print(table)
    elif summary:
        table = Table(title=f"{summary.capitalize()}ly P&L", show_header=True, header_style="bold cyan")
        table.add_column(summary.capitalize(), style="dim")
        table.add_column("Trades", justify="right")
        table.add_column("Win Rate", justify="right")
        table.add_column("P&L", justify="right")
        for period in reversed(period_summaries(journal, summary)):
            table.add_row(
                period.label,
                str(period.trade_count),
                f"{period.win_rate:.0f}%",
                pnl_markup(period.total_pnl, symbol),
            )
        console.print(table)
    else:
        shown = journal[:limit] if limit else journal
        table = Table(title="Trade Journal", show_header=True, header_style="bold cyan")
        table.add_column("Date/Time", style="dim")
        table.add_column("Pair", style="bold")
        table.add_column("Type", justify="center")
        table.add_column("P&L", justify="right")
        table.add_column("Rating", justify="center")
        table.add_column("Tags")
        table.add_column("ID", style="dim")
        for trade in shown:
            type_color = "green" if trade.type == "long" else "red"
            table.add_row(
                f"{trade.date.isoformat()} {trade.time_str}".strip(),
                trade.pair,
                f"[{type_color}]{trade.type}[/{type_color}]" if trade.type else "-",
                pnl_markup(trade.pnl, symbol),
                _stars(trade.rating),
                ", ".join(format_tag(key) for key in trade.tags.keys()),
                trade.id,
            )
        console.print(table)

    total_pnl = sum(trade.pnl for trade in journal)
    console.print(f"\n[bold]Total Trades:[/bold] {len(journal)}")
    console.print(f"[bold]Total P&L:[/bold] {pnl_markup(total_pnl, symbol)}")

    goal = store.get_pnl_goal()
    if goal > 0:
        progress = max(0.0, total_pnl) / goal * 100
        console.print(f"[bold]Goal:[/bold] {symbol}{goal:,.2f} ({progress:.0f}% reached)")


@click.command()
@click.argument("trade_ids", nargs=-1)
@click.option("--all", "delete_all", is_flag=True, help="Delete every trade.")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
def delete(trade_ids: tuple[str, ...], delete_all: bool, yes: bool) -> None:
    """Delete trades by ID.

    \b
    Examples:
      tradejournal delete trade_1700000000000_abc123def
      tradejournal delete --all --yes
    """
    if not trade_ids and not delete_all:
        fail("Give one or more trade IDs, or --all.")

    store = get_data_store(get_cli_settings())

    if delete_all:
        if not yes:
            click.confirm("Delete every trade in the journal?", abort=True)
        store.clear_trades()
        console.print("[green]✓[/green] Journal cleared")
        return

    deleted = store.delete_trades(trade_ids)
    missing = len(trade_ids) - deleted
    console.print(f"[green]✓[/green] Deleted {deleted} trade(s)")
    if missing:
        console.print(f"[yellow]{missing} ID(s) not found[/yellow]")


@click.command()
@click.argument("amount", type=float, required=False)
def goal(amount: Optional[float]) -> None:
    """Show or set the P&L goal.

    Negative goals are stored as 0, which means no goal.

    \b
    Examples:
      tradejournal goal        # Show the goal
      tradejournal goal 5000   # Set the goal
    """
    settings = get_cli_settings()
    store = get_data_store(settings)

    if amount is None:
        current = store.get_pnl_goal()
        if current > 0:
            console.print(f"[bold]P&L goal:[/bold] {settings.currency_symbol}{current:,.2f}")
        else:
            console.print("[dim]No P&L goal set[/dim]")
        return

    stored = store.set_pnl_goal(amount)
    console.print(f"[green]✓[/green] P&L goal set to {settings.currency_symbol}{stored:,.2f}")
