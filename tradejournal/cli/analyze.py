"""Analysis commands for Trade Journal CLI.

Performance report, current streak, timing breakdown and tag performance.
"""

import math

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.analysis.engine import TradeAnalyzer
from tradejournal.analysis.streaks import current_streak
from tradejournal.analysis.tags import (
    MIN_TAG_TRADES,
    REPORT_TOP_N,
    SUMMARY_TOP_N,
    format_tag,
    tag_performance,
)
from tradejournal.analysis.timing import (
    find_golden_hour,
    time_window_stats,
    timing_insights,
    weekday_hour_heatmap,
)
from tradejournal.cli.common import console, fail, get_cli_settings, get_data_store, pnl_markup
from tradejournal.errors import InsufficientTradesError
from tradejournal.models import AnalysisResult, TagStat


GRADE_COLORS = {"A": "green", "B": "cyan", "C": "yellow", "D": "red"}
WEEKDAYS = {1: "Mon", 2: "Tue", 3: "Wed", 4: "Thu", 5: "Fri"}


def _format_profit_factor(value: float) -> str:
    return f"{value:.2f}" if math.isfinite(value) else "∞"


def _tag_table(title: str, stats: list[TagStat], symbol: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Tag", style="bold")
    table.add_column("Category", style="dim")
    table.add_column("Trades", justify="right")
    table.add_column("Win Rate", justify="right")
    table.add_column("P&L", justify="right")
    for stat in stats:
        category = stat.tag.partition(":")[0]
        table.add_row(
            format_tag(stat.tag),
            category,
            str(stat.trade_count),
            f"{stat.win_rate:.0f}%",
            pnl_markup(stat.total_pnl, symbol),
        )
    return table


def _print_report(result: AnalysisResult, symbol: str) -> None:
    grade = result.performance_grade
    color = GRADE_COLORS[grade.grade]
    console.print(Panel(
        f"{result.overall_summary}\n\n"
        f"[bold {color}]Grade {grade.grade}[/bold {color}] - {grade.summary}",
        title="[bold]Performance Report[/bold]",
        border_style=color,
    ))

    metrics = result.key_metrics
    table = Table(title="Key Metrics", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Trades", str(metrics.trade_count))
    table.add_row("Total P&L", pnl_markup(metrics.total_pnl, symbol))
    table.add_row("Win Rate", f"{metrics.win_rate:.1f}%")
    table.add_row("Profit Factor", _format_profit_factor(metrics.profit_factor))
    table.add_row("Avg Win", pnl_markup(metrics.avg_win, symbol))
    table.add_row("Avg Loss", pnl_markup(metrics.avg_loss, symbol))
    table.add_row("Consistency", f"{metrics.consistency_score}/10")
    console.print(table)

    if result.strengths:
        console.print("\n[bold green]Strengths[/bold green]")
        for item in result.strengths:
            console.print(f"  [green]+[/green] {item}")
    if result.weaknesses:
        console.print("\n[bold red]Weaknesses[/bold red]")
        for item in result.weaknesses:
            console.print(f"  [red]-[/red] {item}")

    if result.actionable_insights:
        console.print("\n[bold]Actionable Insights[/bold]")
        for insight in result.actionable_insights:
            tags = ", ".join(format_tag(tag) for tag in insight.related_tags)
            console.print(f"  [cyan]•[/cyan] {insight.pattern}")
            console.print(f"    [dim]→ {insight.recommendation}[/dim]")
            if tags:
                console.print(f"    [dim]Tags: {tags}[/dim]")

    if result.key_observations:
        console.print("\n[bold]Observations[/bold]")
        for observation in result.key_observations:
            console.print(f"  [dim][{observation.topic}][/dim] {observation.text}")

    # The text report shows the short lists; `tags` and --json carry the full ones
    profitable = result.tag_performance.profitable[:SUMMARY_TOP_N]
    unprofitable = result.tag_performance.unprofitable[:SUMMARY_TOP_N]
    if profitable:
        console.print()
        console.print(_tag_table("Top Profitable Tags", profitable, symbol))
    if unprofitable:
        console.print()
        console.print(_tag_table("Top Losing Tags", unprofitable, symbol))


@click.command()
@click.option(
    "--ai/--no-ai",
    "use_ai",
    default=None,
    help="Add narrative feedback from the AI coach (default from config).",
)
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON.")
def analyze(use_ai: bool | None, as_json: bool) -> None:
    """Analyze your trading performance.

    Computes lifetime metrics, a consistency score and an A-D grade, tag
    performance, and insights on trends and timing. With --ai, an AI coach
    adds narrative feedback; only P&L, pair, direction, rating, weekday and
    tags are sent, never notes or photos. Metrics and the grade are always
    computed locally.

    \b
    Examples:
      tradejournal analyze           # Offline report
      tradejournal analyze --ai      # With AI coach feedback
      tradejournal analyze --json    # Machine-readable report
    """
    settings = get_cli_settings()
    store = get_data_store(settings)
    journal = store.get_trades()

    if use_ai is None:
        use_ai = settings.ai.enabled

    enricher = None
    if use_ai:
        from tradejournal.agents.base import get_api_key
        from tradejournal.agents.coach import TradingCoachEnricher

        if not get_api_key():
            console.print("[yellow]OPENAI_API_KEY is not set; showing the offline report.[/yellow]")
        else:
            enricher = TradingCoachEnricher(
                model=settings.ai.model,
                timeout=settings.ai.timeout_seconds,
            )

    analyzer = TradeAnalyzer(
        min_trades=settings.min_trades_for_analysis,
        enricher=enricher,
        catalog=settings.message_catalog(),
        format_currency=settings.currency_formatter(),
    )

    try:
        if enricher is not None and not as_json:
            with console.status("[dim]Asking the trading coach...[/dim]"):
                result = analyzer.analyze(journal)
        else:
            result = analyzer.analyze(journal)
    except InsufficientTradesError as e:
        fail(f"{e}\n\nLog more trades and run the analysis again.", title="Not Enough Trades")

    if as_json:
        click.echo(result.model_dump_json(indent=2))
        return

    _print_report(result, settings.currency_symbol)


@click.command()
def streak() -> None:
    """Show the current win or loss streak.

    A streak is reported once the last three or more trades share an
    outcome.
    """
    store = get_data_store(get_cli_settings())
    run = current_streak(store.get_trades())

    if run is None:
        console.print("[dim]No active streak[/dim]")
        return

    if run.type == "win":
        text = f"[bold green]{run.length} wins in a row[/bold green]"
        hint = "Stay disciplined and stick to your plan." if run.is_high_impact else "Keep it going."
        border = "green"
    else:
        text = f"[bold red]{run.length} losses in a row[/bold red]"
        hint = "Consider stepping away or reducing size." if run.is_high_impact else "Review before the next trade."
        border = "red"

    console.print(Panel(
        f"{text}\n[dim]{hint}[/dim]",
        title=f"[bold]Streak ({run.impact} impact)[/bold]",
        border_style=border,
    ))


@click.command()
@click.option("--heatmap", is_flag=True, help="Also show the weekday x hour heatmap.")
def timing(heatmap: bool) -> None:
    """Show when you trade best.

    Breaks P&L down by named session windows and finds your golden hour.
    Only trades with a recorded time are counted.
    """
    settings = get_cli_settings()
    symbol = settings.currency_symbol
    journal = get_data_store(settings).get_trades()

    if not any(trade.time is not None for trade in journal):
        console.print("[dim]No trades with a recorded time[/dim]")
        return

    table = Table(title="Time Windows", show_header=True, header_style="bold cyan")
    table.add_column("Window", style="bold")
    table.add_column("Hours", style="dim")
    table.add_column("Trades", justify="right")
    table.add_column("Win Rate", justify="right")
    table.add_column("P&L", justify="right")
    for stat in time_window_stats(journal):
        table.add_row(
            stat.name,
            f"{stat.start}-{stat.end}",
            str(stat.trade_count),
            f"{stat.win_rate:.0f}%" if stat.trade_count else "-",
            pnl_markup(stat.total_pnl, symbol) if stat.trade_count else "-",
        )
    console.print(table)

    insights = timing_insights(journal)
    if insights.best:
        console.print(f"[green]Best window:[/green] {insights.best.name} ({insights.best.win_rate:.0f}% win rate)")
    if insights.worst:
        console.print(f"[red]Worst window:[/red] {insights.worst.name} ({pnl_markup(insights.worst.total_pnl, symbol)})")

    golden = find_golden_hour(journal)
    if golden:
        console.print(
            f"[bold]Golden hour:[/bold] {golden.hour:02d}:00-{(golden.hour + 1) % 24:02d}:00 "
            f"({pnl_markup(golden.avg_pnl, symbol)} per trade)"
        )

    if heatmap:
        cells = weekday_hour_heatmap(journal)
        grid = Table(title="Weekday x Hour P&L", show_header=True, header_style="bold cyan")
        grid.add_column("Hour", style="dim")
        for day in WEEKDAYS.values():
            grid.add_column(day, justify="right")
        by_slot = {(cell.day, cell.hour): cell for cell in cells}
        hours = sorted({cell.hour for cell in cells})
        for hour in hours:
            row = [f"{hour:02d}:00"]
            for day in WEEKDAYS:
                cell = by_slot.get((day, hour))
                row.append(pnl_markup(cell.pnl, symbol) if cell else "")
            grid.add_row(*row)
        console.print(grid)


@click.command()
@click.option("--top", "-n", type=int, default=REPORT_TOP_N, help="Tags to show per table.")
@click.option(
    "--min-trades",
    type=int,
    default=MIN_TAG_TRADES,
    help="Minimum trades for a tag to be ranked.",
)
def tags(top: int, min_trades: int) -> None:
    """Show which tags make and lose you money."""
    settings = get_cli_settings()
    performance = tag_performance(get_data_store(settings).get_trades(), n=top, min_trades=min_trades)

    if not performance.profitable and not performance.unprofitable:
        console.print(f"[dim]No tag has been used on {min_trades} or more trades yet[/dim]")
        return

    if performance.profitable:
        console.print(_tag_table("Top Profitable Tags", performance.profitable, settings.currency_symbol))
    if performance.unprofitable:
        console.print(_tag_table("Top Losing Tags", performance.unprofitable, settings.currency_symbol))
