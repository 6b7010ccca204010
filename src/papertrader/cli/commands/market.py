"""Market commands - quotes, symbol search and indicator charts."""

import sys

import click
from rich.console import Console
from rich.markup import escape

from papertrader.cli.context import CliContext
from papertrader.cli.ui import create_chart_table, create_quote_table, create_search_table
from papertrader.services.market_data import ChartRange, MarketDataError


@click.group("market")
def market_group():
    """Market data - quote, search, chart"""
    pass


@market_group.command("quote")
@click.argument("symbol")
@click.pass_obj
def quote(app: CliContext, symbol: str):
    """
    Show the current quote for a symbol.

    Example:
        papertrader market quote AAPL
    """
    console = Console()

    try:
        result = app.market_data.get_quote(symbol)
    except MarketDataError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    console.print(create_quote_table(result))


@market_group.command("search")
@click.argument("query")
@click.pass_obj
def search(app: CliContext, query: str):
    """
    Search equities by name or symbol.

    Example:
        papertrader market search apple
    """
    console = Console()

    try:
        results = app.market_data.search(query)
    except MarketDataError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    if not results:
        console.print(f"[yellow]No equities match '{escape(query)}'[/yellow]")
        return

    console.print(create_search_table(query, results))


@market_group.command("chart")
@click.argument("symbol")
@click.option(
    "--range",
    "chart_range",
    type=click.Choice([r.value for r in ChartRange]),
    default=ChartRange.SIX_MONTHS.value,
    show_default=True,
    help="Lookback window",
)
@click.option("--rows", type=click.IntRange(min=1), default=10, show_default=True, help="Trailing bars to show")
@click.pass_obj
def chart(app: CliContext, symbol: str, chart_range: str, rows: int):
    """
    Show recent bars with SMA(20), SMA(50) and RSI(14).

    Example:
        papertrader market chart AAPL --range 1y
    """
    console = Console()

    try:
        data = app.charts.get_chart(symbol, chart_range)
    except MarketDataError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    console.print(create_quote_table(data.quote))
    console.print(create_chart_table(data, rows))
    console.print(f"[dim]{len(data.history)} bars[/dim]")
