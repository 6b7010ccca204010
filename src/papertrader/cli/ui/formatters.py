"""Rich table formatters for CLI output."""

from decimal import Decimal
from typing import Optional, Sequence

from rich.table import Table

from papertrader.services.charting import ChartData
from papertrader.services.ledger.models import PortfolioSummary, TradeResult, TradeSide, Transaction
from papertrader.services.market_data.models import Quote, SearchResult


def format_money(value: Optional[Decimal]) -> str:
    """Format an amount as $1,234.56 (negative as -$1,234.56)."""
    if value is None:
        return "-"
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_signed(value: Optional[Decimal]) -> str:
    """Format a profit with colour: green when >= 0, red otherwise."""
    if value is None:
        return "-"
    colour = "green" if value >= 0 else "red"
    return f"[{colour}]{format_money(value)}[/{colour}]"


def format_indicator(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.2f}"


def create_summary_table(summary: PortfolioSummary) -> Table:
    """
    Create a Rich table of priced holdings.

    Args:
        summary: Portfolio summary from the ledger

    Returns:
        Table with one row per holding
    """
    table = Table(title=f"Portfolio - {summary.account_id}")
    table.add_column("Symbol", style="cyan", no_wrap=True)
    table.add_column("Qty", justify="right", style="magenta")
    table.add_column("Avg Cost", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Value", justify="right", style="yellow")
    table.add_column("P&L", justify="right")

    for holding in summary.holdings:
        table.add_row(
            holding.symbol,
            str(holding.quantity),
            format_money(holding.average_cost),
            format_money(holding.current_price),
            format_money(holding.market_value),
            format_signed(holding.profit),
        )
    return table


def create_totals_table(summary: PortfolioSummary) -> Table:
    """Create a Field/Value table with cash, total value and profit."""
    table = Table(show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")

    table.add_row("Cash", format_money(summary.cash))
    table.add_row("Total Value", format_money(summary.total_value))
    table.add_row("Profit", format_signed(summary.profit))
    return table


def create_history_table(account_id: str, transactions: Sequence[Transaction]) -> Table:
    """
    Create a Rich table for transaction history (newest first).

    Args:
        account_id: Account shown in the title
        transactions: Transactions as returned by the ledger
    """
    table = Table(title=f"Transactions - {account_id}")
    table.add_column("Time (UTC)", style="dim", no_wrap=True)
    table.add_column("Side", no_wrap=True)
    table.add_column("Symbol", style="cyan", no_wrap=True)
    table.add_column("Qty", justify="right", style="magenta")
    table.add_column("Price", justify="right")
    table.add_column("Total", justify="right", style="yellow")

    for transaction in transactions:
        side = "[green]BUY[/green]" if transaction.side == TradeSide.BUY else "[red]SELL[/red]"
        table.add_row(
            transaction.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            side,
            transaction.symbol,
            str(transaction.quantity),
            format_money(transaction.price),
            format_money(transaction.notional),
        )
    return table


def create_trade_table(result: TradeResult) -> Table:
    """Create a Field/Value table describing an executed trade."""
    transaction = result.transaction
    position = result.new_position

    table = Table(title=f"{transaction.side.value.upper()} {transaction.quantity} {transaction.symbol}")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")

    table.add_row("Price", format_money(transaction.price))
    table.add_row("Total", format_money(transaction.notional))
    table.add_row("Cash", format_money(result.new_cash))
    table.add_row("Shares Held", str(position.quantity))
    if position.quantity > 0:
        table.add_row("Avg Cost", format_money(position.average_cost))
    return table


def create_quote_table(quote: Quote) -> Table:
    """Create a Field/Value table for a quote."""
    table = Table(title=f"Quote - {quote.symbol}")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")

    table.add_row("Price", format_money(quote.price))
    change = format_signed(quote.change)
    if quote.change_percent is not None:
        change = f"{change} ({quote.change_percent:+.2f}%)"
    table.add_row("Change", change)
    table.add_row("Day High", format_money(quote.day_high))
    table.add_row("Day Low", format_money(quote.day_low))
    table.add_row("Prev Close", format_money(quote.previous_close))
    table.add_row("Volume", "-" if quote.volume is None else f"{quote.volume:,}")
    return table


def create_search_table(query: str, results: Sequence[SearchResult]) -> Table:
    """Create a Rich table of search hits."""
    table = Table(title=f"Search - {query}")
    table.add_column("Symbol", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Exchange", style="dim")

    for result in results:
        table.add_row(result.symbol, result.name or "-", result.exchange or "-")
    return table


def create_chart_table(chart: ChartData, rows: int) -> Table:
    """
    Create a Rich table of the most recent bars with their indicators.

    Args:
        chart: Chart data from the chart service
        rows: Number of trailing bars to show
    """
    table = Table(title=f"{chart.symbol} - {chart.range.value} ({chart.range.interval} bars)")
    table.add_column("Date", style="dim", no_wrap=True)
    table.add_column("Close", justify="right")
    table.add_column("SMA20", justify="right", style="yellow")
    table.add_column("SMA50", justify="right", style="magenta")
    table.add_column("RSI14", justify="right", style="cyan")

    technical = chart.technical
    start = max(len(chart.history) - rows, 0)
    for i in range(start, len(chart.history)):
        bar = chart.history[i]
        table.add_row(
            bar.date.strftime("%Y-%m-%d %H:%M"),
            f"{bar.close:.2f}",
            format_indicator(technical.sma20[i]),
            format_indicator(technical.sma50[i]),
            format_indicator(technical.rsi[i]),
        )
    return table
