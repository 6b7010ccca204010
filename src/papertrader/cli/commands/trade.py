"""Trade commands - market orders at the current quote."""

import sys

import click
from rich.console import Console
from rich.markup import escape

from papertrader.cli.context import CliContext
from papertrader.cli.ui import create_trade_table
from papertrader.services.ledger import LedgerError, TradeSide
from papertrader.services.market_data import MarketDataError


@click.group("trade")
def trade_group():
    """Trading - buy and sell at market"""
    pass


def _execute(app: CliContext, account_id: str, symbol: str, quantity: int, side: TradeSide) -> None:
    console = Console()

    try:
        result = app.desk.trade(account_id, symbol, quantity, side)
    except (LedgerError, MarketDataError) as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    console.print(create_trade_table(result))
    console.print(f"[green]✓ {side.value.upper()} {quantity} {result.transaction.symbol} executed[/green]")


@trade_group.command("buy")
@click.argument("account_id")
@click.argument("symbol")
@click.argument("quantity", type=int)
@click.pass_obj
def buy(app: CliContext, account_id: str, symbol: str, quantity: int):
    """
    Buy shares at the current quote.

    Example:
        papertrader trade buy alice AAPL 10
    """
    _execute(app, account_id, symbol, quantity, TradeSide.BUY)


@trade_group.command("sell")
@click.argument("account_id")
@click.argument("symbol")
@click.argument("quantity", type=int)
@click.pass_obj
def sell(app: CliContext, account_id: str, symbol: str, quantity: int):
    """
    Sell shares at the current quote.

    Example:
        papertrader trade sell alice AAPL 5
    """
    _execute(app, account_id, symbol, quantity, TradeSide.SELL)
