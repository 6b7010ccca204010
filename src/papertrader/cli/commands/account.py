"""Account commands - open accounts, value them, browse their history."""

import sys

import click
from rich.console import Console
from rich.markup import escape

from papertrader.cli.context import CliContext
from papertrader.cli.ui import create_history_table, create_summary_table, create_totals_table, format_money
from papertrader.services.ledger import LedgerError


@click.group("account")
def account_group():
    """Account management - open, summary, history"""
    pass


@account_group.command("open")
@click.argument("account_id")
@click.option("--cash", type=str, default=None, help="Starting cash (default: ledger.initial_balance)")
@click.pass_obj
def open_account(app: CliContext, account_id: str, cash: str | None):
    """
    Open a paper-trading account.

    Example:
        papertrader account open alice
        papertrader account open bob --cash 25000
    """
    console = Console()

    try:
        account = app.ledger.open_account(account_id, initial_cash=cash)
    except LedgerError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    console.print(f"[green]✓ Opened account {account.account_id} with {format_money(account.cash)}[/green]")


@account_group.command("summary")
@click.argument("account_id")
@click.pass_obj
def summary(app: CliContext, account_id: str):
    """
    Show holdings valued at current market prices.

    An account that does not exist yet is opened with the configured
    initial balance. Holdings whose quote cannot be fetched are listed as
    skipped and left out of the totals.

    Example:
        papertrader account summary alice
    """
    console = Console()

    try:
        app.ledger.get_or_open_account(account_id)
        portfolio = app.ledger.get_summary(account_id)
    except LedgerError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    if portfolio.holdings:
        console.print(create_summary_table(portfolio))
    else:
        console.print("[yellow]No priced holdings[/yellow]")

    console.print(create_totals_table(portfolio))

    if portfolio.skipped_symbols:
        console.print(f"[yellow]Skipped (no quote): {', '.join(portfolio.skipped_symbols)}[/yellow]")


@account_group.command("history")
@click.argument("account_id")
@click.option("--limit", type=int, default=None, help="Max transactions (capped at ledger.transaction_limit)")
@click.option("--side", type=click.Choice(["buy", "sell"], case_sensitive=False), default=None, help="Only buys or sells")
@click.option("--symbol", type=str, default=None, help="Only this symbol")
@click.pass_obj
def history(app: CliContext, account_id: str, limit: int | None, side: str | None, symbol: str | None):
    """
    List transactions, newest first.

    Example:
        papertrader account history alice
        papertrader account history alice --side sell --symbol AAPL --limit 5
    """
    console = Console()

    try:
        app.ledger.get_account(account_id)
        transactions = app.ledger.get_transactions(account_id, limit=limit, side=side, symbol=symbol)
    except LedgerError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    if not transactions:
        console.print("[yellow]No transactions[/yellow]")
        return

    console.print(create_history_table(account_id, transactions))
