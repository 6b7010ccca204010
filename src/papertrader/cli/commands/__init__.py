"""Commands __init__ - exports all command groups."""

from papertrader.cli.commands.account import account_group
from papertrader.cli.commands.market import market_group
from papertrader.cli.commands.trade import trade_group

__all__ = ["account_group", "market_group", "trade_group"]
