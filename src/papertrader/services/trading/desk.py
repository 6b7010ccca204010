"""Trading desk.

Executes market orders for the CLI: fetch a quote, then hand the quoted
price to the ledger. A quote failure aborts the order before the ledger is
touched. Orders are never retried.
"""

from papertrader.services.ledger.interface import ILedgerService
from papertrader.services.ledger.models import TradeResult, TradeSide
from papertrader.services.ledger.service import normalize_quantity, normalize_side, normalize_symbol
from papertrader.services.market_data.interface import IMarketDataProvider
from papertrader.system import LoggerFactory

logger = LoggerFactory.get_logger()


class TradingDesk:
    """
    Market-order entry point.

    Example:
        >>> desk = TradingDesk(ledger, YahooMarketDataProvider())
        >>> result = desk.trade("alice", "AAPL", 10, "buy")
        >>> result.transaction.price
        Decimal('187.44')
    """

    def __init__(self, ledger: ILedgerService, market_data: IMarketDataProvider) -> None:
        self.ledger = ledger
        self.market_data = market_data

    def trade(self, account_id: str, symbol: str, quantity: int, side: TradeSide | str) -> TradeResult:
        """
        Execute a market order at the current quote.

        Args:
            account_id: Trading account
            symbol: Ticker symbol
            quantity: Shares (positive integer)
            side: "buy" or "sell"

        Returns:
            TradeResult from the ledger

        Raises:
            InvalidInput: If symbol, quantity or side is invalid
            QuoteUnavailable: If no quote can be fetched (ledger untouched)
            LedgerError: Any rejection raised by execute_trade
        """
        symbol = normalize_symbol(symbol)
        quantity = normalize_quantity(quantity)
        trade_side = normalize_side(side)

        quote = self.market_data.get_quote(symbol)
        logger.info(
            "trading_desk.order.priced",
            account_id=account_id,
            symbol=symbol,
            side=trade_side.value,
            quantity=quantity,
            price=str(quote.price),
        )
        return self.ledger.execute_trade(account_id, symbol, quantity, trade_side, quote.price)
