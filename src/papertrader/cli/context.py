"""Shared CLI state: configuration plus lazily built services."""

from functools import cached_property
from pathlib import Path

from papertrader.services.charting import ChartService
from papertrader.services.ledger import LedgerService
from papertrader.services.market_data import IMarketDataProvider, YahooMarketDataProvider
from papertrader.services.trading import TradingDesk
from papertrader.system import LoggerFactory, SystemConfig, reload_system_config


class CliContext:
    """
    Services for one CLI invocation.

    Services are created on first use so commands that only need market
    data never open the ledger database.
    """

    def __init__(self, config: SystemConfig, market_data: IMarketDataProvider | None = None) -> None:
        self.config = config
        self._market_data = market_data

    @classmethod
    def load(cls, config_path: Path | str | None = None) -> "CliContext":
        """Load configuration and configure logging."""
        config = reload_system_config(config_path)
        LoggerFactory.configure(config.logging)
        return cls(config)

    @cached_property
    def market_data(self) -> IMarketDataProvider:
        if self._market_data is not None:
            return self._market_data
        return YahooMarketDataProvider.from_config(self.config.market_data)

    @cached_property
    def ledger(self) -> LedgerService:
        return LedgerService.from_config(self.config, market_data=self.market_data)

    @cached_property
    def desk(self) -> TradingDesk:
        return TradingDesk(self.ledger, self.market_data)

    @cached_property
    def charts(self) -> ChartService:
        return ChartService(self.market_data)
