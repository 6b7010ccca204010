"""Unit tests for ChartService."""

from datetime import datetime, timezone

import pytest

from papertrader.libraries.indicators import compute_rsi, compute_sma
from papertrader.services.charting import ChartService
from papertrader.services.market_data import ChartRange, QuoteUnavailable

NOW = datetime(2024, 6, 28, 20, 0, tzinfo=timezone.utc)


@pytest.fixture
def charts(market_data, bar_factory) -> ChartService:
    closes = [100.0 + (i % 7) - i * 0.1 for i in range(60)]
    market_data.history["AAPL"] = bar_factory(closes)
    return ChartService(market_data)


class TestGetChart:
    def test_combines_quote_history_and_indicators(self, charts, market_data):
        chart = charts.get_chart("aapl", "6mo", now=NOW)
        closes = [bar.close for bar in chart.history]

        assert chart.symbol == "AAPL"
        assert chart.range is ChartRange.SIX_MONTHS
        assert chart.quote.price == market_data.prices["AAPL"]
        assert len(chart.history) == 60
        assert chart.technical.sma20 == compute_sma(closes, 20)
        assert chart.technical.sma50 == compute_sma(closes, 50)
        assert chart.technical.rsi == compute_rsi(closes, 14)

    @pytest.mark.parametrize(
        "requested, interval, start",
        [
            ("1d", "5m", datetime(2024, 6, 27, 20, 0, tzinfo=timezone.utc)),
            ("5d", "15m", datetime(2024, 6, 23, 20, 0, tzinfo=timezone.utc)),
            ("1mo", "1d", datetime(2024, 5, 28, 20, 0, tzinfo=timezone.utc)),
            ("bogus", "1d", datetime(2023, 12, 28, 20, 0, tzinfo=timezone.utc)),
        ],
    )
    def test_range_drives_history_request(self, charts, market_data, requested, interval, start):
        charts.get_chart("AAPL", requested, now=NOW)

        history_calls = [call for call in market_data.calls if call[0] == "get_history"]
        assert history_calls == [("get_history", "AAPL", start, interval)]

    def test_default_range_is_six_months(self, charts):
        assert charts.get_chart("AAPL", now=NOW).range is ChartRange.SIX_MONTHS

    def test_quote_failure_propagates(self, charts, market_data):
        market_data.fail("AAPL")

        with pytest.raises(QuoteUnavailable):
            charts.get_chart("AAPL", now=NOW)

    def test_history_failure_propagates(self, market_data):
        with pytest.raises(QuoteUnavailable):
            ChartService(market_data).get_chart("MSFT", now=NOW)
