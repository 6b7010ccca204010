"""Unit tests for YahooMarketDataProvider with yfinance mocked out."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import patch

import pandas as pd
import pytest

from papertrader.services.market_data import QuoteUnavailable, YahooMarketDataProvider
from papertrader.services.market_data.yahoo import to_price
from papertrader.system.config import MarketDataSettings


@pytest.fixture
def mock_yf():
    with patch("papertrader.services.market_data.yahoo.yf") as mocked:
        yield mocked


@pytest.fixture
def provider() -> YahooMarketDataProvider:
    return YahooMarketDataProvider(timeout=5, search_limit=3)


def _daily(closes, volume=1234567, high=188.0, low=184.5):
    """Daily frame ending 2024-01-05; the last row carries high/low/volume."""
    index = pd.date_range(end=datetime(2024, 1, 5, tzinfo=timezone.utc), periods=len(closes), freq="D")
    count = len(closes)
    return pd.DataFrame(
        {
            "Open": closes,
            "High": [float("nan")] * (count - 1) + [high],
            "Low": [float("nan")] * (count - 1) + [low],
            "Close": closes,
            "Volume": [0] * (count - 1) + [volume],
        },
        index=index,
    )


class TestToPrice:
    def test_float_goes_through_str(self):
        assert to_price(0.1 + 0.2) == Decimal("0.30")
        assert to_price(187.44) == Decimal("187.44")

    def test_rounds_half_up_to_cents(self):
        assert to_price(1.005) == Decimal("1.01")

    @pytest.mark.parametrize("value", [None, float("nan"), pd.NA])
    def test_missing(self, value):
        assert to_price(value) is None


class TestConstruction:
    def test_from_config(self):
        provider = YahooMarketDataProvider.from_config(MarketDataSettings(timeout_seconds=3, search_limit=4))

        assert provider.timeout == 3
        assert provider.search_limit == 4

    @pytest.mark.parametrize("kwargs", [{"timeout": 0}, {"search_limit": 0}])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            YahooMarketDataProvider(**kwargs)


class TestGetQuote:
    def test_quote_fields(self, provider, mock_yf):
        mock_yf.Ticker.return_value.history.return_value = _daily([185.0, 187.44])

        quote = provider.get_quote("aapl")

        mock_yf.Ticker.assert_called_once_with("AAPL")
        mock_yf.Ticker.return_value.history.assert_called_once_with(
            period="5d", interval="1d", auto_adjust=False, timeout=5
        )
        assert quote.symbol == "AAPL"
        assert quote.price == Decimal("187.44")
        assert quote.previous_close == Decimal("185.00")
        assert quote.change == Decimal("2.44")
        assert quote.change_percent == Decimal("1.32")
        assert quote.day_high == Decimal("188.00")
        assert quote.day_low == Decimal("184.50")
        assert quote.volume == 1234567

    def test_uses_latest_priced_bar(self, provider, mock_yf):
        """A trailing bar without a close is ignored."""
        frame = _daily([180.0, 185.0, 187.44, float("nan")])
        mock_yf.Ticker.return_value.history.return_value = frame

        quote = provider.get_quote("AAPL")

        assert quote.price == Decimal("187.44")
        assert quote.previous_close == Decimal("185.00")

    def test_single_bar_has_no_change(self, provider, mock_yf):
        mock_yf.Ticker.return_value.history.return_value = _daily([187.44], volume=float("nan"))

        quote = provider.get_quote("AAPL")

        assert quote.previous_close is None
        assert quote.change is None
        assert quote.change_percent is None
        assert quote.volume is None

    @pytest.mark.parametrize("closes", [[float("nan")], [0.0], []])
    def test_no_price(self, provider, mock_yf, closes):
        mock_yf.Ticker.return_value.history.return_value = _daily(closes) if closes else pd.DataFrame()

        with pytest.raises(QuoteUnavailable) as exc_info:
            provider.get_quote("AAPL")

        assert exc_info.value.symbol == "AAPL"

    def test_vendor_exception(self, provider, mock_yf):
        mock_yf.Ticker.side_effect = RuntimeError("HTTP 404")

        with pytest.raises(QuoteUnavailable, match="HTTP 404"):
            provider.get_quote("NOPE")

    def test_timeout_surfaces_as_unavailable(self, provider, mock_yf):
        mock_yf.Ticker.return_value.history.side_effect = TimeoutError("read timed out")

        with pytest.raises(QuoteUnavailable, match="timed out"):
            provider.get_quote("AAPL")


class TestGetHistory:
    def _frame(self):
        index = pd.DatetimeIndex(
            [
                datetime(2024, 1, 3, tzinfo=timezone.utc),
                datetime(2024, 1, 2, tzinfo=timezone.utc),
                datetime(2024, 1, 4, tzinfo=timezone.utc),
            ]
        )
        return pd.DataFrame(
            {
                "Open": [101.0, 100.0, float("nan")],
                "High": [102.0, 101.0, 103.0],
                "Low": [100.5, 99.0, 101.0],
                "Close": [101.5, 100.5, float("nan")],
                "Volume": [2000, float("nan"), 3000],
            },
            index=index,
        )

    def test_bars_sorted_and_cleaned(self, provider, mock_yf):
        mock_yf.Ticker.return_value.history.return_value = self._frame()
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)

        bars = provider.get_history("aapl", start, "1d")

        mock_yf.Ticker.return_value.history.assert_called_once_with(
            start=start, interval="1d", auto_adjust=False, timeout=5
        )
        assert [bar.close for bar in bars] == [100.5, 101.5]
        assert bars[0].date == datetime(2024, 1, 2, tzinfo=timezone.utc)
        assert bars[0].volume == 0
        assert bars[1].volume == 2000

    def test_empty_frame(self, provider, mock_yf):
        mock_yf.Ticker.return_value.history.return_value = pd.DataFrame()

        with pytest.raises(QuoteUnavailable, match="no price history"):
            provider.get_history("AAPL", datetime(2024, 1, 1), "1d")

    def test_vendor_exception(self, provider, mock_yf):
        mock_yf.Ticker.return_value.history.side_effect = TimeoutError("timed out")

        with pytest.raises(QuoteUnavailable, match="timed out"):
            provider.get_history("AAPL", datetime(2024, 1, 1), "1d")


class TestSearch:
    def test_filters_equities_and_limits(self, provider, mock_yf):
        mock_yf.Search.return_value.quotes = [
            {"symbol": "AAPL", "longname": "Apple Inc.", "shortname": "Apple", "quoteType": "EQUITY", "exchange": "NMS"},
            {"symbol": "APLE", "shortname": "Apple Hospitality", "quoteType": "EQUITY", "exchange": "NYQ"},
            {"symbol": "AAPL240621C", "shortname": "Option", "quoteType": "OPTION", "exchange": "OPR"},
            {"symbol": "APPL.ETF", "shortname": "Fund", "quoteType": "ETF"},
            {"symbol": "AAPL.MX", "longname": "Apple Mexico", "quoteType": "EQUITY", "exchange": "MEX"},
            {"symbol": "AAPL.DE", "longname": "Apple Germany", "quoteType": "EQUITY", "exchange": "GER"},
        ]

        results = provider.search("apple")

        assert [r.symbol for r in results] == ["AAPL", "APLE", "AAPL.MX"]
        assert results[0].name == "Apple Inc."
        assert results[1].name == "Apple Hospitality"
        assert results[0].exchange == "NMS"

    def test_no_results(self, provider, mock_yf):
        mock_yf.Search.return_value.quotes = []

        assert provider.search("zzzz") == []

    def test_vendor_exception(self, provider, mock_yf):
        mock_yf.Search.side_effect = ConnectionError("offline")

        with pytest.raises(QuoteUnavailable, match="offline"):
            provider.search("apple")
