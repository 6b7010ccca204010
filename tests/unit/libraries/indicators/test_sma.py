"""
Unit tests for papertrader.libraries.indicators.moving_averages.

Tests:
- compute_sma: alignment, warmup nulls, window means, invalid periods
- SMA: stateful updates, batch calculation, parity between the two
"""

import math

import pytest

from papertrader.libraries.indicators import SMA, IndicatorPlacement, compute_sma


class TestComputeSMA:
    """Test the pure SMA function."""

    def test_reference_example(self):
        """Period 3 over 10..50 averages each trailing window."""
        assert compute_sma([10, 20, 30, 40, 50], 3) == [None, None, 20.0, 30.0, 40.0]

    def test_output_length_matches_input(self, ranging_closes):
        """Output is aligned index-for-index with the input."""
        assert len(compute_sma(ranging_closes, 20)) == len(ranging_closes)

    @pytest.mark.parametrize("period", [1, 5, 20, 50])
    def test_leading_null_count(self, ranging_closes, period):
        """Exactly period - 1 leading values are None."""
        result = compute_sma(ranging_closes, period)

        assert result[: period - 1] == [None] * (period - 1)
        assert all(value is not None for value in result[period - 1 :])

    def test_period_one_is_identity(self):
        """SMA(1) reproduces the input."""
        assert compute_sma([3.0, 1.5, 4.0], 1) == [3.0, 1.5, 4.0]

    def test_input_shorter_than_period_is_all_none(self):
        """Too little data yields only None."""
        assert compute_sma([1.0, 2.0, 3.0], 5) == [None, None, None]

    def test_empty_input(self):
        """Empty input yields empty output."""
        assert compute_sma([], 3) == []

    def test_window_mean(self, ranging_closes):
        """Each defined value is the mean of its trailing window."""
        period = 7
        result = compute_sma(ranging_closes, period)

        for i in range(period - 1, len(ranging_closes)):
            window = ranging_closes[i - period + 1 : i + 1]
            assert result[i] == pytest.approx(sum(window) / period)

    def test_large_price_leaves_no_residue(self):
        """A huge price that has left the window does not swamp later means."""
        assert compute_sma([1e16, 1.0, 1.0, 1.0], 1) == [1e16, 1.0, 1.0, 1.0]
        assert compute_sma([1e16, 1.0, 1.0, 1.0], 2)[2:] == [1.0, 1.0]

    def test_long_series_has_no_drift(self):
        """Late values equal the directly summed window mean."""
        closes = [0.1 * i for i in range(2000)]

        result = compute_sma(closes, 3)

        for i in range(2, len(closes)):
            assert result[i] == math.fsum(closes[i - 2 : i + 1]) / 3

    @pytest.mark.parametrize("period", [0, -1])
    def test_rejects_non_positive_period(self, period):
        """Period below one raises ValueError."""
        with pytest.raises(ValueError, match="Period must be >= 1"):
            compute_sma([1.0, 2.0], period)

    @pytest.mark.parametrize("period", [2.0, True, "3"])
    def test_rejects_non_integer_period(self, period):
        """Period must be an int."""
        with pytest.raises(ValueError, match="Period must be an integer"):
            compute_sma([1.0, 2.0], period)


class TestSMAIndicator:
    """Test the stateful SMA indicator."""

    def test_initialization(self):
        """SMA stores its period and is an overlay."""
        sma = SMA(period=20)

        assert sma.period == 20
        assert sma.placement == IndicatorPlacement.OVERLAY
        assert sma.name == "sma"
        assert not sma.is_ready
        assert sma.value is None

    def test_update_value_warmup(self):
        """Values are None until period prices were seen."""
        sma = SMA(period=3)

        assert sma.update_value(10.0) is None
        assert sma.update_value(20.0) is None
        assert sma.update_value(30.0) == pytest.approx(20.0)
        assert sma.is_ready
        assert sma.update_value(40.0) == pytest.approx(30.0)
        assert sma.value == pytest.approx(30.0)

    def test_update_matches_calculate(self, bar_factory, ranging_closes):
        """Incremental updates produce the batch values."""
        bars = bar_factory(ranging_closes)
        batch = SMA(period=10).calculate(bars)

        sma = SMA(period=10)
        streamed = [sma.update(bar) for bar in bars]

        assert [v is None for v in streamed] == [v is None for v in batch]
        assert [v for v in streamed if v is not None] == pytest.approx([v for v in batch if v is not None])

    def test_price_field(self, bar_factory):
        """price_field selects which bar price is averaged."""
        bars = bar_factory([10.0, 20.0])
        sma = SMA(period=2, price_field="high")

        assert sma.calculate(bars) == [None, pytest.approx(16.0)]

    def test_reset(self):
        """reset() clears state."""
        sma = SMA(period=2)
        sma.update_value(1.0)
        sma.update_value(2.0)

        sma.reset()

        assert not sma.is_ready
        assert sma.value is None
        assert sma.update_value(5.0) is None

    def test_streaming_large_price_leaves_no_residue(self):
        sma = SMA(period=2)

        values = [sma.update_value(price) for price in (1e16, 1.0, 1.0, 1.0)]

        assert values[2:] == [1.0, 1.0]
