"""Unit tests for the chart indicator bundle."""

from papertrader.libraries.indicators import TechnicalIndicators, compute_rsi, compute_sma, compute_technical_indicators


class TestComputeTechnicalIndicators:
    """Test SMA(20) / SMA(50) / RSI(14) bundling."""

    def test_series_aligned_with_closes(self, ranging_closes):
        """Every series has one entry per close."""
        technical = compute_technical_indicators(ranging_closes)

        assert isinstance(technical, TechnicalIndicators)
        assert len(technical.sma20) == len(ranging_closes)
        assert len(technical.sma50) == len(ranging_closes)
        assert len(technical.rsi) == len(ranging_closes)

    def test_matches_individual_functions(self, ranging_closes):
        """Bundle uses periods 20, 50 and 14."""
        technical = compute_technical_indicators(ranging_closes)

        assert technical.sma20 == compute_sma(ranging_closes, 20)
        assert technical.sma50 == compute_sma(ranging_closes, 50)
        assert technical.rsi == compute_rsi(ranging_closes, 14)

    def test_short_history(self):
        """Ten closes leave SMA(50) and RSI(14) fully undefined."""
        technical = compute_technical_indicators([float(i) for i in range(10)])

        assert technical.sma50 == [None] * 10
        assert technical.rsi == [None] * 10
        assert technical.sma20 == [None] * 10

    def test_empty_history(self):
        """No closes, no values."""
        technical = compute_technical_indicators([])

        assert technical == TechnicalIndicators()
