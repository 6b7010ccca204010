"""PaperTrader libraries: pure calculation engines with no service dependencies."""
