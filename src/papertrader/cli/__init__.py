"""PaperTrader command line interface."""
