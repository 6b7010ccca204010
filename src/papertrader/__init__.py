"""
PaperTrader - Paper-trading simulator

Average-cost ledger, technical indicators and live market data.
"""

from importlib.metadata import version

try:
    __version__ = version("papertrader")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
]
