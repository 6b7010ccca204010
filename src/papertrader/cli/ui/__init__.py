"""CLI UI components - rich table formatters."""

from papertrader.cli.ui.formatters import (
    create_chart_table,
    create_history_table,
    create_quote_table,
    create_search_table,
    create_summary_table,
    create_totals_table,
    create_trade_table,
    format_money,
)

__all__ = [
    "create_chart_table",
    "create_history_table",
    "create_quote_table",
    "create_search_table",
    "create_summary_table",
    "create_totals_table",
    "create_trade_table",
    "format_money",
]
