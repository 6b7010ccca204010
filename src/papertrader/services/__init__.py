"""Papertrader services package.

Each service is independently testable and depends on its collaborators
through Protocol interfaces passed in by construction:

- ledger: accounts, average-cost positions and the transaction log
- market_data: quotes, price history and symbol search
- charting: price history with technical indicators
- trading: quote-then-execute market orders
"""
