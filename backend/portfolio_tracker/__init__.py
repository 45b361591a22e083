# backend/portfolio_tracker/__init__.py
"""Portfolio Tracker: daily valuation of a small ETF portfolio."""
