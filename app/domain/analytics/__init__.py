"""
Market analytics bounded context, domain layer.

This module contains all domain logic for the analytics context:
- Instrument snapshots and price history
- Portfolio ledger (holdings, watchlist, valuation)
- Technical indicators (SMA, EMA, RSI, MACD, Bollinger Bands)
- Time-series sampling per chart timeframe
- Edge-triggered custom alerts and their notification
"""
