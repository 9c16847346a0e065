"""
Use case: Search stocks by symbol or name.

Input: SearchStocksQuery
Output: list[StockResult]
Side effects: None.
"""

import logging

from app.application.analytics.dtos import SearchStocksQuery, StockResult
from app.application.analytics.manage_watchlist import to_stock_result
from app.domain.analytics.ledger import PortfolioLedger
from app.domain.analytics.ports import MarketDataProvider

logger = logging.getLogger(__name__)


class SearchStocksUseCase:
    """Delegates to the provider and flags results already on the watchlist."""

    def __init__(self, provider: MarketDataProvider, ledger: PortfolioLedger) -> None:
        self._provider = provider
        self._ledger = ledger

    def execute(self, query: SearchStocksQuery) -> list[StockResult]:
        text = query.query.strip()
        if not text:
            return []
        logger.info("Searching stocks query=%r", text)
        return [
            to_stock_result(stock, self._ledger.is_watchlisted(stock.symbol))
            for stock in self._provider.search(text)
        ]
