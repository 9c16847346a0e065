"""
Use case: Watchlist membership.

Input: WatchlistCommand
Output: list[StockResult]
Side effects: Mutates the ledger and persists the portfolio.
Failure cases: SymbolNotFoundError when adding an unknown symbol.
"""

import logging

from app.application.analytics.dtos import StockResult, WatchlistCommand
from app.application.analytics.snapshots import normalize_symbol, resolve_stock
from app.domain.analytics.entities import Stock
from app.domain.analytics.ledger import PortfolioLedger
from app.domain.analytics.ports import MarketDataProvider, PortfolioRepository

logger = logging.getLogger(__name__)


def to_stock_result(stock: Stock, is_watchlisted: bool = False) -> StockResult:
    return StockResult(
        symbol=stock.symbol,
        name=stock.name,
        price=stock.price,
        percent_change=stock.percent_change,
        volume=stock.volume,
        is_watchlisted=is_watchlisted,
    )


class ManageWatchlistUseCase:
    """Adds, removes and lists watchlist entries. All calls are idempotent."""

    def __init__(
        self,
        ledger: PortfolioLedger,
        provider: MarketDataProvider,
        portfolio_repo: PortfolioRepository,
    ) -> None:
        self._ledger = ledger
        self._provider = provider
        self._portfolio_repo = portfolio_repo

    def entries(self) -> list[StockResult]:
        return [to_stock_result(s, is_watchlisted=True) for s in self._ledger.watchlist()]

    def add(self, command: WatchlistCommand) -> list[StockResult]:
        symbol = normalize_symbol(command.symbol)
        if not self._ledger.is_watchlisted(symbol):
            logger.info("Watching %s", symbol)
            self._ledger.add_to_watchlist(resolve_stock(symbol, self._provider, self._ledger))
            self._portfolio_repo.save(self._ledger.portfolio())
        return self.entries()

    def remove(self, command: WatchlistCommand) -> list[StockResult]:
        symbol = normalize_symbol(command.symbol)
        if self._ledger.is_watchlisted(symbol):
            logger.info("Unwatching %s", symbol)
            self._ledger.remove_from_watchlist(symbol)
            self._portfolio_repo.save(self._ledger.portfolio())
        return self.entries()
