"""
Adapter: Portfolio persistence.

Implements PortfolioRepository in process memory. Stored and returned
portfolios are deep copies so callers never share state with storage.
"""

import copy
import logging
import threading
from typing import Optional

from app.domain.analytics.entities import Portfolio
from app.domain.analytics.ports import PortfolioRepository

logger = logging.getLogger(__name__)


class InMemoryPortfolioRepository(PortfolioRepository):
    """Keeps a single portfolio aggregate in memory."""

    def __init__(self, portfolio: Optional[Portfolio] = None) -> None:
        self._lock = threading.Lock()
        self._portfolio = copy.deepcopy(portfolio) if portfolio is not None else None
        self._saves = 0

    @property
    def save_count(self) -> int:
        return self._saves

    def load(self) -> Portfolio:
        with self._lock:
            if self._portfolio is None:
                return Portfolio()
            return copy.deepcopy(self._portfolio)

    def save(self, portfolio: Portfolio) -> None:
        with self._lock:
            self._portfolio = copy.deepcopy(portfolio)
            self._saves += 1
        logger.debug(
            "Saved portfolio %s (%d holdings, %d watched)",
            portfolio.id,
            len(portfolio.holdings),
            len(portfolio.watchlist),
        )
