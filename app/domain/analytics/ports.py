"""
Port interfaces (ABCs) for the analytics bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from app.domain.analytics.entities import CustomAlert, Portfolio, Quote, Stock, Timeframe


class MarketDataProvider(ABC):
    """Port for quotes, price history and instrument search.

    Implementations own transport, timeouts and retries. A failed
    update must surface as StaleQuoteError so the engine can keep the
    last known snapshot instead of failing.
    """

    @abstractmethod
    def fetch_quote(self, symbol: str) -> Quote:
        """Return the latest quote for a symbol.

        Raises:
            SymbolNotFoundError: If the symbol is unknown.
            StaleQuoteError: If no fresh update could be obtained.
        """
        raise NotImplementedError

    @abstractmethod
    def fetch_history(self, symbol: str, timeframe: Timeframe) -> list[Decimal]:
        """Return closing prices for the timeframe, oldest first."""
        raise NotImplementedError

    @abstractmethod
    def search(self, query: str) -> list[Stock]:
        """Return stocks whose symbol or name matches the query."""
        raise NotImplementedError


class PortfolioRepository(ABC):
    """Port for loading and saving the portfolio aggregate."""

    @abstractmethod
    def load(self) -> Portfolio:
        """Return the stored portfolio, or an empty one."""
        raise NotImplementedError

    @abstractmethod
    def save(self, portfolio: Portfolio) -> None:
        """Persist the portfolio."""
        raise NotImplementedError


class AlertRepository(ABC):
    """Port for loading and saving custom alert definitions."""

    @abstractmethod
    def load(self) -> list[CustomAlert]:
        """Return all stored alert definitions."""
        raise NotImplementedError

    @abstractmethod
    def save(self, alerts: list[CustomAlert]) -> None:
        """Persist the full set of alert definitions."""
        raise NotImplementedError
