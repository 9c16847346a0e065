"""
Domain service: Portfolio ledger.

Owns a single Portfolio aggregate and is the only component allowed to
mutate it. Every operation runs under a re-entrant lock so valuation
reads never observe a holding list mid-mutation. Mutations are
fail-fast: on error the portfolio is left untouched and no change
event is emitted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from threading import RLock
from typing import Callable, Optional
from uuid import uuid4

from app.domain.analytics.entities import (
    HUNDRED,
    Holding,
    Portfolio,
    PortfolioSummary,
    Stock,
)
from app.domain.analytics.errors import HoldingNotFoundError, InvalidHoldingError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class LedgerEventKind(Enum):
    """Kinds of change the ledger reports to its listeners."""

    HOLDING_ADDED = "holding_added"
    HOLDING_REMOVED = "holding_removed"
    WATCHLIST_ADDED = "watchlist_added"
    WATCHLIST_REMOVED = "watchlist_removed"
    QUOTE_APPLIED = "quote_applied"


@dataclass(frozen=True)
class LedgerEvent:
    """A committed change; ``key`` is a holding id or a symbol."""

    kind: LedgerEventKind
    key: str


LedgerListener = Callable[[LedgerEvent], None]


class PortfolioLedger:
    """Holdings, watchlist and valuation for one portfolio.

    Args:
        portfolio: A fully hydrated portfolio, e.g. from a repository.
            A new empty one is created when omitted.
    """

    def __init__(self, portfolio: Optional[Portfolio] = None) -> None:
        self._portfolio = portfolio.copy() if portfolio is not None else Portfolio()
        self._lock = RLock()
        self._listeners: list[LedgerListener] = []

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: LedgerListener) -> None:
        """Register a callback invoked after every committed mutation."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: LedgerListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, kind: LedgerEventKind, key: str) -> None:
        event = LedgerEvent(kind=kind, key=key)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # The mutation is already committed.
                logger.exception("Ledger listener failed on %s %s", kind.value, key)

    # ------------------------------------------------------------------
    # Holdings
    # ------------------------------------------------------------------

    def add_holding(
        self,
        stock: Stock,
        shares: int,
        purchase_price,
        purchase_date: Optional[datetime] = None,
    ) -> str:
        """Append a new holding and return its id.

        Repeated purchases of the same stock create independent holdings.

        Raises:
            InvalidHoldingError: If shares is not a positive integer or
                the purchase price is not positive.
        """
        if isinstance(shares, bool) or not isinstance(shares, int) or shares <= 0:
            raise InvalidHoldingError(f"shares must be a positive integer, got {shares!r}")
        try:
            price = Decimal(str(purchase_price))
        except ArithmeticError as exc:
            raise InvalidHoldingError(f"purchase price is not a number: {purchase_price!r}") from exc
        if not price.is_finite() or price <= 0:
            raise InvalidHoldingError(f"purchase price must be positive, got {purchase_price!r}")

        holding = Holding(
            id=str(uuid4()),
            stock=stock,
            shares=shares,
            purchase_price=price,
            purchase_date=purchase_date or datetime.now(timezone.utc),
        )
        with self._lock:
            self._portfolio.holdings.append(holding)
        logger.info("Holding added: %s x%d @ %s (id=%s)", stock.symbol, shares, price, holding.id)
        self._emit(LedgerEventKind.HOLDING_ADDED, holding.id)
        return holding.id

    def remove_holding(self, holding_id: str) -> Holding:
        """Remove a holding by id and return it.

        Raises:
            HoldingNotFoundError: If no holding has this id.
        """
        with self._lock:
            for index, holding in enumerate(self._portfolio.holdings):
                if holding.id == holding_id:
                    del self._portfolio.holdings[index]
                    break
            else:
                raise HoldingNotFoundError(holding_id)
        logger.info("Holding removed: %s (id=%s)", holding.stock.symbol, holding_id)
        self._emit(LedgerEventKind.HOLDING_REMOVED, holding_id)
        return holding

    def get_holding(self, holding_id: str) -> Holding:
        with self._lock:
            for holding in self._portfolio.holdings:
                if holding.id == holding_id:
                    return holding
        raise HoldingNotFoundError(holding_id)

    def holdings(self) -> tuple[Holding, ...]:
        with self._lock:
            return tuple(self._portfolio.holdings)

    # ------------------------------------------------------------------
    # Valuation
    # ------------------------------------------------------------------

    def valuation(self) -> Decimal:
        """Sum of shares x current price over all holdings."""
        with self._lock:
            return sum((h.current_value for h in self._portfolio.holdings), ZERO)

    def daily_change(self) -> Decimal:
        """Approximate value change over the day.

        Applies each stock's percent change to today's value rather than
        diffing against yesterday's valuation.
        """
        with self._lock:
            return sum(
                (h.stock.percent_change * h.current_value / HUNDRED for h in self._portfolio.holdings),
                ZERO,
            )

    def total_gain_percent(self) -> Decimal:
        """Overall gain versus the amount invested; 0 for an empty portfolio."""
        with self._lock:
            initial = sum((h.cost_basis for h in self._portfolio.holdings), ZERO)
            current = sum((h.current_value for h in self._portfolio.holdings), ZERO)
        if initial == 0:
            return ZERO
        return (current - initial) / initial * HUNDRED

    def summary(self) -> PortfolioSummary:
        with self._lock:
            return PortfolioSummary(
                total_value=self.valuation(),
                daily_change=self.daily_change(),
                total_gain_percent=self.total_gain_percent(),
                holdings_count=len(self._portfolio.holdings),
            )

    # ------------------------------------------------------------------
    # Watchlist
    # ------------------------------------------------------------------

    def add_to_watchlist(self, stock: Stock) -> None:
        """Add a stock to the watchlist. No-op when already present."""
        with self._lock:
            added = self._portfolio.watchlist.add(stock)
        if added:
            logger.info("Watchlist added: %s", stock.symbol)
            self._emit(LedgerEventKind.WATCHLIST_ADDED, stock.symbol)

    def remove_from_watchlist(self, symbol: str) -> None:
        """Remove a symbol from the watchlist. No-op when absent."""
        with self._lock:
            removed = self._portfolio.watchlist.remove(symbol)
        if removed:
            logger.info("Watchlist removed: %s", symbol)
            self._emit(LedgerEventKind.WATCHLIST_REMOVED, symbol)

    def is_watchlisted(self, symbol: str) -> bool:
        with self._lock:
            return symbol in self._portfolio.watchlist

    def watchlist(self) -> list[Stock]:
        with self._lock:
            return self._portfolio.watchlist.stocks()

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------

    def apply_quote(self, stock: Stock) -> int:
        """Swap in a fresher snapshot wherever this symbol is held or watched.

        Holdings are replaced, never mutated. Returns the number of
        holdings and watchlist entries updated.
        """
        with self._lock:
            updated = 0
            holdings = self._portfolio.holdings
            for index, holding in enumerate(holdings):
                if holding.stock.symbol == stock.symbol:
                    holdings[index] = holding.with_stock(stock)
                    updated += 1
            if self._portfolio.watchlist.replace(stock):
                updated += 1
        if updated:
            logger.debug("Quote applied to %d entries for %s", updated, stock.symbol)
            self._emit(LedgerEventKind.QUOTE_APPLIED, stock.symbol)
        return updated

    def last_known(self, symbol: str) -> Optional[Stock]:
        """Most recent snapshot of a symbol held or watched, if any."""
        with self._lock:
            for holding in reversed(self._portfolio.holdings):
                if holding.stock.symbol == symbol:
                    return holding.stock
            for stock in self._portfolio.watchlist:
                if stock.symbol == symbol:
                    return stock
        return None

    def tracked_symbols(self) -> list[str]:
        """Symbols held or watched, in first-seen order."""
        with self._lock:
            symbols = [h.stock.symbol for h in self._portfolio.holdings]
            symbols.extend(self._portfolio.watchlist.symbols())
        return list(dict.fromkeys(symbols))

    # ------------------------------------------------------------------
    # Persistence hand-off
    # ------------------------------------------------------------------

    def portfolio(self) -> Portfolio:
        """Return a copy of the aggregate in the shape it was handed in."""
        with self._lock:
            return self._portfolio.copy()
