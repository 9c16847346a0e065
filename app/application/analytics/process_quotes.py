"""
Use case: Refresh quotes and evaluate alerts.

Input: ProcessQuotesCommand (symbols, optional)
Output: ProcessQuotesResult (per-symbol updates, triggered alert events)
Side effects: Updates ledger snapshots, persists the portfolio,
    dispatches triggered alerts through the notifier.

Pipeline per symbol, serialized by a per-symbol lock:

    fetch quote ─▶ apply to ledger ─▶ append observed price
                ─▶ recompute indicators ─▶ evaluate alerts

Different symbols run concurrently. Any provider failure keeps the last
known snapshot and flags the symbol as stale instead of failing the batch.
"""

import asyncio
import logging
from collections import deque
from decimal import Decimal
from typing import Optional

from app.application.analytics.dtos import (
    AlertEventResult,
    ProcessQuotesCommand,
    ProcessQuotesResult,
    SymbolUpdateResult,
)
from app.application.analytics.snapshots import normalize_symbol
from app.domain.analytics.alert_evaluator import AlertEvaluator
from app.domain.analytics.alert_notifier import AlertNotifier
from app.domain.analytics.entities import AlertEvent, Quote, Stock
from app.domain.analytics.errors import AnalyticsDomainError, SymbolNotFoundError
from app.domain.analytics.indicators import rsi, sma
from app.domain.analytics.ledger import PortfolioLedger
from app.domain.analytics.ports import MarketDataProvider, PortfolioRepository

logger = logging.getLogger(__name__)


class SymbolLockRegistry:
    """One asyncio lock per symbol, created on first use."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def lock_for(self, symbol: str) -> asyncio.Lock:
        lock = self._locks.get(symbol)
        if lock is None:
            lock = self._locks[symbol] = asyncio.Lock()
        return lock

    def discard(self, symbol: str) -> None:
        """Forget a symbol's lock unless a pipeline currently holds it."""
        lock = self._locks.get(symbol)
        if lock is not None and not lock.locked():
            del self._locks[symbol]

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._locks

    def __len__(self) -> int:
        return len(self._locks)


def to_event_result(event: AlertEvent) -> AlertEventResult:
    return AlertEventResult(
        id=event.id,
        alert_id=event.alert_id,
        symbol=event.symbol,
        alert_type=event.alert_type.value,
        condition=event.condition.value,
        observed=event.observed,
        threshold=event.threshold,
        triggered_at=event.triggered_at,
    )


class ProcessQuotesUseCase:
    """Runs the quote pipeline for a batch of symbols.

    Args:
        provider: Market data collaborator.
        ledger: Portfolio ledger receiving fresh snapshots.
        evaluator: Alert evaluator consuming quotes.
        notifier: Dispatcher for triggered alerts.
        portfolio_repo: Persistence for the updated portfolio.
        indicator_period: Window for the SMA/RSI recomputed per update.
        history_max_length: Observed prices retained per symbol.
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        ledger: PortfolioLedger,
        evaluator: AlertEvaluator,
        notifier: AlertNotifier,
        portfolio_repo: PortfolioRepository,
        indicator_period: int = 14,
        history_max_length: int = 500,
    ) -> None:
        self._provider = provider
        self._ledger = ledger
        self._evaluator = evaluator
        self._notifier = notifier
        self._portfolio_repo = portfolio_repo
        self._indicator_period = indicator_period
        self._history_max_length = history_max_length
        self._locks = SymbolLockRegistry()
        self._history: dict[str, deque[Decimal]] = {}
        self._last_quotes: dict[str, Quote] = {}

    @property
    def locks(self) -> SymbolLockRegistry:
        return self._locks

    def default_symbols(self) -> list[str]:
        """Every symbol held, watched, or targeted by an active alert."""
        symbols = self._ledger.tracked_symbols() + self._evaluator.symbols()
        return list(dict.fromkeys(symbols))

    def observed_history(self, symbol: str) -> list[Decimal]:
        return list(self._history.get(symbol, ()))

    async def execute(self, command: ProcessQuotesCommand) -> ProcessQuotesResult:
        symbols = [normalize_symbol(s) for s in command.symbols] or self.default_symbols()
        symbols = list(dict.fromkeys(symbols))
        logger.info("Processing quotes for %d symbols", len(symbols))

        outcomes = await asyncio.gather(*(self.process_symbol(s) for s in symbols))

        updates = [update for update, _ in outcomes]
        events = [event for _, symbol_events in outcomes for event in symbol_events]

        if any(not u.is_stale for u in updates):
            self._portfolio_repo.save(self._ledger.portfolio())
        if events:
            summary = await self._notifier.notify(events)
            logger.info(
                "Dispatched %d alert events (%d deliveries)",
                summary.total_events,
                summary.total_sent,
            )

        return ProcessQuotesResult(
            updates=updates,
            events=[to_event_result(e) for e in events],
        )

    async def process_symbol(self, symbol: str) -> tuple[SymbolUpdateResult, list[AlertEvent]]:
        """Run the full pipeline for one symbol under its lock.

        Unknown symbols are reported stale and leave no lock behind.
        """
        try:
            return await self._run_pipeline(symbol)
        except SymbolNotFoundError:
            logger.warning("Quote update skipped, unknown symbol %s", symbol)
            self._locks.discard(symbol)
            return self._stale_update(symbol), []

    async def _run_pipeline(self, symbol: str) -> tuple[SymbolUpdateResult, list[AlertEvent]]:
        async with self._locks.lock_for(symbol):
            try:
                quote = await asyncio.to_thread(self._provider.fetch_quote, symbol)
            except SymbolNotFoundError:
                raise
            except AnalyticsDomainError as exc:
                logger.warning("Quote update failed for %s: %s", symbol, exc.message)
                return self._stale_update(symbol), []
            except Exception:
                logger.exception("Provider error while fetching %s", symbol)
                return self._stale_update(symbol), []

            self._ledger.apply_quote(quote.stock)
            self._last_quotes[symbol] = quote
            history = self._history.setdefault(symbol, deque(maxlen=self._history_max_length))
            history.append(quote.stock.price)
            sma_value, rsi_value = self._latest_indicators(history)

            events = self._evaluator.evaluate(quote)
            return (
                SymbolUpdateResult(
                    symbol=symbol,
                    price=quote.stock.price,
                    percent_change=quote.stock.percent_change,
                    is_stale=quote.is_stale,
                    sma=sma_value,
                    rsi=rsi_value,
                ),
                events,
            )

    def _last_known(self, symbol: str) -> Optional[Stock]:
        quote = self._last_quotes.get(symbol)
        if quote is not None:
            return quote.stock
        return self._ledger.last_known(symbol)

    def _stale_update(self, symbol: str) -> SymbolUpdateResult:
        stock = self._last_known(symbol)
        if stock is not None:
            self._last_quotes[symbol] = Quote(stock=stock, is_stale=True)
        sma_value, rsi_value = self._latest_indicators(self._history.get(symbol, ()))
        return SymbolUpdateResult(
            symbol=symbol,
            price=stock.price if stock is not None else None,
            percent_change=stock.percent_change if stock is not None else None,
            is_stale=True,
            sma=sma_value,
            rsi=rsi_value,
        )

    def _latest_indicators(self, history) -> tuple[Optional[float], Optional[float]]:
        prices = list(history)
        if not prices:
            return None, None
        return (
            sma(prices, self._indicator_period).latest,
            rsi(prices, self._indicator_period).latest,
        )
