"""
Use case: Chart price series for a timeframe.

Input: GetPriceSeriesQuery (symbol, timeframe)
Output: PriceSeriesResult
Side effects: None.
Failure cases: InvalidParameterError (timeframe), SymbolNotFoundError,
    InsufficientHistoryError when resampling without history.
"""

import logging

from app.application.analytics.dtos import GetPriceSeriesQuery, PriceSeriesResult
from app.application.analytics.snapshots import resolve_stock
from app.domain.analytics.indicators import key_levels
from app.domain.analytics.ledger import PortfolioLedger
from app.domain.analytics.ports import MarketDataProvider
from app.domain.analytics.sampler import TimeSeriesSampler, parse_timeframe

logger = logging.getLogger(__name__)


class GetPriceSeriesUseCase:
    """Samples a canonical-length series and attaches support/resistance."""

    def __init__(
        self,
        provider: MarketDataProvider,
        ledger: PortfolioLedger,
        sampler: TimeSeriesSampler,
    ) -> None:
        self._provider = provider
        self._ledger = ledger
        self._sampler = sampler

    def execute(self, query: GetPriceSeriesQuery) -> PriceSeriesResult:
        timeframe = parse_timeframe(query.timeframe)
        logger.info("Price series symbol=%s timeframe=%s", query.symbol, timeframe.value)
        stock = resolve_stock(query.symbol, self._provider, self._ledger)
        levels = key_levels(stock)
        return PriceSeriesResult(
            symbol=stock.symbol,
            timeframe=timeframe.value,
            prices=self._sampler.sample(stock, timeframe),
            support=levels.support,
            resistance=levels.resistance,
        )
