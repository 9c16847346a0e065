"""
Use case: Technical indicator over a chart series.

Input: ComputeIndicatorCommand (symbol, timeframe, indicator, period, multiplier)
Output: IndicatorSeriesResult
Side effects: None.
Failure cases: InvalidParameterError, SymbolNotFoundError.
"""

import logging

from app.application.analytics.dtos import (
    ComputeIndicatorCommand,
    GetPriceSeriesQuery,
    IndicatorSeriesResult,
)
from app.application.analytics.get_price_series import GetPriceSeriesUseCase
from app.domain.analytics.errors import InvalidParameterError
from app.domain.analytics.indicators import IndicatorKind, compute_indicator

logger = logging.getLogger(__name__)


class ComputeIndicatorUseCase:
    """Computes an indicator aligned with the same series the chart draws.

    Args:
        series_use_case: Provides the source price series.
        default_period: Period used when the command omits one.
        default_multiplier: Bollinger multiplier used when omitted.
    """

    def __init__(
        self,
        series_use_case: GetPriceSeriesUseCase,
        default_period: int = 14,
        default_multiplier: float = 2.0,
    ) -> None:
        self._series_use_case = series_use_case
        self._default_period = default_period
        self._default_multiplier = default_multiplier

    def execute(self, command: ComputeIndicatorCommand) -> IndicatorSeriesResult:
        try:
            kind = IndicatorKind(command.indicator.strip().lower())
        except ValueError as exc:
            allowed = ", ".join(k.value for k in IndicatorKind)
            raise InvalidParameterError(
                "indicator", command.indicator, f"must be one of {allowed}"
            ) from exc

        period = None if kind is IndicatorKind.MACD else (command.period or self._default_period)
        multiplier = (
            command.multiplier if command.multiplier is not None else self._default_multiplier
        )
        logger.info(
            "Computing %s for symbol=%s timeframe=%s period=%s",
            kind.value,
            command.symbol,
            command.timeframe,
            period,
        )

        series = self._series_use_case.execute(
            GetPriceSeriesQuery(symbol=command.symbol, timeframe=command.timeframe)
        )
        results = compute_indicator(kind, series.prices, period=period, multiplier=multiplier)
        return IndicatorSeriesResult(
            symbol=series.symbol,
            timeframe=series.timeframe,
            indicator=kind.value,
            period=period,
            prices=series.prices,
            series={name: list(result.values) for name, result in results.items()},
        )
