"""
Technical indicator engine.

Pure transforms over an ordered price series (oldest first):
- Simple and exponential moving averages
- RSI (simple average of gains/losses over the trailing window)
- MACD line, signal line and histogram
- Bollinger Bands (population standard deviation)

Every result has exactly one entry per input price. Positions inside the
warm-up region hold ``None`` so overlays stay index-aligned with the source
series. Parameters are validated before any computation; numerically
degenerate input (flat prices, no losses) yields explicit boundary values
instead of errors.
"""

import logging
import math
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence, Union

import pandas as pd

from app.domain.analytics.entities import (
    INSUFFICIENT_DATA,
    BollingerBands,
    IndicatorResult,
    KeyLevels,
    MACDResult,
    Stock,
)
from app.domain.analytics.errors import InvalidParameterError

logger = logging.getLogger(__name__)

Prices = Sequence[Union[float, Decimal]]

DEFAULT_PERIOD = 14
DEFAULT_RSI_PERIOD = DEFAULT_PERIOD
DEFAULT_MACD_FAST = 12
DEFAULT_MACD_SLOW = 26
DEFAULT_MACD_SIGNAL = 9
DEFAULT_BOLLINGER_PERIOD = 20
DEFAULT_BOLLINGER_MULTIPLIER = 2.0

SUPPORT_RATIO = Decimal("0.95")
RESISTANCE_RATIO = Decimal("1.05")

# Rolling windows leave float residue. Values below this fraction of the
# series scale count as zero.
_RESIDUE_RATIO = 1e-9


class IndicatorKind(Enum):
    """Indicators selectable from the chart."""

    SMA = "sma"
    RSI = "rsi"
    MACD = "macd"
    BOLLINGER = "bollinger"


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _validate_period(name: str, period) -> None:
    if isinstance(period, bool) or not isinstance(period, int):
        raise InvalidParameterError(name, period, "must be an integer")
    if period <= 0:
        raise InvalidParameterError(name, period, "must be greater than zero")


def _validate_multiplier(multiplier) -> None:
    try:
        value = float(multiplier)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError("multiplier", multiplier, "must be a number") from exc
    if not math.isfinite(value) or value <= 0:
        raise InvalidParameterError("multiplier", multiplier, "must be a positive finite number")


def _series(prices: Prices) -> pd.Series:
    return pd.Series([float(p) for p in prices], dtype="float64")


def _to_result(values: pd.Series, warmup: int = 0) -> IndicatorResult:
    """Convert a pandas series into an aligned result.

    The first ``warmup`` positions and any NaN are marked insufficient.
    """
    out: list[Optional[float]] = []
    for i, value in enumerate(values.tolist()):
        if i < warmup or value is None or math.isnan(value):
            out.append(INSUFFICIENT_DATA)
        else:
            out.append(float(value))
    return IndicatorResult(values=tuple(out))


def _empty() -> IndicatorResult:
    return IndicatorResult(values=())


def _insufficient(n: int) -> IndicatorResult:
    return IndicatorResult(values=(INSUFFICIENT_DATA,) * n)


# ------------------------------------------------------------------
# Moving averages
# ------------------------------------------------------------------


def sma(prices: Prices, period: int) -> IndicatorResult:
    """Simple moving average over the trailing ``period`` prices.

    Positions 0..period-2 are insufficient. When the series is shorter
    than the period, every position is insufficient.
    """
    _validate_period("period", period)
    n = len(prices)
    if n == 0:
        return _empty()
    if n < period:
        return _insufficient(n)
    close = _series(prices)
    return _to_result(close.rolling(window=period).mean(), warmup=period - 1)


def ema(prices: Prices, period: int) -> IndicatorResult:
    """Exponential moving average seeded with the first price.

    ``EMA[0] = P[0]`` and ``EMA[i] = a*P[i] + (1-a)*EMA[i-1]`` with
    ``a = 2 / (period + 1)``.
    """
    _validate_period("period", period)
    if len(prices) == 0:
        return _empty()
    return _to_result(_ema_series(_series(prices), period))


def _ema_series(close: pd.Series, period: int) -> pd.Series:
    # adjust=False gives exactly the recursive definition above.
    return close.ewm(span=period, adjust=False).mean()


# ------------------------------------------------------------------
# Oscillators
# ------------------------------------------------------------------


def rsi(prices: Prices, period: int = DEFAULT_RSI_PERIOD) -> IndicatorResult:
    """Relative Strength Index.

    Average gain and loss are simple means of the last ``period``
    close-to-close changes. RSI is 100 when there are no losses and 0
    when there is neither gain nor loss. The first ``period`` positions
    are insufficient.
    """
    _validate_period("period", period)
    n = len(prices)
    if n == 0:
        return _empty()
    if n <= period:
        return _insufficient(n)

    close = _series(prices)
    delta = close.diff()
    tolerance = _RESIDUE_RATIO * float(delta.abs().max(skipna=True) or 0.0)
    avg_gain = delta.clip(lower=0).rolling(window=period, min_periods=period).mean()
    avg_loss = (-delta.clip(upper=0)).rolling(window=period, min_periods=period).mean()

    values: list[Optional[float]] = []
    for i, (gain, loss) in enumerate(zip(avg_gain.tolist(), avg_loss.tolist())):
        if i < period or math.isnan(gain) or math.isnan(loss):
            values.append(INSUFFICIENT_DATA)
            continue
        gain = 0.0 if gain <= tolerance else gain
        loss = 0.0 if loss <= tolerance else loss
        if loss == 0.0:
            values.append(0.0 if gain == 0.0 else 100.0)
            continue
        rs = gain / loss
        values.append(min(100.0, max(0.0, 100.0 - 100.0 / (1.0 + rs))))
    return IndicatorResult(values=tuple(values))


def macd(
    prices: Prices,
    fast: int = DEFAULT_MACD_FAST,
    slow: int = DEFAULT_MACD_SLOW,
    signal: int = DEFAULT_MACD_SIGNAL,
) -> MACDResult:
    """Moving Average Convergence/Divergence.

    The MACD line is EMA(fast) - EMA(slow); the signal line is the
    EMA(signal) of the MACD line; the histogram is their difference.
    Line positions before ``slow - 1`` and signal/histogram positions
    before ``slow + signal - 1`` are insufficient.
    """
    _validate_period("fast", fast)
    _validate_period("slow", slow)
    _validate_period("signal", signal)
    if fast >= slow:
        raise InvalidParameterError("fast", fast, f"must be smaller than slow ({slow})")
    if len(prices) == 0:
        return MACDResult(macd=_empty(), signal=_empty(), histogram=_empty())

    close = _series(prices)
    line = _ema_series(close, fast) - _ema_series(close, slow)
    signal_line = _ema_series(line, signal)
    histogram = line - signal_line

    signal_warmup = slow + signal - 1
    return MACDResult(
        macd=_to_result(line, warmup=slow - 1),
        signal=_to_result(signal_line, warmup=signal_warmup),
        histogram=_to_result(histogram, warmup=signal_warmup),
    )


# ------------------------------------------------------------------
# Bands
# ------------------------------------------------------------------


def bollinger_bands(
    prices: Prices,
    period: int = DEFAULT_BOLLINGER_PERIOD,
    multiplier: float = DEFAULT_BOLLINGER_MULTIPLIER,
) -> BollingerBands:
    """Bollinger Bands around the simple moving average.

    Half-width is ``multiplier`` times the population standard deviation
    of the trailing ``period`` closes. Flat prices collapse the bands
    onto the middle band.
    """
    _validate_period("period", period)
    _validate_multiplier(multiplier)
    n = len(prices)
    if n == 0:
        return BollingerBands(upper=_empty(), middle=_empty(), lower=_empty())
    if n < period:
        blank = _insufficient(n)
        return BollingerBands(upper=blank, middle=blank, lower=blank)

    close = _series(prices)
    middle = close.rolling(window=period).mean()
    std = close.rolling(window=period).std(ddof=0)
    std = std.mask(std <= _RESIDUE_RATIO * float(close.abs().max()), 0.0)
    half_width = float(multiplier) * std

    warmup = period - 1
    return BollingerBands(
        upper=_to_result(middle + half_width, warmup=warmup),
        middle=_to_result(middle, warmup=warmup),
        lower=_to_result(middle - half_width, warmup=warmup),
    )


def key_levels(stock: Stock) -> KeyLevels:
    """Support and resistance at 5% below and above the current price."""
    return KeyLevels(
        support=stock.price * SUPPORT_RATIO,
        resistance=stock.price * RESISTANCE_RATIO,
    )


# ------------------------------------------------------------------
# Dispatcher
# ------------------------------------------------------------------


def compute_indicator(
    kind: IndicatorKind,
    prices: Prices,
    period: Optional[int] = None,
    multiplier: float = DEFAULT_BOLLINGER_MULTIPLIER,
) -> dict[str, IndicatorResult]:
    """Compute an indicator and return its named series.

    Args:
        kind: Indicator to compute.
        prices: Price series, oldest first.
        period: Window length. Ignored by MACD, which uses 12/26/9.
        multiplier: Bollinger width multiplier.

    Returns:
        Mapping of series name to aligned result.
    """
    logger.debug("Computing %s over %d prices (period=%s)", kind.value, len(prices), period)

    if kind is IndicatorKind.SMA:
        return {"sma": sma(prices, period if period is not None else DEFAULT_PERIOD)}
    if kind is IndicatorKind.RSI:
        return {"rsi": rsi(prices, period if period is not None else DEFAULT_PERIOD)}
    if kind is IndicatorKind.MACD:
        result = macd(prices)
        return {"macd": result.macd, "signal": result.signal, "histogram": result.histogram}
    bands = bollinger_bands(
        prices,
        period if period is not None else DEFAULT_BOLLINGER_PERIOD,
        multiplier,
    )
    return {"upper": bands.upper, "middle": bands.middle, "lower": bands.lower}
