"""
Time-series sampler.

Maps a chart timeframe to a canonical number of samples and produces a
price series of exactly that length for a stock:

    Timeframe   Samples
    1D          24      (hourly)
    1W          7       (daily)
    1M          30      (daily)
    3M          90      (daily)
    1Y          252     (trading days)
    5Y          60      (monthly)

Two interchangeable sources:
    HistoryResampler       resamples the stock's stored price history.
    SyntheticSeriesSource  placeholder walk for stocks without a real feed.
"""

import logging
import math
import zlib
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from app.domain.analytics.entities import Stock, Timeframe
from app.domain.analytics.errors import InsufficientHistoryError, InvalidParameterError

logger = logging.getLogger(__name__)

TIMEFRAME_SAMPLES: dict[Timeframe, int] = {
    Timeframe.ONE_DAY: 24,
    Timeframe.ONE_WEEK: 7,
    Timeframe.ONE_MONTH: 30,
    Timeframe.THREE_MONTHS: 90,
    Timeframe.ONE_YEAR: 252,
    Timeframe.FIVE_YEARS: 60,
}


def parse_timeframe(token) -> Timeframe:
    """Resolve a timeframe token such as ``"1M"``.

    Raises:
        InvalidParameterError: If the token is not a known timeframe.
    """
    if isinstance(token, Timeframe):
        return token
    try:
        return Timeframe(str(token).strip().upper())
    except ValueError as exc:
        allowed = ", ".join(tf.value for tf in Timeframe)
        raise InvalidParameterError("timeframe", token, f"must be one of {allowed}") from exc


def sample_count(timeframe: Timeframe) -> int:
    return TIMEFRAME_SAMPLES[timeframe]


class SeriesSource(ABC):
    """Produces a price series of a given length for a stock."""

    @abstractmethod
    def series(self, stock: Stock, timeframe: Timeframe) -> list[float]:
        """Return ``sample_count(timeframe)`` prices, oldest first."""
        raise NotImplementedError


class SyntheticSeriesSource(SeriesSource):
    """Stand-in for a historical data feed.

    Generates a reproducible random walk biased in the direction of the
    stock's percent change, pinned so that the first sample equals the
    previous close and the last equals the current price. Replace with
    HistoryResampler once real history is available.

    Args:
        seed: Base seed; combined with symbol and timeframe per series.
        volatility: Per-step noise, in percent. Must lie in (0, 100).
    """

    def __init__(self, seed: int = 0, volatility: float = 0.5) -> None:
        if not 0 < volatility < 100:
            raise InvalidParameterError("volatility", volatility, "must be between 0 and 100")
        self._seed = seed
        self._volatility = volatility

    def _rng(self, stock: Stock, timeframe: Timeframe) -> np.random.Generator:
        key = f"{stock.symbol}:{timeframe.value}".encode()
        return np.random.default_rng([self._seed, zlib.crc32(key)])

    def series(self, stock: Stock, timeframe: Timeframe) -> list[float]:
        count = sample_count(timeframe)
        start = float(stock.previous_close)
        end = float(stock.price)
        pct = float(stock.percent_change)

        rng = self._rng(stock, timeframe)
        trend = math.copysign(1.0, pct) if pct != 0 else 0.0
        drift = trend * abs(pct) / 100.0 / count
        noise = rng.uniform(-self._volatility, self._volatility, size=count - 1) / 100.0

        # Walk in log space so every sample stays positive.
        steps = np.log1p(np.maximum(noise + drift, -0.99))
        path = np.concatenate(([math.log(start)], math.log(start) + np.cumsum(steps)))

        # Linear bridge correction pins the final sample to the current price.
        ramp = np.linspace(0.0, 1.0, count)
        path = path + ramp * (math.log(end) - path[-1])

        values = np.exp(path).tolist()
        values[0] = start
        values[-1] = end
        return values


class HistoryResampler(SeriesSource):
    """Resamples the stock's stored price history to the canonical length.

    The last sample is anchored to the current price. Without stored
    history the fallback source is used when configured.

    Args:
        fallback: Source used when a stock carries no history.
    """

    def __init__(self, fallback: Optional[SeriesSource] = None) -> None:
        self._fallback = fallback

    def series(self, stock: Stock, timeframe: Timeframe) -> list[float]:
        count = sample_count(timeframe)
        history = [float(p) for p in stock.price_history]
        if not history:
            if self._fallback is None:
                raise InsufficientHistoryError(stock.symbol)
            logger.debug("No stored history for %s, using fallback source", stock.symbol)
            return self._fallback.series(stock, timeframe)

        if len(history) == 1:
            values = [history[0]] * count
        else:
            source_x = np.linspace(0.0, 1.0, len(history))
            target_x = np.linspace(0.0, 1.0, count)
            values = np.interp(target_x, source_x, history).tolist()
        values[-1] = float(stock.price)
        return values


class TimeSeriesSampler:
    """Entry point used by the application layer.

    Args:
        source: Series source; swap to change where prices come from.
    """

    def __init__(self, source: SeriesSource) -> None:
        self._source = source

    @property
    def source(self) -> SeriesSource:
        return self._source

    def sample(self, stock: Stock, timeframe) -> list[float]:
        """Return the series for a stock over a timeframe token or enum."""
        tf = parse_timeframe(timeframe)
        values = self._source.series(stock, tf)
        logger.debug(
            "Sampled %d points for %s over %s via %s",
            len(values),
            stock.symbol,
            tf.value,
            type(self._source).__name__,
        )
        return values
