"""
Adapter: Sample market data.

Implements MarketDataProvider over a static catalog of well-known US
stocks. Used for demos and local development until a real feed is
wired in. Everything is seeded, so two providers built with the same
seed produce identical profiles, histories and quote sequences.
"""

import logging
import threading
import zlib
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import numpy as np

from app.domain.analytics.entities import (
    AlertCondition,
    AlertType,
    AnalystRatings,
    CustomAlert,
    Holding,
    Portfolio,
    Quote,
    Stock,
    StockProfile,
    Timeframe,
    Watchlist,
)
from app.domain.analytics.errors import StaleQuoteError, SymbolNotFoundError
from app.domain.analytics.ports import MarketDataProvider
from app.domain.analytics.sampler import SeriesSource, SyntheticSeriesSource

logger = logging.getLogger(__name__)

# (symbol, name, price, percent change)
SAMPLE_CATALOG: tuple[tuple[str, str, str, str], ...] = (
    ("AAPL", "Apple Inc.", "185.92", "1.25"),
    ("MSFT", "Microsoft Corporation", "337.50", "-0.48"),
    ("AMZN", "Amazon.com, Inc.", "183.05", "2.10"),
    ("GOOGL", "Alphabet Inc.", "142.25", "0.75"),
    ("META", "Meta Platforms, Inc.", "378.66", "-1.22"),
    ("TSLA", "Tesla, Inc.", "215.38", "3.42"),
    ("NVDA", "NVIDIA Corporation", "476.35", "4.18"),
    ("JPM", "JPMorgan Chase & Co.", "156.48", "-0.33"),
    ("V", "Visa Inc.", "248.53", "0.12"),
    ("WMT", "Walmart Inc.", "58.78", "0.89"),
)

CENT = Decimal("0.01")
BASIS = Decimal("0.0001")


def _quantize(value: float, step: Decimal = CENT) -> Decimal:
    return Decimal(str(value)).quantize(step, rounding=ROUND_HALF_UP)


def _rng(seed: int, symbol: str, salt: str) -> np.random.Generator:
    return np.random.default_rng([seed, zlib.crc32(f"{salt}:{symbol}".encode())])


def enrich(symbol: str, name: str, price: Decimal, seed: int = 0) -> StockProfile:
    """Build the descriptive profile of a sample stock.

    Ranges mirror what a typical large-cap listing looks like; the
    values themselves are placeholders.
    """
    rng = _rng(seed, symbol, "profile")
    base = float(price)
    ratings = AnalystRatings.from_counts(
        _quantize(rng.uniform(30, 80)),
        _quantize(rng.uniform(10, 50)),
        _quantize(rng.uniform(0, 30)),
    )
    return StockProfile(
        market_cap=_quantize(base * rng.uniform(10_000_000, 1_000_000_000)),
        pe_ratio=_quantize(rng.uniform(10, 40)),
        year_high=_quantize(base * rng.uniform(1.05, 1.3)),
        year_low=_quantize(base * rng.uniform(0.7, 0.95)),
        avg_volume=int(rng.uniform(1_000_000, 10_000_000)),
        dividend_yield=_quantize(rng.uniform(0, 5)),
        description=(
            f"{name} ({symbol}) is part of the sample catalog. "
            "Profile figures are generated and do not reflect reported financials."
        ),
        analyst_ratings=ratings,
        target_price=_quantize(base * rng.uniform(0.8, 1.2)),
    )


def sample_history(symbol: str, price: Decimal, length: int = 20, seed: int = 0) -> list[Decimal]:
    """Closing prices scattered within 10% of the current price."""
    rng = _rng(seed, symbol, "history")
    base = float(price)
    return [_quantize(v) for v in rng.uniform(base * 0.9, base * 1.1, size=length)]


SAMPLE_WATCHLIST: tuple[str, ...] = ("AAPL", "MSFT", "GOOGL", "AMZN")

# (symbol, shares, purchase price, days held)
SAMPLE_HOLDINGS: tuple[tuple[str, int, str, int], ...] = (
    ("AAPL", 10, "175.50", 30),
    ("MSFT", 5, "320.25", 60),
    ("NVDA", 8, "400.10", 45),
)

# (symbol, alert type, condition, threshold)
SAMPLE_ALERTS: tuple[tuple[str, str, str, str], ...] = (
    ("AAPL", "price", "above", "200"),
    ("MSFT", "price", "below", "350"),
)


def catalog_stock(symbol: str) -> Stock:
    """Bare catalog snapshot of a sample stock, without enrichment."""
    for entry_symbol, name, price, pct in SAMPLE_CATALOG:
        if entry_symbol == symbol:
            return Stock(symbol=symbol, name=name, price=Decimal(price), percent_change=Decimal(pct))
    raise SymbolNotFoundError(symbol)


def sample_portfolio(
    provider: Optional["SampleMarketDataProvider"] = None,
    now: Optional[datetime] = None,
) -> Portfolio:
    """Demo portfolio: three holdings and a four-stock watchlist.

    Snapshots come from ``provider`` when given, so they carry the
    same enrichment as live quotes.
    """
    lookup = provider.snapshot if provider is not None else catalog_stock
    now = now or datetime.now(timezone.utc)
    holdings = [
        Holding(
            id=str(index),
            stock=lookup(symbol),
            shares=shares,
            purchase_price=Decimal(price),
            purchase_date=now - timedelta(days=days),
        )
        for index, (symbol, shares, price, days) in enumerate(SAMPLE_HOLDINGS, start=1)
    ]
    watchlist = Watchlist([lookup(symbol) for symbol in SAMPLE_WATCHLIST])
    return Portfolio(holdings=holdings, watchlist=watchlist)


def sample_alerts() -> list[CustomAlert]:
    return [
        CustomAlert(
            id=str(index),
            symbol=symbol,
            alert_type=AlertType(alert_type),
            condition=AlertCondition(condition),
            threshold=Decimal(threshold),
        )
        for index, (symbol, alert_type, condition, threshold) in enumerate(SAMPLE_ALERTS, start=1)
    ]


class SampleMarketDataProvider(MarketDataProvider):
    """In-process market data built from the sample catalog.

    Every fetched quote moves the price by a seeded random step of at
    most ``jitter_pct`` percent, relative to a fixed previous close.
    Tests can pin a quote with ``set_quote`` or simulate an outage with
    ``set_unavailable``.

    Args:
        seed: Base seed for profiles, histories and jitter.
        jitter_pct: Maximum per-fetch price move, in percent. 0 disables it.
        history_length: Stored closing prices per stock.
        series_source: Source for ``fetch_history``; synthetic by default.
    """

    def __init__(
        self,
        seed: int = 42,
        jitter_pct: float = 0.5,
        history_length: int = 20,
        series_source: Optional[SeriesSource] = None,
    ) -> None:
        self._seed = seed
        self._jitter_pct = jitter_pct
        self._series_source = series_source or SyntheticSeriesSource(seed=seed)
        self._lock = threading.Lock()
        self._stocks: dict[str, Stock] = {}
        self._previous_close: dict[str, Decimal] = {}
        self._jitter_rngs: dict[str, np.random.Generator] = {}
        self._pinned: set[str] = set()
        self._unavailable: set[str] = set()

        for symbol, name, price, pct in SAMPLE_CATALOG:
            price_dec = Decimal(price)
            profile = enrich(symbol, name, price_dec, seed)
            stock = Stock(
                symbol=symbol,
                name=name,
                price=price_dec,
                percent_change=Decimal(pct),
                price_history=tuple(sample_history(symbol, price_dec, history_length, seed)),
                volume=profile.avg_volume,
                profile=profile,
            )
            self._stocks[symbol] = stock
            self._previous_close[symbol] = stock.previous_close
            self._jitter_rngs[symbol] = _rng(seed, symbol, "jitter")

        logger.info("Sample market data ready: %d symbols, seed=%d", len(self._stocks), seed)

    def symbols(self) -> list[str]:
        return list(self._stocks)

    def _get(self, symbol: str) -> Stock:
        stock = self._stocks.get(symbol.strip().upper())
        if stock is None:
            raise SymbolNotFoundError(symbol)
        return stock

    def snapshot(self, symbol: str) -> Stock:
        """Return the current stock without advancing the quote."""
        with self._lock:
            return self._get(symbol)

    def set_quote(self, symbol: str, price, percent_change, volume: Optional[int] = None) -> Stock:
        """Pin the quote returned for a symbol until it is released."""
        with self._lock:
            stock = self._get(symbol).with_price(price, percent_change, volume)
            self._stocks[stock.symbol] = stock
            self._pinned.add(stock.symbol)
            return stock

    def release(self, symbol: str) -> None:
        """Resume jittered quotes for a pinned symbol."""
        with self._lock:
            stock = self._get(symbol)
            self._pinned.discard(stock.symbol)
            self._previous_close[stock.symbol] = stock.previous_close

    def set_unavailable(self, symbol: str, unavailable: bool = True) -> None:
        """Make ``fetch_quote`` fail with StaleQuoteError for a symbol."""
        symbol = symbol.strip().upper()
        with self._lock:
            if unavailable:
                self._unavailable.add(symbol)
            else:
                self._unavailable.discard(symbol)

    def fetch_quote(self, symbol: str) -> Quote:
        symbol = symbol.strip().upper()
        with self._lock:
            if symbol in self._unavailable:
                raise StaleQuoteError(symbol)
            stock = self._get(symbol)
            if symbol not in self._pinned and self._jitter_pct > 0:
                stock = self._jitter(stock)
                self._stocks[symbol] = stock
        logger.debug("Quote %s price=%s change=%s%%", symbol, stock.price, stock.percent_change)
        return Quote(stock=stock)

    def _jitter(self, stock: Stock) -> Stock:
        rng = self._jitter_rngs[stock.symbol]
        step = rng.uniform(-self._jitter_pct, self._jitter_pct) / 100.0
        price = max(_quantize(float(stock.price) * (1.0 + step)), CENT)
        previous_close = self._previous_close[stock.symbol]
        percent_change = ((price / previous_close - 1) * 100).quantize(BASIS, rounding=ROUND_HALF_UP)
        volume = None
        if stock.profile is not None:
            volume = int(stock.profile.avg_volume * rng.uniform(0.5, 1.5))
        return stock.with_price(price, percent_change, volume)

    def fetch_history(self, symbol: str, timeframe: Timeframe) -> list[Decimal]:
        stock = self.snapshot(symbol)
        return [_quantize(v, BASIS) for v in self._series_source.series(stock, timeframe)]

    def search(self, query: str) -> list[Stock]:
        """Case-insensitive match on symbol or name. Empty query matches nothing."""
        needle = (query or "").strip().lower()
        if not needle:
            return []
        with self._lock:
            return [
                stock
                for stock in self._stocks.values()
                if needle in stock.symbol.lower() or needle in stock.name.lower()
            ]
