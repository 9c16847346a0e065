"""
Domain entities for the analytics bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Iterator, Optional
from uuid import uuid4

HUNDRED = Decimal("100")

# Marker used inside IndicatorResult for the warm-up region.
INSUFFICIENT_DATA = None


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class Timeframe(Enum):
    """Chart timeframe tokens."""

    ONE_DAY = "1D"
    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    ONE_YEAR = "1Y"
    FIVE_YEARS = "5Y"


class AlertType(Enum):
    """Observed quantity a custom alert watches."""

    PRICE = "price"
    VOLUME = "volume"
    PERCENT_CHANGE = "percent_change"


class AlertCondition(Enum):
    """Direction of an alert comparison."""

    ABOVE = "above"
    BELOW = "below"


class AlertState(Enum):
    """Edge-trigger state of an active alert."""

    ARMED = "armed"
    TRIGGERED = "triggered"


@dataclass(frozen=True)
class AnalystRatings:
    """Buy/hold/sell distribution, normalized to percentages summing to 100."""

    buy: Decimal
    hold: Decimal
    sell: Decimal

    @classmethod
    def from_counts(cls, buy, hold, sell) -> "AnalystRatings":
        """Normalize raw shares into percentages.

        Raises:
            ValueError: If any share is negative or all of them are zero.
        """
        values = [_to_decimal(v) for v in (buy, hold, sell)]
        if any(v < 0 for v in values):
            raise ValueError(f"Analyst ratings must be non-negative: {values}")
        total = sum(values)
        if total == 0:
            raise ValueError("Analyst ratings total must be greater than zero")
        buy_pct, hold_pct = (v / total * HUNDRED for v in values[:2])
        # Sell takes the remainder so the three always add up to exactly 100.
        return cls(buy=buy_pct, hold=hold_pct, sell=HUNDRED - buy_pct - hold_pct)


@dataclass(frozen=True)
class StockProfile:
    """Read-only enrichment facts attached by the market data provider."""

    market_cap: Decimal
    pe_ratio: Decimal
    year_high: Decimal
    year_low: Decimal
    avg_volume: int
    dividend_yield: Decimal
    description: str
    analyst_ratings: AnalystRatings
    target_price: Decimal


@dataclass(frozen=True)
class Stock:
    """Immutable snapshot of a tradable instrument.

    Attributes:
        symbol: Stable identifier (ticker).
        name: Display name.
        price: Current price, strictly positive.
        percent_change: Signed percent change since the prior close.
        price_history: Closing prices, oldest first. Empty means absent.
        volume: Latest traded volume, when the provider reports it.
        profile: Optional enrichment facts; not part of identity.
    """

    symbol: str
    name: str
    price: Decimal
    percent_change: Decimal = Decimal("0")
    price_history: tuple[Decimal, ...] = ()
    volume: Optional[int] = None
    profile: Optional[StockProfile] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "price", _to_decimal(self.price))
        object.__setattr__(self, "percent_change", _to_decimal(self.percent_change))
        object.__setattr__(
            self, "price_history", tuple(_to_decimal(p) for p in self.price_history)
        )
        if not self.symbol:
            raise ValueError("Stock symbol cannot be empty")
        if self.price <= 0:
            raise ValueError(f"Non-positive price for {self.symbol}: {self.price}")
        if self.percent_change <= -HUNDRED:
            raise ValueError(
                f"Percent change for {self.symbol} must be above -100: {self.percent_change}"
            )
        if any(p <= 0 for p in self.price_history):
            raise ValueError(f"Price history for {self.symbol} must be strictly positive")
        if self.volume is not None and self.volume < 0:
            raise ValueError(f"Negative volume for {self.symbol}: {self.volume}")

    @property
    def id(self) -> str:
        return self.symbol

    @property
    def previous_close(self) -> Decimal:
        """Price implied by the current price and percent change."""
        return self.price / (1 + self.percent_change / HUNDRED)

    def with_price(self, price, percent_change, volume: Optional[int] = None) -> "Stock":
        """Return a new snapshot with an updated quote, keeping identity facts."""
        return replace(
            self,
            price=_to_decimal(price),
            percent_change=_to_decimal(percent_change),
            volume=volume if volume is not None else self.volume,
        )


@dataclass(frozen=True)
class Holding:
    """A single position in the portfolio. Never mutated in place."""

    id: str
    stock: Stock
    shares: int
    purchase_price: Decimal
    purchase_date: datetime

    @property
    def cost_basis(self) -> Decimal:
        return self.shares * self.purchase_price

    @property
    def current_value(self) -> Decimal:
        return self.shares * self.stock.price

    @property
    def gain_loss(self) -> Decimal:
        return self.current_value - self.cost_basis

    @property
    def gain_loss_percent(self) -> Decimal:
        return (self.stock.price - self.purchase_price) / self.purchase_price * HUNDRED

    def with_stock(self, stock: Stock) -> "Holding":
        """Return a replacement holding carrying a fresher stock snapshot."""
        return replace(self, stock=stock)


class Watchlist:
    """Ordered set of stocks, unique by symbol."""

    def __init__(self, stocks: Optional[list[Stock]] = None) -> None:
        self._entries: dict[str, Stock] = {}
        for stock in stocks or []:
            self.add(stock)

    def add(self, stock: Stock) -> bool:
        """Add a stock; returns False when its symbol is already present."""
        if stock.symbol in self._entries:
            return False
        self._entries[stock.symbol] = stock
        return True

    def remove(self, symbol: str) -> bool:
        """Remove a symbol; returns False when it was not present."""
        return self._entries.pop(symbol, None) is not None

    def replace(self, stock: Stock) -> bool:
        if stock.symbol not in self._entries:
            return False
        self._entries[stock.symbol] = stock
        return True

    def symbols(self) -> list[str]:
        return list(self._entries)

    def stocks(self) -> list[Stock]:
        return list(self._entries.values())

    def copy(self) -> "Watchlist":
        return Watchlist(self.stocks())

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._entries

    def __iter__(self) -> Iterator[Stock]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Watchlist):
            return NotImplemented
        return self.stocks() == other.stocks()

    def __repr__(self) -> str:
        return f"Watchlist({self.symbols()!r})"


@dataclass
class Portfolio:
    """Aggregate root owning holdings and the watchlist."""

    id: str = field(default_factory=lambda: str(uuid4()))
    holdings: list[Holding] = field(default_factory=list)
    watchlist: Watchlist = field(default_factory=Watchlist)

    def copy(self) -> "Portfolio":
        return Portfolio(
            id=self.id,
            holdings=list(self.holdings),
            watchlist=self.watchlist.copy(),
        )


@dataclass(frozen=True)
class PortfolioSummary:
    """Aggregate valuation metrics for a portfolio."""

    total_value: Decimal
    daily_change: Decimal
    total_gain_percent: Decimal
    holdings_count: int


@dataclass(frozen=True)
class CustomAlert:
    """A user-defined alert rule on a single symbol."""

    id: str
    symbol: str
    alert_type: AlertType
    condition: AlertCondition
    threshold: Decimal
    is_active: bool = True

    def describe(self) -> str:
        """Human-readable summary of the rule."""
        if self.alert_type is AlertType.PRICE:
            return f"Price {self.condition.value} ${self.threshold:.2f}"
        if self.alert_type is AlertType.VOLUME:
            return f"Volume {self.condition.value} {_compact_number(self.threshold)}"
        direction = "up by" if self.condition is AlertCondition.ABOVE else "down by"
        return f"Price {direction} {abs(self.threshold):.1f}%"


def _compact_number(value: Decimal) -> str:
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return str(int(value))


@dataclass(frozen=True)
class Quote:
    """One observation of a symbol handed in by the market data provider."""

    stock: Stock
    observed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    is_stale: bool = False

    @property
    def symbol(self) -> str:
        return self.stock.symbol

    @property
    def volume(self) -> Optional[int]:
        return self.stock.volume

    def as_stale(self) -> "Quote":
        return replace(self, is_stale=True)


@dataclass(frozen=True)
class AlertEvent:
    """Emitted once when an armed alert's condition becomes true."""

    alert_id: str
    symbol: str
    alert_type: AlertType
    condition: AlertCondition
    observed: Decimal
    threshold: Decimal
    triggered_at: datetime
    id: str = field(default_factory=lambda: str(uuid4()))


@dataclass(frozen=True)
class IndicatorResult:
    """Indicator series aligned 1:1 with its source prices.

    ``None`` entries mark the warm-up region where there is not
    enough history to compute a value.
    """

    values: tuple[Optional[float], ...]

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> Optional[float]:
        return self.values[index]

    def __iter__(self) -> Iterator[Optional[float]]:
        return iter(self.values)

    @property
    def warmup(self) -> int:
        """Number of leading insufficient-data positions."""
        count = 0
        for value in self.values:
            if value is not INSUFFICIENT_DATA:
                break
            count += 1
        return count

    @property
    def latest(self) -> Optional[float]:
        return self.values[-1] if self.values else None

    def is_sufficient(self, index: int) -> bool:
        return self.values[index] is not INSUFFICIENT_DATA


@dataclass(frozen=True)
class MACDResult:
    """MACD line, signal line and histogram."""

    macd: IndicatorResult
    signal: IndicatorResult
    histogram: IndicatorResult


@dataclass(frozen=True)
class BollingerBands:
    """Upper, middle and lower Bollinger bands."""

    upper: IndicatorResult
    middle: IndicatorResult
    lower: IndicatorResult


@dataclass(frozen=True)
class KeyLevels:
    """Support and resistance levels around the current price."""

    support: Decimal
    resistance: Decimal
