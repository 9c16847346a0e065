"""
Data Transfer Objects for the analytics application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

# ------------------------------------------------------------------
# Portfolio DTOs
# ------------------------------------------------------------------


@dataclass(frozen=True)
class AddHoldingCommand:
    """Input DTO for adding a holding.

    Attributes:
        symbol: Ticker of the purchased stock.
        shares: Number of shares bought (> 0).
        purchase_price: Price paid per share (> 0).
        purchase_date: When the purchase happened. Defaults to now.
    """

    symbol: str
    shares: int
    purchase_price: Decimal
    purchase_date: Optional[datetime] = None


@dataclass(frozen=True)
class RemoveHoldingCommand:
    """Input DTO for removing a holding by id."""

    holding_id: str


@dataclass(frozen=True)
class HoldingResult:
    """Output DTO for a holding with its derived values."""

    id: str
    symbol: str
    name: str
    shares: int
    purchase_price: Decimal
    purchase_date: datetime
    current_price: Decimal
    current_value: Decimal
    gain_loss: Decimal
    gain_loss_percent: Decimal


@dataclass(frozen=True)
class PortfolioResult:
    """Output DTO for the portfolio overview.

    Attributes:
        total_value: Sum of current holding values.
        daily_change: Approximate value change over the day.
        total_gain_percent: Overall gain versus the amount invested.
        holdings: Holdings in insertion order.
    """

    total_value: Decimal
    daily_change: Decimal
    total_gain_percent: Decimal
    holdings: list[HoldingResult]


# ------------------------------------------------------------------
# Stock DTOs
# ------------------------------------------------------------------


@dataclass(frozen=True)
class StockResult:
    """Output DTO for a stock snapshot."""

    symbol: str
    name: str
    price: Decimal
    percent_change: Decimal
    volume: Optional[int] = None
    is_watchlisted: bool = False


@dataclass(frozen=True)
class SearchStocksQuery:
    """Input DTO for a stock search by symbol or name fragment."""

    query: str


@dataclass(frozen=True)
class WatchlistCommand:
    """Input DTO for adding or removing a watchlist symbol."""

    symbol: str


# ------------------------------------------------------------------
# Series and indicator DTOs
# ------------------------------------------------------------------


@dataclass(frozen=True)
class GetPriceSeriesQuery:
    """Input DTO for a chart series.

    Attributes:
        symbol: Stock ticker.
        timeframe: Timeframe token (1D, 1W, 1M, 3M, 1Y, 5Y).
    """

    symbol: str
    timeframe: str


@dataclass(frozen=True)
class PriceSeriesResult:
    """Output DTO for a chart series with its key levels."""

    symbol: str
    timeframe: str
    prices: list[float]
    support: Decimal
    resistance: Decimal


@dataclass(frozen=True)
class ComputeIndicatorCommand:
    """Input DTO for an indicator computation.

    Attributes:
        symbol: Stock ticker.
        timeframe: Timeframe token of the source series.
        indicator: One of sma, rsi, macd, bollinger.
        period: Window length; defaults from settings when omitted.
        multiplier: Bollinger band width multiplier.
    """

    symbol: str
    timeframe: str
    indicator: str
    period: Optional[int] = None
    multiplier: Optional[float] = None


@dataclass(frozen=True)
class IndicatorSeriesResult:
    """Output DTO for an indicator aligned with its price series.

    ``series`` maps a series name (e.g. "upper", "signal") to values,
    with None in the warm-up region.
    """

    symbol: str
    timeframe: str
    indicator: str
    period: Optional[int]
    prices: list[float]
    series: dict[str, list[Optional[float]]]


# ------------------------------------------------------------------
# Alert DTOs
# ------------------------------------------------------------------


@dataclass(frozen=True)
class CreateAlertCommand:
    """Input DTO for creating a custom alert."""

    symbol: str
    alert_type: str
    condition: str
    threshold: Decimal
    is_active: bool = True


@dataclass(frozen=True)
class UpdateAlertCommand:
    """Input DTO for activating or deactivating an alert."""

    alert_id: str
    is_active: bool


@dataclass(frozen=True)
class AlertResult:
    """Output DTO for a custom alert and its trigger state."""

    id: str
    symbol: str
    alert_type: str
    condition: str
    threshold: Decimal
    is_active: bool
    state: str
    description: str


@dataclass(frozen=True)
class AlertEventResult:
    """Output DTO for a triggered alert."""

    id: str
    alert_id: str
    symbol: str
    alert_type: str
    condition: str
    observed: Decimal
    threshold: Decimal
    triggered_at: datetime


# ------------------------------------------------------------------
# Quote pipeline DTOs
# ------------------------------------------------------------------


@dataclass(frozen=True)
class ProcessQuotesCommand:
    """Input DTO for a quote refresh.

    Attributes:
        symbols: Symbols to refresh. Defaults to every held, watched
            or alerted symbol.
    """

    symbols: tuple[str, ...] = ()


@dataclass(frozen=True)
class SymbolUpdateResult:
    """Outcome of the pipeline for one symbol.

    Attributes:
        symbol: Stock ticker.
        price: Price in effect after the update, if any snapshot is known.
        percent_change: Percent change in effect after the update.
        is_stale: True when the provider failed and the last snapshot was kept.
        sma: Latest simple moving average of observed prices.
        rsi: Latest RSI of observed prices.
    """

    symbol: str
    price: Optional[Decimal]
    percent_change: Optional[Decimal]
    is_stale: bool
    sma: Optional[float] = None
    rsi: Optional[float] = None


@dataclass(frozen=True)
class ProcessQuotesResult:
    """Output DTO for a quote refresh."""

    updates: list[SymbolUpdateResult] = field(default_factory=list)
    events: list[AlertEventResult] = field(default_factory=list)
