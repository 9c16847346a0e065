"""
Pydantic schemas for analytics API request/response validation.

These schemas enforce input validation and define the API contract.
No business logic belongs here.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, Field

from app.core.config import settings

SYMBOL_DESCRIPTION = "Stock ticker symbol"
SYMBOL_PATTERN = r"^[A-Z0-9.\-]+$"
SYMBOL_MIN_LEN = 1
SYMBOL_MAX_LEN = 10

TimeframeToken = Literal["1D", "1W", "1M", "3M", "1Y", "5Y"]

SymbolField = Annotated[
    str,
    Field(min_length=SYMBOL_MIN_LEN, max_length=SYMBOL_MAX_LEN, pattern=SYMBOL_PATTERN),
]


class HealthResponse(BaseModel):
    """Liveness status with the running version."""

    status: str
    version: str
    series_source: str


class ErrorResponse(BaseModel):
    """Standard error response returned by all error handlers."""

    error: str
    detail: str | None = None


# ------------------------------------------------------------------
# Portfolio
# ------------------------------------------------------------------


class AddHoldingRequest(BaseModel):
    """Request schema for adding a holding.

    Attributes:
        symbol: Ticker (1-10 uppercase chars).
        shares: Number of shares bought (>= 1).
        purchase_price: Price paid per share (> 0).
        purchase_date: Optional purchase timestamp; defaults to now.
    """

    symbol: str = Field(
        ...,
        min_length=SYMBOL_MIN_LEN,
        max_length=SYMBOL_MAX_LEN,
        pattern=SYMBOL_PATTERN,
        description=SYMBOL_DESCRIPTION,
    )
    shares: int = Field(..., ge=1, description="Number of shares")
    purchase_price: Decimal = Field(..., gt=0, description="Price paid per share")
    purchase_date: datetime | None = Field(default=None, description="Purchase timestamp")


class HoldingItem(BaseModel):
    """A holding with its derived values."""

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


class PortfolioResponse(BaseModel):
    """Response schema for the portfolio overview."""

    total_value: Decimal
    daily_change: Decimal
    total_gain_percent: Decimal
    holdings: list[HoldingItem]


# ------------------------------------------------------------------
# Stocks and watchlist
# ------------------------------------------------------------------


class StockItem(BaseModel):
    """A stock snapshot."""

    symbol: str
    name: str
    price: Decimal
    percent_change: Decimal
    volume: Optional[int] = None
    is_watchlisted: bool = False


class StockListResponse(BaseModel):
    """Response schema for search results and the watchlist."""

    stocks: list[StockItem]


class PriceSeriesResponse(BaseModel):
    """Chart series with support and resistance levels."""

    symbol: str
    timeframe: str
    prices: list[float]
    support: Decimal
    resistance: Decimal


# ------------------------------------------------------------------
# Indicators
# ------------------------------------------------------------------


class ComputeIndicatorRequest(BaseModel):
    """Request schema for an indicator computation.

    Attributes:
        symbol: Ticker (1-10 uppercase chars).
        timeframe: Chart timeframe of the source series.
        indicator: One of sma, rsi, macd, bollinger.
        period: Window length; ignored for macd.
        multiplier: Bollinger band width in standard deviations.
    """

    symbol: str = Field(
        ...,
        min_length=SYMBOL_MIN_LEN,
        max_length=SYMBOL_MAX_LEN,
        pattern=SYMBOL_PATTERN,
        description=SYMBOL_DESCRIPTION,
    )
    timeframe: TimeframeToken = Field(default="1M", description="Chart timeframe")
    indicator: Literal["sma", "rsi", "macd", "bollinger"]
    period: int | None = Field(
        default=None,
        ge=settings.indicator_period_min,
        le=settings.indicator_period_max,
        description="Indicator period",
    )
    multiplier: float | None = Field(default=None, gt=0, le=10, description="Bollinger multiplier")


class IndicatorResponse(BaseModel):
    """Indicator series aligned with the prices; null marks warm-up positions."""

    symbol: str
    timeframe: str
    indicator: str
    period: int | None
    prices: list[float]
    series: dict[str, list[float | None]]


# ------------------------------------------------------------------
# Alerts
# ------------------------------------------------------------------


class CreateAlertRequest(BaseModel):
    """Request schema for creating a custom alert."""

    symbol: str = Field(
        ...,
        min_length=SYMBOL_MIN_LEN,
        max_length=SYMBOL_MAX_LEN,
        pattern=SYMBOL_PATTERN,
        description=SYMBOL_DESCRIPTION,
    )
    alert_type: Literal["price", "volume", "percent_change"]
    condition: Literal["above", "below"]
    threshold: Decimal
    is_active: bool = True


class UpdateAlertRequest(BaseModel):
    """Request schema for activating or deactivating an alert."""

    is_active: bool


class AlertItem(BaseModel):
    """A custom alert with its trigger state."""

    id: str
    symbol: str
    alert_type: str
    condition: str
    threshold: Decimal
    is_active: bool
    state: str
    description: str


class AlertListResponse(BaseModel):
    alerts: list[AlertItem]


# ------------------------------------------------------------------
# Quote refresh
# ------------------------------------------------------------------


class RefreshQuotesRequest(BaseModel):
    """Request schema for a quote refresh. Empty means every tracked symbol."""

    symbols: list[SymbolField] = Field(default_factory=list, max_length=50)


class SymbolUpdateItem(BaseModel):
    symbol: str
    price: Decimal | None
    percent_change: Decimal | None
    is_stale: bool
    sma: float | None = None
    rsi: float | None = None


class AlertEventItem(BaseModel):
    """A triggered alert."""

    id: str
    alert_id: str
    symbol: str
    alert_type: str
    condition: str
    observed: Decimal
    threshold: Decimal
    triggered_at: datetime


class RefreshQuotesResponse(BaseModel):
    """Response schema for a quote refresh."""

    updates: list[SymbolUpdateItem]
    events: list[AlertEventItem]
