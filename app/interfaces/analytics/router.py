"""
FastAPI router for the analytics bounded context.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request

from app.application.analytics.compute_indicator import ComputeIndicatorUseCase
from app.application.analytics.dtos import (
    AddHoldingCommand,
    AlertResult,
    ComputeIndicatorCommand,
    CreateAlertCommand,
    GetPriceSeriesQuery,
    HoldingResult,
    ProcessQuotesCommand,
    RemoveHoldingCommand,
    SearchStocksQuery,
    StockResult,
    UpdateAlertCommand,
    WatchlistCommand,
)
from app.application.analytics.get_portfolio import GetPortfolioUseCase
from app.application.analytics.get_price_series import GetPriceSeriesUseCase
from app.application.analytics.manage_alerts import ManageAlertsUseCase
from app.application.analytics.manage_holdings import ManageHoldingsUseCase
from app.application.analytics.manage_watchlist import ManageWatchlistUseCase
from app.application.analytics.process_quotes import ProcessQuotesUseCase
from app.application.analytics.search_stocks import SearchStocksUseCase
from app.core.config import settings
from app.interfaces.analytics.dependencies import (
    get_compute_indicator_use_case,
    get_manage_alerts_use_case,
    get_manage_holdings_use_case,
    get_manage_watchlist_use_case,
    get_portfolio_use_case,
    get_price_series_use_case,
    get_process_quotes_use_case,
    get_search_stocks_use_case,
)
from app.interfaces.analytics.schemas import (
    SYMBOL_MAX_LEN,
    SYMBOL_PATTERN,
    AddHoldingRequest,
    AlertEventItem,
    AlertItem,
    AlertListResponse,
    ComputeIndicatorRequest,
    CreateAlertRequest,
    ErrorResponse,
    HoldingItem,
    IndicatorResponse,
    PortfolioResponse,
    PriceSeriesResponse,
    RefreshQuotesRequest,
    RefreshQuotesResponse,
    StockItem,
    StockListResponse,
    SymbolUpdateItem,
    TimeframeToken,
    UpdateAlertRequest,
)
from app.shared.security.rate_limiting import limiter

router = APIRouter(prefix="/analytics", tags=["analytics"])

SymbolPath = Annotated[
    str, Path(min_length=1, max_length=SYMBOL_MAX_LEN, pattern=SYMBOL_PATTERN)
]


def _holding_item(result: HoldingResult) -> HoldingItem:
    return HoldingItem(**vars(result))


def _stock_list(results: list[StockResult]) -> StockListResponse:
    return StockListResponse(stocks=[StockItem(**vars(r)) for r in results])


def _alert_item(result: AlertResult) -> AlertItem:
    return AlertItem(**vars(result))


# ------------------------------------------------------------------
# Portfolio
# ------------------------------------------------------------------


@router.get(
    "/portfolio",
    response_model=PortfolioResponse,
    summary="Portfolio overview",
    description="Total value, daily change, overall gain and every holding.",
)
def get_portfolio(
    use_case: GetPortfolioUseCase = Depends(get_portfolio_use_case),
) -> PortfolioResponse:
    """Return the portfolio summary with derived holding values."""
    result = use_case.execute()
    return PortfolioResponse(
        total_value=result.total_value,
        daily_change=result.daily_change,
        total_gain_percent=result.total_gain_percent,
        holdings=[_holding_item(h) for h in result.holdings],
    )


@router.post(
    "/portfolio/holdings",
    response_model=HoldingItem,
    status_code=201,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Add a holding",
    description="Buy shares of a stock at a given price.",
)
def add_holding(
    request: AddHoldingRequest,
    use_case: ManageHoldingsUseCase = Depends(get_manage_holdings_use_case),
) -> HoldingItem:
    """Add a holding and return it with its generated id."""
    command = AddHoldingCommand(
        symbol=request.symbol,
        shares=request.shares,
        purchase_price=request.purchase_price,
        purchase_date=request.purchase_date,
    )
    return _holding_item(use_case.add(command))


@router.delete(
    "/portfolio/holdings/{holding_id}",
    response_model=HoldingItem,
    responses={404: {"model": ErrorResponse}},
    summary="Remove a holding",
)
def remove_holding(
    holding_id: str = Path(..., min_length=1, max_length=64),
    use_case: ManageHoldingsUseCase = Depends(get_manage_holdings_use_case),
) -> HoldingItem:
    """Remove a holding by id and return what was removed."""
    return _holding_item(use_case.remove(RemoveHoldingCommand(holding_id=holding_id)))


# ------------------------------------------------------------------
# Watchlist and stocks
# ------------------------------------------------------------------


@router.get(
    "/watchlist",
    response_model=StockListResponse,
    summary="Watchlist",
)
def get_watchlist(
    use_case: ManageWatchlistUseCase = Depends(get_manage_watchlist_use_case),
) -> StockListResponse:
    return _stock_list(use_case.entries())


@router.put(
    "/watchlist/{symbol}",
    response_model=StockListResponse,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Watch a stock",
    description="Adding an already watched symbol leaves the watchlist unchanged.",
)
def add_to_watchlist(
    symbol: SymbolPath,
    use_case: ManageWatchlistUseCase = Depends(get_manage_watchlist_use_case),
) -> StockListResponse:
    return _stock_list(use_case.add(WatchlistCommand(symbol=symbol)))


@router.delete(
    "/watchlist/{symbol}",
    response_model=StockListResponse,
    summary="Stop watching a stock",
    description="Removing an absent symbol is a no-op.",
)
def remove_from_watchlist(
    symbol: SymbolPath,
    use_case: ManageWatchlistUseCase = Depends(get_manage_watchlist_use_case),
) -> StockListResponse:
    return _stock_list(use_case.remove(WatchlistCommand(symbol=symbol)))


@router.get(
    "/stocks/search",
    response_model=StockListResponse,
    summary="Search stocks",
    description="Case-insensitive match on symbol or company name.",
)
def search_stocks(
    query: str = Query(default="", max_length=64),
    use_case: SearchStocksUseCase = Depends(get_search_stocks_use_case),
) -> StockListResponse:
    return _stock_list(use_case.execute(SearchStocksQuery(query=query)))


@router.get(
    "/stocks/{symbol}/series",
    response_model=PriceSeriesResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Chart series",
    description="Price series for a timeframe with support and resistance levels.",
)
def get_price_series(
    symbol: SymbolPath,
    timeframe: TimeframeToken = Query(default="1M"),
    use_case: GetPriceSeriesUseCase = Depends(get_price_series_use_case),
) -> PriceSeriesResponse:
    """Return the sampled chart series for a stock."""
    result = use_case.execute(GetPriceSeriesQuery(symbol=symbol, timeframe=timeframe))
    return PriceSeriesResponse(**vars(result))


# ------------------------------------------------------------------
# Indicators
# ------------------------------------------------------------------


@router.post(
    "/indicators",
    response_model=IndicatorResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Technical indicator",
    description="SMA, RSI, MACD or Bollinger bands over a chart series.",
)
@limiter.limit(settings.rate_limit_heavy)
def compute_indicator(
    request: Request,
    body: ComputeIndicatorRequest,
    use_case: ComputeIndicatorUseCase = Depends(get_compute_indicator_use_case),
) -> IndicatorResponse:
    """Compute an indicator aligned with the chart series."""
    command = ComputeIndicatorCommand(
        symbol=body.symbol,
        timeframe=body.timeframe,
        indicator=body.indicator,
        period=body.period,
        multiplier=body.multiplier,
    )
    result = use_case.execute(command)
    return IndicatorResponse(**vars(result))


# ------------------------------------------------------------------
# Alerts
# ------------------------------------------------------------------


@router.get(
    "/alerts",
    response_model=AlertListResponse,
    summary="List custom alerts",
)
def list_alerts(
    use_case: ManageAlertsUseCase = Depends(get_manage_alerts_use_case),
) -> AlertListResponse:
    return AlertListResponse(alerts=[_alert_item(a) for a in use_case.list_alerts()])


@router.post(
    "/alerts",
    response_model=AlertItem,
    status_code=201,
    responses={422: {"model": ErrorResponse}},
    summary="Create a custom alert",
)
def create_alert(
    request: CreateAlertRequest,
    use_case: ManageAlertsUseCase = Depends(get_manage_alerts_use_case),
) -> AlertItem:
    command = CreateAlertCommand(
        symbol=request.symbol,
        alert_type=request.alert_type,
        condition=request.condition,
        threshold=request.threshold,
        is_active=request.is_active,
    )
    return _alert_item(use_case.create(command))


@router.patch(
    "/alerts/{alert_id}",
    response_model=AlertItem,
    responses={404: {"model": ErrorResponse}},
    summary="Activate or deactivate an alert",
)
def update_alert(
    request: UpdateAlertRequest,
    alert_id: str = Path(..., min_length=1, max_length=64),
    use_case: ManageAlertsUseCase = Depends(get_manage_alerts_use_case),
) -> AlertItem:
    command = UpdateAlertCommand(alert_id=alert_id, is_active=request.is_active)
    return _alert_item(use_case.update(command))


@router.delete(
    "/alerts/{alert_id}",
    status_code=204,
    responses={404: {"model": ErrorResponse}},
    summary="Delete an alert",
)
def delete_alert(
    alert_id: str = Path(..., min_length=1, max_length=64),
    use_case: ManageAlertsUseCase = Depends(get_manage_alerts_use_case),
) -> None:
    use_case.delete(alert_id)


# ------------------------------------------------------------------
# Quote pipeline
# ------------------------------------------------------------------


@router.post(
    "/quotes/refresh",
    response_model=RefreshQuotesResponse,
    summary="Refresh quotes",
    description=(
        "Fetch fresh quotes, update the portfolio, recompute indicators "
        "and evaluate alerts. Symbols default to every held, watched or "
        "alerted stock."
    ),
)
@limiter.limit(settings.rate_limit_heavy)
async def refresh_quotes(
    request: Request,
    body: RefreshQuotesRequest,
    use_case: ProcessQuotesUseCase = Depends(get_process_quotes_use_case),
) -> RefreshQuotesResponse:
    """Run the quote pipeline and return per-symbol updates and alert events."""
    result = await use_case.execute(ProcessQuotesCommand(symbols=tuple(body.symbols)))
    return RefreshQuotesResponse(
        updates=[SymbolUpdateItem(**vars(u)) for u in result.updates],
        events=[AlertEventItem(**vars(e)) for e in result.events],
    )
