"""
Dependency injection for the analytics bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection. Stateful
collaborators (ledger, evaluator, provider, repositories) are
process-wide singletons; tests swap them through
``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends

from app.application.analytics.compute_indicator import ComputeIndicatorUseCase
from app.application.analytics.get_portfolio import GetPortfolioUseCase
from app.application.analytics.get_price_series import GetPriceSeriesUseCase
from app.application.analytics.manage_alerts import ManageAlertsUseCase
from app.application.analytics.manage_holdings import ManageHoldingsUseCase
from app.application.analytics.manage_watchlist import ManageWatchlistUseCase
from app.application.analytics.process_quotes import ProcessQuotesUseCase
from app.application.analytics.search_stocks import SearchStocksUseCase
from app.core.config import settings
from app.domain.analytics.alert_evaluator import AlertEvaluator
from app.domain.analytics.alert_notifier import AlertNotifier
from app.domain.analytics.ledger import PortfolioLedger
from app.domain.analytics.ports import (
    AlertRepository,
    MarketDataProvider,
    PortfolioRepository,
)
from app.domain.analytics.sampler import (
    HistoryResampler,
    SyntheticSeriesSource,
    TimeSeriesSampler,
)
from app.infrastructure.analytics.alert_repository import InMemoryAlertRepository
from app.infrastructure.analytics.portfolio_repository import (
    InMemoryPortfolioRepository,
)
from app.infrastructure.analytics.sample_market_data import (
    SampleMarketDataProvider,
    sample_alerts,
    sample_portfolio,
)


@lru_cache
def get_series_sampler() -> TimeSeriesSampler:
    """Build the chart sampler selected by ``settings.series_source``."""
    synthetic = SyntheticSeriesSource(
        seed=settings.synthetic_seed,
        volatility=settings.synthetic_volatility,
    )
    if settings.series_source == "history":
        return TimeSeriesSampler(HistoryResampler(fallback=synthetic))
    return TimeSeriesSampler(synthetic)


@lru_cache
def get_market_data_provider() -> MarketDataProvider:
    return SampleMarketDataProvider(
        seed=settings.synthetic_seed,
        series_source=get_series_sampler().source,
    )


@lru_cache
def get_portfolio_repository() -> PortfolioRepository:
    if settings.load_sample_data:
        return InMemoryPortfolioRepository(sample_portfolio(get_market_data_provider()))
    return InMemoryPortfolioRepository()


@lru_cache
def get_alert_repository() -> AlertRepository:
    if settings.load_sample_data:
        return InMemoryAlertRepository(sample_alerts())
    return InMemoryAlertRepository()


@lru_cache
def get_ledger() -> PortfolioLedger:
    """Build the process-wide ledger from the stored portfolio."""
    return PortfolioLedger(get_portfolio_repository().load())


@lru_cache
def get_alert_evaluator() -> AlertEvaluator:
    """Build the process-wide evaluator from the stored alert definitions."""
    return AlertEvaluator(get_alert_repository().load())


@lru_cache
def get_alert_notifier() -> AlertNotifier:
    return AlertNotifier(
        webhook_urls=settings.alert_webhook_urls,
        webhook_timeout=settings.webhook_timeout_seconds,
    )


def get_portfolio_use_case(
    ledger: PortfolioLedger = Depends(get_ledger),
) -> GetPortfolioUseCase:
    """Build GetPortfolioUseCase with its dependencies."""
    return GetPortfolioUseCase(ledger=ledger)


def get_manage_holdings_use_case(
    ledger: PortfolioLedger = Depends(get_ledger),
    provider: MarketDataProvider = Depends(get_market_data_provider),
    portfolio_repo: PortfolioRepository = Depends(get_portfolio_repository),
) -> ManageHoldingsUseCase:
    """Build ManageHoldingsUseCase with its dependencies."""
    return ManageHoldingsUseCase(
        ledger=ledger,
        provider=provider,
        portfolio_repo=portfolio_repo,
    )


def get_manage_watchlist_use_case(
    ledger: PortfolioLedger = Depends(get_ledger),
    provider: MarketDataProvider = Depends(get_market_data_provider),
    portfolio_repo: PortfolioRepository = Depends(get_portfolio_repository),
) -> ManageWatchlistUseCase:
    """Build ManageWatchlistUseCase with its dependencies."""
    return ManageWatchlistUseCase(
        ledger=ledger,
        provider=provider,
        portfolio_repo=portfolio_repo,
    )


def get_search_stocks_use_case(
    provider: MarketDataProvider = Depends(get_market_data_provider),
    ledger: PortfolioLedger = Depends(get_ledger),
) -> SearchStocksUseCase:
    """Build SearchStocksUseCase with its dependencies."""
    return SearchStocksUseCase(provider=provider, ledger=ledger)


def get_price_series_use_case(
    provider: MarketDataProvider = Depends(get_market_data_provider),
    ledger: PortfolioLedger = Depends(get_ledger),
    sampler: TimeSeriesSampler = Depends(get_series_sampler),
) -> GetPriceSeriesUseCase:
    """Build GetPriceSeriesUseCase with its dependencies."""
    return GetPriceSeriesUseCase(provider=provider, ledger=ledger, sampler=sampler)


def get_compute_indicator_use_case(
    series_use_case: GetPriceSeriesUseCase = Depends(get_price_series_use_case),
) -> ComputeIndicatorUseCase:
    """Build ComputeIndicatorUseCase with its dependencies."""
    return ComputeIndicatorUseCase(
        series_use_case=series_use_case,
        default_period=settings.default_indicator_period,
        default_multiplier=settings.bollinger_multiplier,
    )


def get_manage_alerts_use_case(
    evaluator: AlertEvaluator = Depends(get_alert_evaluator),
    alert_repo: AlertRepository = Depends(get_alert_repository),
) -> ManageAlertsUseCase:
    """Build ManageAlertsUseCase with its dependencies."""
    return ManageAlertsUseCase(evaluator=evaluator, alert_repo=alert_repo)


@lru_cache(maxsize=8)
def _process_quotes_use_case(
    provider: MarketDataProvider,
    ledger: PortfolioLedger,
    evaluator: AlertEvaluator,
    notifier: AlertNotifier,
    portfolio_repo: PortfolioRepository,
) -> ProcessQuotesUseCase:
    return ProcessQuotesUseCase(
        provider=provider,
        ledger=ledger,
        evaluator=evaluator,
        notifier=notifier,
        portfolio_repo=portfolio_repo,
        indicator_period=settings.default_indicator_period,
        history_max_length=settings.history_max_length,
    )


def get_process_quotes_use_case(
    provider: MarketDataProvider = Depends(get_market_data_provider),
    ledger: PortfolioLedger = Depends(get_ledger),
    evaluator: AlertEvaluator = Depends(get_alert_evaluator),
    notifier: AlertNotifier = Depends(get_alert_notifier),
    portfolio_repo: PortfolioRepository = Depends(get_portfolio_repository),
) -> ProcessQuotesUseCase:
    """Return the quote pipeline bound to the given collaborators.

    The pipeline keeps per-symbol locks and observed prices, so one
    instance is reused for the same set of collaborators.
    """
    return _process_quotes_use_case(provider, ledger, evaluator, notifier, portfolio_repo)
