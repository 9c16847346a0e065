"""
Tests for the analytics API endpoints.

Runs the FastAPI app with its stateful collaborators overridden by
fresh in-memory instances per test. Validates request validation,
response schemas, and error mapping.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.domain.analytics.alert_evaluator import AlertEvaluator
from app.domain.analytics.alert_notifier import AlertNotifier
from app.domain.analytics.ledger import PortfolioLedger
from app.domain.analytics.sampler import HistoryResampler, SyntheticSeriesSource, TimeSeriesSampler
from app.infrastructure.analytics.alert_repository import InMemoryAlertRepository
from app.infrastructure.analytics.portfolio_repository import InMemoryPortfolioRepository
from app.infrastructure.analytics.sample_market_data import SampleMarketDataProvider
from app.interfaces.analytics.dependencies import (
    get_alert_evaluator,
    get_alert_notifier,
    get_alert_repository,
    get_ledger,
    get_market_data_provider,
    get_portfolio_repository,
    get_series_sampler,
)
from app.main import app

API = "/api/v1/analytics"


@pytest.fixture
def provider() -> SampleMarketDataProvider:
    return SampleMarketDataProvider(seed=11, jitter_pct=0)


@pytest.fixture
def client(provider: SampleMarketDataProvider):
    ledger = PortfolioLedger()
    evaluator = AlertEvaluator()
    notifier = AlertNotifier()
    portfolio_repo = InMemoryPortfolioRepository()
    alert_repo = InMemoryAlertRepository()
    sampler = TimeSeriesSampler(SyntheticSeriesSource(seed=11))

    app.dependency_overrides[get_market_data_provider] = lambda: provider
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_alert_evaluator] = lambda: evaluator
    app.dependency_overrides[get_alert_notifier] = lambda: notifier
    app.dependency_overrides[get_portfolio_repository] = lambda: portfolio_repo
    app.dependency_overrides[get_alert_repository] = lambda: alert_repo
    app.dependency_overrides[get_series_sampler] = lambda: sampler
    yield TestClient(app)
    app.dependency_overrides.clear()


def _add_holding(client: TestClient, symbol: str = "AAPL", shares: int = 10, price: str = "175.50"):
    return client.post(
        f"{API}/portfolio/holdings",
        json={"symbol": symbol, "shares": shares, "purchase_price": price},
    )


class TestHealthAndHeaders:
    """Tests for the health endpoint and security headers."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["series_source"] in ("synthetic", "history")

    def test_security_headers_present(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Cache-Control"] == "no-store"

    def test_oversized_body_rejected(self, client: TestClient) -> None:
        response = client.post(
            f"{API}/alerts",
            content=b"x" * (settings.max_request_size_bytes + 1),
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 413
        assert response.json()["error"] == "Request too large"
        assert response.headers["X-Frame-Options"] == "DENY"


class TestPortfolioEndpoints:
    """Tests for /analytics/portfolio."""

    def test_add_holding_returns_201(self, client: TestClient) -> None:
        response = _add_holding(client)
        assert response.status_code == 201
        body = response.json()
        assert body["id"]
        assert Decimal(body["gain_loss"]) == Decimal("104.20")

    def test_portfolio_overview(self, client: TestClient) -> None:
        _add_holding(client)
        body = client.get(f"{API}/portfolio").json()
        assert Decimal(body["total_value"]) == Decimal("1859.20")
        assert abs(Decimal(body["total_gain_percent"]) - Decimal("5.937")) < Decimal("0.001")
        assert len(body["holdings"]) == 1

    def test_empty_portfolio(self, client: TestClient) -> None:
        body = client.get(f"{API}/portfolio").json()
        assert Decimal(body["total_value"]) == 0
        assert body["holdings"] == []

    def test_remove_holding(self, client: TestClient) -> None:
        holding_id = _add_holding(client).json()["id"]
        assert client.delete(f"{API}/portfolio/holdings/{holding_id}").status_code == 200

        response = client.delete(f"{API}/portfolio/holdings/{holding_id}")
        assert response.status_code == 404
        assert response.json() == {"error": "Holding not found"}

    @pytest.mark.parametrize(
        "payload",
        [
            {"symbol": "aapl", "shares": 1, "purchase_price": "1"},
            {"symbol": "AAPL", "shares": 0, "purchase_price": "1"},
            {"symbol": "AAPL", "shares": 1, "purchase_price": "0"},
            {"symbol": "TOOLONGSYMBOL", "shares": 1, "purchase_price": "1"},
        ],
    )
    def test_invalid_payload_rejected(self, client: TestClient, payload: dict) -> None:
        response = client.post(f"{API}/portfolio/holdings", json=payload)
        assert response.status_code == 422

    def test_unknown_symbol_404(self, client: TestClient) -> None:
        response = _add_holding(client, symbol="ZZZZ")
        assert response.status_code == 404
        assert response.json()["error"] == "Symbol not found"

    def test_stale_provider_503(self, client: TestClient, provider) -> None:
        provider.set_unavailable("TSLA")
        response = _add_holding(client, symbol="TSLA")
        assert response.status_code == 503


class TestWatchlistAndSearch:
    """Tests for /analytics/watchlist and /analytics/stocks/search."""

    def test_watch_twice(self, client: TestClient) -> None:
        client.put(f"{API}/watchlist/V")
        body = client.put(f"{API}/watchlist/V").json()
        assert [s["symbol"] for s in body["stocks"]] == ["V"]

    def test_unwatch_absent(self, client: TestClient) -> None:
        response = client.delete(f"{API}/watchlist/V")
        assert response.status_code == 200
        assert response.json()["stocks"] == []

    def test_search(self, client: TestClient) -> None:
        client.put(f"{API}/watchlist/AAPL")
        body = client.get(f"{API}/stocks/search", params={"query": "apple"}).json()
        assert [s["symbol"] for s in body["stocks"]] == ["AAPL"]
        assert body["stocks"][0]["is_watchlisted"] is True

    def test_search_empty_query(self, client: TestClient) -> None:
        body = client.get(f"{API}/stocks/search").json()
        assert body["stocks"] == []


class TestSeriesAndIndicators:
    """Tests for chart series and indicator endpoints."""

    def test_series(self, client: TestClient) -> None:
        body = client.get(f"{API}/stocks/MSFT/series", params={"timeframe": "1W"}).json()
        assert len(body["prices"]) == 7
        assert body["prices"][-1] == pytest.approx(337.50)

    def test_bad_timeframe(self, client: TestClient) -> None:
        response = client.get(f"{API}/stocks/MSFT/series", params={"timeframe": "2W"})
        assert response.status_code == 422

    def test_missing_history_409(self) -> None:
        provider = SampleMarketDataProvider(jitter_pct=0, history_length=0)
        app.dependency_overrides[get_market_data_provider] = lambda: provider
        ledger = PortfolioLedger()
        app.dependency_overrides[get_ledger] = lambda: ledger
        app.dependency_overrides[get_series_sampler] = lambda: TimeSeriesSampler(HistoryResampler())
        try:
            response = TestClient(app).get(f"{API}/stocks/AAPL/series")
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 409

    def test_rsi(self, client: TestClient) -> None:
        response = client.post(
            f"{API}/indicators",
            json={"symbol": "AAPL", "timeframe": "1M", "indicator": "rsi", "period": 14},
        )
        assert response.status_code == 200
        values = response.json()["series"]["rsi"]
        assert len(values) == 30
        assert values[:14] == [None] * 14
        assert all(0 <= v <= 100 for v in values[14:])

    def test_bollinger_default_period(self, client: TestClient) -> None:
        response = client.post(
            f"{API}/indicators",
            json={"symbol": "AAPL", "timeframe": "3M", "indicator": "bollinger"},
        )
        body = response.json()
        assert body["period"] == 14
        assert set(body["series"]) == {"upper", "middle", "lower"}

    @pytest.mark.parametrize(
        "payload",
        [
            {"symbol": "AAPL", "indicator": "rsi", "period": 3},
            {"symbol": "AAPL", "indicator": "rsi", "period": 51},
            {"symbol": "AAPL", "indicator": "vwap"},
        ],
    )
    def test_invalid_indicator_request(self, client: TestClient, payload: dict) -> None:
        assert client.post(f"{API}/indicators", json=payload).status_code == 422


class TestAlertEndpoints:
    """Tests for /analytics/alerts and the quote refresh."""

    def _create(self, client: TestClient, threshold: str = "190") -> dict:
        response = client.post(
            f"{API}/alerts",
            json={"symbol": "AAPL", "alert_type": "price", "condition": "above", "threshold": threshold},
        )
        assert response.status_code == 201
        return response.json()

    def test_crud(self, client: TestClient) -> None:
        alert = self._create(client)
        assert alert["state"] == "armed"
        assert len(client.get(f"{API}/alerts").json()["alerts"]) == 1

        patched = client.patch(f"{API}/alerts/{alert['id']}", json={"is_active": False}).json()
        assert patched["is_active"] is False

        assert client.delete(f"{API}/alerts/{alert['id']}").status_code == 204
        assert client.delete(f"{API}/alerts/{alert['id']}").status_code == 404

    def test_invalid_alert_type(self, client: TestClient) -> None:
        response = client.post(
            f"{API}/alerts",
            json={"symbol": "AAPL", "alert_type": "spread", "condition": "above", "threshold": "1"},
        )
        assert response.status_code == 422

    def test_refresh_fires_once(self, client: TestClient, provider) -> None:
        self._create(client)
        provider.set_quote("AAPL", "191.00", "2.7")

        first = client.post(f"{API}/quotes/refresh", json={"symbols": ["AAPL"]}).json()
        second = client.post(f"{API}/quotes/refresh", json={"symbols": ["AAPL"]}).json()

        assert len(first["events"]) == 1
        assert first["events"][0]["alert_id"]
        assert Decimal(first["updates"][0]["price"]) == Decimal("191.00")
        assert second["events"] == []
        assert client.get(f"{API}/alerts").json()["alerts"][0]["state"] == "triggered"

    @pytest.mark.parametrize(
        "symbols",
        [["A" * 5000], ["aapl"], [""], ["AAPL", "BAD SYMBOL"], ["X" * 11]],
    )
    def test_refresh_rejects_malformed_symbols(self, client: TestClient, symbols) -> None:
        response = client.post(f"{API}/quotes/refresh", json={"symbols": symbols})
        assert response.status_code == 422

    def test_refresh_rejects_too_many_symbols(self, client: TestClient) -> None:
        response = client.post(f"{API}/quotes/refresh", json={"symbols": ["AAPL"] * 51})
        assert response.status_code == 422


class TestSampleDataWiring:
    """Tests for the startup seed selected by settings."""

    @pytest.fixture(autouse=True)
    def _fresh_repositories(self):
        get_portfolio_repository.cache_clear()
        get_alert_repository.cache_clear()
        yield
        get_portfolio_repository.cache_clear()
        get_alert_repository.cache_clear()

    def test_seeded_when_enabled(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "load_sample_data", True)
        portfolio = get_portfolio_repository().load()
        assert [h.stock.symbol for h in portfolio.holdings] == ["AAPL", "MSFT", "NVDA"]
        assert len(portfolio.watchlist) == 4
        assert [a.symbol for a in get_alert_repository().load()] == ["AAPL", "MSFT"]

    def test_empty_when_disabled(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "load_sample_data", False)
        assert get_portfolio_repository().load().holdings == []
        assert get_alert_repository().load() == []
