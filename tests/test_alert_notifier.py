"""
Tests for the multi-channel AlertNotifier.

Webhooks are exercised against a patched httpx.AsyncClient; no network.
"""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.domain.analytics.alert_notifier import AlertNotifier, event_to_dict
from app.domain.analytics.entities import AlertCondition, AlertEvent, AlertType


def _event(observed: str = "201.50") -> AlertEvent:
    return AlertEvent(
        alert_id="alert-1",
        symbol="AAPL",
        alert_type=AlertType.PRICE,
        condition=AlertCondition.ABOVE,
        observed=Decimal(observed),
        threshold=Decimal("200"),
        triggered_at=datetime(2024, 3, 1, 15, 30, tzinfo=timezone.utc),
    )


def _mock_client(post: AsyncMock) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.post = post
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


class TestNotifierConfig:
    """Tests for channel registration."""

    def test_invalid_scheme_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid webhook URL scheme"):
            AlertNotifier(webhook_urls=["ftp://hooks.example.com"])

    def test_duplicate_webhook_ignored(self) -> None:
        notifier = AlertNotifier()
        notifier.add_webhook("https://hooks.example.com/a")
        notifier.add_webhook("https://hooks.example.com/a")
        assert notifier.webhook_urls == ["https://hooks.example.com/a"]
        notifier.remove_webhook("https://hooks.example.com/a")
        assert notifier.webhook_urls == []

    def test_event_serialization(self) -> None:
        payload = event_to_dict(_event())
        assert payload["symbol"] == "AAPL"
        assert payload["alert_type"] == "price"
        assert payload["condition"] == "above"
        assert payload["observed"] == 201.5
        assert payload["triggered_at"].startswith("2024-03-01T15:30")


class TestNotifierDispatch:
    """Tests for webhook and callback delivery."""

    @pytest.mark.asyncio
    async def test_empty_batch_is_noop(self) -> None:
        notifier = AlertNotifier()
        summary = await notifier.notify([])
        assert summary.total_events == 0
        assert notifier.stats["total_notifications"] == 0

    @pytest.mark.asyncio
    async def test_webhook_post_success(self) -> None:
        notifier = AlertNotifier(webhook_urls=["https://hooks.example.com/alert"])
        mock_resp = MagicMock()
        mock_resp.raise_for_status = MagicMock()
        post = AsyncMock(return_value=mock_resp)

        with patch("app.domain.analytics.alert_notifier.httpx.AsyncClient") as MockClient:
            MockClient.return_value = _mock_client(post)
            summary = await notifier.notify([_event()])

        assert summary.all_success is True
        assert summary.total_sent == 1
        _, kwargs = post.call_args
        assert kwargs["headers"]["X-Aurelius-Event"] == "alert_triggered"
        assert kwargs["json"]["total_events"] == 1
        assert notifier.stats["webhook_calls"] == 1

    @pytest.mark.asyncio
    async def test_webhook_failure_handled(self) -> None:
        notifier = AlertNotifier(webhook_urls=["https://hooks.example.com/alert"])
        post = AsyncMock(side_effect=ConnectionError("timeout"))

        with patch("app.domain.analytics.alert_notifier.httpx.AsyncClient") as MockClient:
            MockClient.return_value = _mock_client(post)
            summary = await notifier.notify([_event()])

        assert summary.all_success is False
        assert "timeout" in summary.results[0].error
        assert notifier.stats["errors"] == 1

    @pytest.mark.asyncio
    async def test_callback_invoked(self) -> None:
        received = []

        async def on_alert(events):
            received.extend(events)

        notifier = AlertNotifier()
        notifier.add_callback(on_alert)
        summary = await notifier.notify([_event(), _event("202")])

        assert len(received) == 2
        assert summary.results[0].channel == "callback:on_alert"
        assert notifier.stats["total_events_sent"] == 2

    @pytest.mark.asyncio
    async def test_callback_failure_isolated(self) -> None:
        async def broken(_events):
            raise RuntimeError("ui down")

        received = []

        async def healthy(events):
            received.extend(events)

        notifier = AlertNotifier()
        notifier.add_callback(broken)
        notifier.add_callback(healthy)
        summary = await notifier.notify([_event()])

        assert len(received) == 1
        assert [r.success for r in summary.results] == [False, True]
