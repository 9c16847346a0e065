"""
Alert notification dispatch.

Delivers triggered custom alerts through multiple channels:
    1. HTTP webhook POST to configurable URLs
    2. In-process async callback hooks (UI push, logging, metrics)

Architecture:
    AlertEvaluator  ──▶  AlertNotifier
                               │
                         ┌─────┴──────────┐
                         │ Channels:       │
                         │  • Webhook      │
                         │  • Callback     │
                         └─────────────────┘

Usage:
    notifier = AlertNotifier(webhook_urls=["https://hooks.example.com/alerts"])
    notifier.add_callback(push_to_ui)
    await notifier.notify(events)
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Coroutine
from urllib.parse import urlparse

import httpx

from app.domain.analytics.entities import AlertEvent

logger = logging.getLogger(__name__)


@dataclass
class NotificationResult:
    """Result of a notification dispatch on one channel."""

    channel: str
    success: bool
    recipients: int = 0
    error: str | None = None
    latency_ms: float = 0.0


@dataclass
class NotificationSummary:
    """Summary of all channel dispatches for a batch of events."""

    total_events: int = 0
    results: list[NotificationResult] = field(default_factory=list)

    @property
    def total_sent(self) -> int:
        return sum(r.recipients for r in self.results if r.success)

    @property
    def all_success(self) -> bool:
        return all(r.success for r in self.results)


def event_to_dict(event: AlertEvent) -> dict:
    """Serialize an AlertEvent for JSON transport."""
    return {
        "id": event.id,
        "alert_id": event.alert_id,
        "symbol": event.symbol,
        "alert_type": event.alert_type.value,
        "condition": event.condition.value,
        "observed": float(event.observed),
        "threshold": float(event.threshold),
        "triggered_at": event.triggered_at.isoformat(),
    }


# Type alias for async callback hooks
NotificationCallback = Callable[
    [list[AlertEvent]],
    Coroutine[Any, Any, None],
]


class AlertNotifier:
    """Multi-channel alert event dispatcher.

    Args:
        webhook_urls: Initial list of webhook URLs to POST events to.
        webhook_timeout: HTTP timeout in seconds for webhook calls.
    """

    def __init__(
        self,
        webhook_urls: list[str] | None = None,
        webhook_timeout: float = 10.0,
    ) -> None:
        self._webhook_urls: list[str] = []
        self._callbacks: list[NotificationCallback] = []
        self._webhook_timeout = webhook_timeout
        self._stats = {
            "total_notifications": 0,
            "total_events_sent": 0,
            "webhook_calls": 0,
            "callback_invocations": 0,
            "errors": 0,
        }
        for url in webhook_urls or []:
            self.add_webhook(url)

    @property
    def stats(self) -> dict:
        return dict(self._stats)

    @property
    def webhook_urls(self) -> list[str]:
        return list(self._webhook_urls)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def add_webhook(self, url: str) -> None:
        """Register a webhook URL for event delivery.

        Raises:
            ValueError: If the URL scheme is not http or https.
        """
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            msg = f"Invalid webhook URL scheme: {parsed.scheme}"
            raise ValueError(msg)
        if url not in self._webhook_urls:
            self._webhook_urls.append(url)
            logger.info("Webhook registered: %s", url)

    def remove_webhook(self, url: str) -> None:
        if url in self._webhook_urls:
            self._webhook_urls.remove(url)
            logger.info("Webhook removed: %s", url)

    def add_callback(self, callback: NotificationCallback) -> None:
        """Register an async callback for event delivery."""
        self._callbacks.append(callback)

    # ------------------------------------------------------------------
    # Main dispatch
    # ------------------------------------------------------------------

    async def notify(self, events: list[AlertEvent]) -> NotificationSummary:
        """Dispatch events through all registered channels concurrently.

        Channel failures are logged and reported in the summary; they
        never propagate to the caller.
        """
        if not events:
            return NotificationSummary(total_events=0)

        self._stats["total_notifications"] += 1
        self._stats["total_events_sent"] += len(events)
        summary = NotificationSummary(total_events=len(events))

        tasks = [self._send_webhook(url, events) for url in self._webhook_urls]
        tasks.extend(self._send_callback(cb, events) for cb in self._callbacks)

        if tasks:
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for result in results:
                if isinstance(result, NotificationResult):
                    summary.results.append(result)
                elif isinstance(result, Exception):
                    self._stats["errors"] += 1
                    summary.results.append(
                        NotificationResult(channel="unknown", success=False, error=str(result))
                    )

        return summary

    # ------------------------------------------------------------------
    # Channel: HTTP webhook
    # ------------------------------------------------------------------

    async def _send_webhook(self, url: str, events: list[AlertEvent]) -> NotificationResult:
        """POST events to a webhook URL."""
        start = time.monotonic()
        payload = {
            "event": "alert_triggered",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "total_events": len(events),
            "events": [event_to_dict(e) for e in events],
        }

        try:
            async with httpx.AsyncClient(timeout=self._webhook_timeout) as client:
                resp = await client.post(
                    url,
                    json=payload,
                    headers={
                        "Content-Type": "application/json",
                        "X-Aurelius-Event": "alert_triggered",
                    },
                )
                resp.raise_for_status()

            self._stats["webhook_calls"] += 1
            return NotificationResult(
                channel=f"webhook:{url}",
                success=True,
                recipients=1,
                latency_ms=round((time.monotonic() - start) * 1000, 2),
            )

        except Exception as exc:
            self._stats["errors"] += 1
            logger.error("Webhook POST to %s failed: %s", url, exc)
            return NotificationResult(
                channel=f"webhook:{url}",
                success=False,
                error=str(exc),
                latency_ms=round((time.monotonic() - start) * 1000, 2),
            )

    # ------------------------------------------------------------------
    # Channel: Async callbacks
    # ------------------------------------------------------------------

    async def _send_callback(
        self,
        callback: NotificationCallback,
        events: list[AlertEvent],
    ) -> NotificationResult:
        """Invoke an async callback with the events."""
        start = time.monotonic()
        name = getattr(callback, "__name__", type(callback).__name__)

        try:
            await callback(events)
            self._stats["callback_invocations"] += 1
            return NotificationResult(
                channel=f"callback:{name}",
                success=True,
                recipients=1,
                latency_ms=round((time.monotonic() - start) * 1000, 2),
            )

        except Exception as exc:
            self._stats["errors"] += 1
            logger.error("Callback %s failed: %s", name, exc)
            return NotificationResult(
                channel=f"callback:{name}",
                success=False,
                error=str(exc),
                latency_ms=round((time.monotonic() - start) * 1000, 2),
            )
