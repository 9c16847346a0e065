"""
Domain service: Custom alert evaluation.

Holds the user's alert rules and one edge-trigger state per rule.

State machine (active alerts only):

    ARMED ──condition true──▶ TRIGGERED   (emits one AlertEvent)
      ▲                           │
      └──────condition false──────┘

Inactive alerts are skipped; their state is frozen until reactivation
and evaluation resumes from it on the next quote.
"""

import logging
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from threading import RLock
from typing import Optional
from uuid import uuid4

from app.domain.analytics.entities import (
    AlertCondition,
    AlertEvent,
    AlertState,
    AlertType,
    CustomAlert,
    Quote,
)
from app.domain.analytics.errors import AlertNotFoundError, InvalidParameterError

logger = logging.getLogger(__name__)


def _observed_value(alert: CustomAlert, quote: Quote) -> Optional[Decimal]:
    """Extract the quantity an alert watches from a quote."""
    if alert.alert_type is AlertType.PRICE:
        return quote.stock.price
    if alert.alert_type is AlertType.VOLUME:
        return Decimal(quote.volume) if quote.volume is not None else None
    return quote.stock.percent_change


def condition_met(alert: CustomAlert, observed: Optional[Decimal]) -> bool:
    """Evaluate an alert's comparison against an observed value.

    Price and volume compare strictly. Percent change compares the
    threshold's magnitude in the condition's direction: "above 2" means
    up by at least 2%, "below 2" means down by at least 2%.
    """
    if observed is None:
        return False
    if alert.alert_type is AlertType.PERCENT_CHANGE:
        magnitude = abs(alert.threshold)
        if alert.condition is AlertCondition.ABOVE:
            return observed >= magnitude
        return observed <= -magnitude
    if alert.condition is AlertCondition.ABOVE:
        return observed > alert.threshold
    return observed < alert.threshold


class AlertEvaluator:
    """Stateful, edge-triggered rule engine over incoming quotes.

    Args:
        alerts: Alert definitions to start with, e.g. from a repository.
    """

    def __init__(self, alerts: Optional[list[CustomAlert]] = None) -> None:
        self._alerts: dict[str, CustomAlert] = {}
        self._states: dict[str, AlertState] = {}
        self._lock = RLock()
        for alert in alerts or []:
            self.add_alert(alert)

    # ------------------------------------------------------------------
    # Alert set management
    # ------------------------------------------------------------------

    def create_alert(
        self,
        symbol: str,
        alert_type: AlertType,
        condition: AlertCondition,
        threshold,
        is_active: bool = True,
    ) -> CustomAlert:
        """Validate and register a new alert.

        Raises:
            InvalidParameterError: On an empty symbol, a non-finite
                threshold, or a negative volume threshold.
        """
        symbol = (symbol or "").strip().upper()
        if not symbol:
            raise InvalidParameterError("symbol", symbol, "must not be empty")
        try:
            value = Decimal(str(threshold))
        except (InvalidOperation, ValueError) as exc:
            raise InvalidParameterError("threshold", threshold, "must be a number") from exc
        if not value.is_finite():
            raise InvalidParameterError("threshold", threshold, "must be finite")
        if alert_type is AlertType.VOLUME and value < 0:
            raise InvalidParameterError("threshold", threshold, "volume cannot be negative")

        alert = CustomAlert(
            id=str(uuid4()),
            symbol=symbol,
            alert_type=alert_type,
            condition=condition,
            threshold=value,
            is_active=is_active,
        )
        self.add_alert(alert)
        return alert

    def add_alert(self, alert: CustomAlert) -> None:
        with self._lock:
            self._alerts[alert.id] = alert
            self._states.setdefault(alert.id, AlertState.ARMED)
        logger.info("Alert registered: %s %s (id=%s)", alert.symbol, alert.describe(), alert.id)

    def remove_alert(self, alert_id: str) -> CustomAlert:
        with self._lock:
            alert = self._alerts.pop(alert_id, None)
            if alert is None:
                raise AlertNotFoundError(alert_id)
            self._states.pop(alert_id, None)
        logger.info("Alert removed: %s (id=%s)", alert.symbol, alert_id)
        return alert

    def get_alert(self, alert_id: str) -> CustomAlert:
        with self._lock:
            alert = self._alerts.get(alert_id)
        if alert is None:
            raise AlertNotFoundError(alert_id)
        return alert

    def alerts(self, symbol: Optional[str] = None) -> list[CustomAlert]:
        with self._lock:
            return [a for a in self._alerts.values() if symbol is None or a.symbol == symbol]

    def symbols(self) -> list[str]:
        """Symbols with at least one active alert."""
        with self._lock:
            return list(dict.fromkeys(a.symbol for a in self._alerts.values() if a.is_active))

    def set_active(self, alert_id: str, active: bool) -> CustomAlert:
        """Activate or deactivate an alert without touching its state."""
        with self._lock:
            alert = self.get_alert(alert_id)
            updated = replace(alert, is_active=active)
            self._alerts[alert_id] = updated
        logger.info("Alert %s %s", alert_id, "activated" if active else "deactivated")
        return updated

    def state(self, alert_id: str) -> AlertState:
        with self._lock:
            if alert_id not in self._states:
                raise AlertNotFoundError(alert_id)
            return self._states[alert_id]

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, quote: Quote) -> list[AlertEvent]:
        """Run every active alert on the quote's symbol.

        Args:
            quote: Latest observation for one symbol.

        Returns:
            Events for alerts that moved from ARMED to TRIGGERED.
        """
        if quote.is_stale:
            logger.debug("Skipping alert evaluation for stale quote %s", quote.symbol)
            return []

        events: list[AlertEvent] = []
        with self._lock:
            for alert in self._alerts.values():
                if alert.symbol != quote.symbol or not alert.is_active:
                    continue
                observed = _observed_value(alert, quote)
                met = condition_met(alert, observed)
                previous = self._states[alert.id]

                if met and previous is AlertState.ARMED:
                    self._states[alert.id] = AlertState.TRIGGERED
                    events.append(
                        AlertEvent(
                            alert_id=alert.id,
                            symbol=alert.symbol,
                            alert_type=alert.alert_type,
                            condition=alert.condition,
                            observed=observed,
                            threshold=alert.threshold,
                            triggered_at=quote.observed_at,
                        )
                    )
                    logger.info(
                        "Alert triggered: %s %s (observed=%s)",
                        alert.symbol,
                        alert.describe(),
                        observed,
                    )
                elif not met and previous is AlertState.TRIGGERED:
                    self._states[alert.id] = AlertState.ARMED
                    logger.debug("Alert re-armed: %s (id=%s)", alert.symbol, alert.id)
        return events
