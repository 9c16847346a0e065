"""
Use case: Custom alert definitions.

Input: CreateAlertCommand / UpdateAlertCommand / alert id
Output: AlertResult
Side effects: Mutates the evaluator's alert set and persists it.
Failure cases: InvalidParameterError, AlertNotFoundError.
"""

import logging

from app.application.analytics.dtos import AlertResult, CreateAlertCommand, UpdateAlertCommand
from app.domain.analytics.alert_evaluator import AlertEvaluator
from app.domain.analytics.entities import AlertCondition, AlertType, CustomAlert
from app.domain.analytics.errors import InvalidParameterError
from app.domain.analytics.ports import AlertRepository

logger = logging.getLogger(__name__)


def _parse_enum(enum_cls, name: str, value: str):
    try:
        return enum_cls(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidParameterError(name, value, f"must be one of {allowed}") from exc


class ManageAlertsUseCase:
    """Creates, toggles, deletes and lists custom alerts."""

    def __init__(self, evaluator: AlertEvaluator, alert_repo: AlertRepository) -> None:
        self._evaluator = evaluator
        self._alert_repo = alert_repo

    def _to_result(self, alert: CustomAlert) -> AlertResult:
        return AlertResult(
            id=alert.id,
            symbol=alert.symbol,
            alert_type=alert.alert_type.value,
            condition=alert.condition.value,
            threshold=alert.threshold,
            is_active=alert.is_active,
            state=self._evaluator.state(alert.id).value,
            description=alert.describe(),
        )

    def _persist(self) -> None:
        self._alert_repo.save(self._evaluator.alerts())

    def list_alerts(self) -> list[AlertResult]:
        return [self._to_result(a) for a in self._evaluator.alerts()]

    def create(self, command: CreateAlertCommand) -> AlertResult:
        alert_type = _parse_enum(AlertType, "alert_type", command.alert_type)
        condition = _parse_enum(AlertCondition, "condition", command.condition)
        logger.info("Creating %s alert for %s", alert_type.value, command.symbol)
        alert = self._evaluator.create_alert(
            symbol=command.symbol,
            alert_type=alert_type,
            condition=condition,
            threshold=command.threshold,
            is_active=command.is_active,
        )
        self._persist()
        return self._to_result(alert)

    def update(self, command: UpdateAlertCommand) -> AlertResult:
        alert = self._evaluator.set_active(command.alert_id, command.is_active)
        self._persist()
        return self._to_result(alert)

    def delete(self, alert_id: str) -> None:
        self._evaluator.remove_alert(alert_id)
        self._persist()
