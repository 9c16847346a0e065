"""
Adapter: Custom alert persistence.

Implements AlertRepository in process memory.
"""

import copy
import logging
import threading
from typing import Optional

from app.domain.analytics.entities import CustomAlert
from app.domain.analytics.ports import AlertRepository

logger = logging.getLogger(__name__)


class InMemoryAlertRepository(AlertRepository):
    """Stores the full list of alert definitions."""

    def __init__(self, alerts: Optional[list[CustomAlert]] = None) -> None:
        self._lock = threading.Lock()
        self._alerts: list[CustomAlert] = copy.deepcopy(list(alerts or []))

    def load(self) -> list[CustomAlert]:
        with self._lock:
            return copy.deepcopy(self._alerts)

    def save(self, alerts: list[CustomAlert]) -> None:
        with self._lock:
            self._alerts = copy.deepcopy(list(alerts))
        logger.debug("Saved %d alert definitions", len(alerts))
