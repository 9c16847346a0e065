"""
Tests for the edge-triggered AlertEvaluator.

Quotes are built in memory; no IO.
"""

from decimal import Decimal
from typing import Optional

import pytest

from app.domain.analytics.alert_evaluator import AlertEvaluator
from app.domain.analytics.entities import (
    AlertCondition,
    AlertState,
    AlertType,
    Quote,
    Stock,
)
from app.domain.analytics.errors import AlertNotFoundError, InvalidParameterError


def _quote(price: str, pct: str = "0", volume: Optional[int] = None, symbol: str = "AAPL") -> Quote:
    stock = Stock(
        symbol=symbol,
        name=f"{symbol} Inc.",
        price=Decimal(price),
        percent_change=Decimal(pct),
        volume=volume,
    )
    return Quote(stock=stock)


@pytest.fixture
def evaluator() -> AlertEvaluator:
    return AlertEvaluator()


class TestEdgeTrigger:
    """Tests for ARMED/TRIGGERED transitions."""

    def test_crossing_fires_once(self, evaluator: AlertEvaluator) -> None:
        alert = evaluator.create_alert("AAPL", AlertType.PRICE, AlertCondition.ABOVE, 200)
        events = evaluator.evaluate(_quote("190"))
        for price in ("201", "202", "203", "204", "205", "206"):
            events.extend(evaluator.evaluate(_quote(price)))

        assert len(events) == 1
        assert events[0].alert_id == alert.id
        assert events[0].observed == Decimal("201")
        assert evaluator.state(alert.id) is AlertState.TRIGGERED

    def test_rearms_when_condition_clears(self, evaluator: AlertEvaluator) -> None:
        alert = evaluator.create_alert("AAPL", AlertType.PRICE, AlertCondition.ABOVE, 200)
        fired = [len(evaluator.evaluate(_quote(p))) for p in ("201", "195", "203")]
        assert fired == [1, 0, 1]
        assert evaluator.state(alert.id) is AlertState.TRIGGERED

    def test_threshold_itself_does_not_fire(self, evaluator: AlertEvaluator) -> None:
        evaluator.create_alert("AAPL", AlertType.PRICE, AlertCondition.ABOVE, 200)
        assert evaluator.evaluate(_quote("200")) == []

    def test_below_condition(self, evaluator: AlertEvaluator) -> None:
        evaluator.create_alert("AAPL", AlertType.PRICE, AlertCondition.BELOW, 150)
        assert evaluator.evaluate(_quote("160")) == []
        assert len(evaluator.evaluate(_quote("149.99"))) == 1

    def test_other_symbols_ignored(self, evaluator: AlertEvaluator) -> None:
        evaluator.create_alert("AAPL", AlertType.PRICE, AlertCondition.ABOVE, 200)
        assert evaluator.evaluate(_quote("500", symbol="MSFT")) == []

    def test_stale_quote_skipped(self, evaluator: AlertEvaluator) -> None:
        alert = evaluator.create_alert("AAPL", AlertType.PRICE, AlertCondition.ABOVE, 200)
        assert evaluator.evaluate(_quote("250").as_stale()) == []
        assert evaluator.state(alert.id) is AlertState.ARMED


class TestActivation:
    """Tests for inactive alerts."""

    def test_inactive_alert_frozen(self, evaluator: AlertEvaluator) -> None:
        alert = evaluator.create_alert("AAPL", AlertType.PRICE, AlertCondition.ABOVE, 200)
        evaluator.evaluate(_quote("201"))
        evaluator.set_active(alert.id, False)

        evaluator.evaluate(_quote("190"))
        assert evaluator.state(alert.id) is AlertState.TRIGGERED

        evaluator.set_active(alert.id, True)
        assert evaluator.evaluate(_quote("210")) == []

    def test_created_inactive_never_fires(self, evaluator: AlertEvaluator) -> None:
        evaluator.create_alert("AAPL", AlertType.PRICE, AlertCondition.ABOVE, 200, is_active=False)
        assert evaluator.evaluate(_quote("300")) == []

    def test_symbols_only_active(self, evaluator: AlertEvaluator) -> None:
        evaluator.create_alert("AAPL", AlertType.PRICE, AlertCondition.ABOVE, 200)
        evaluator.create_alert("TSLA", AlertType.PRICE, AlertCondition.ABOVE, 200, is_active=False)
        assert evaluator.symbols() == ["AAPL"]


class TestAlertTypes:
    """Tests for volume and percent-change alerts."""

    def test_percent_above_uses_magnitude(self, evaluator: AlertEvaluator) -> None:
        evaluator.create_alert("AAPL", AlertType.PERCENT_CHANGE, AlertCondition.ABOVE, -2)
        assert evaluator.evaluate(_quote("190", pct="1.0")) == []
        assert len(evaluator.evaluate(_quote("191", pct="2.5"))) == 1

    def test_percent_below_means_down_by(self, evaluator: AlertEvaluator) -> None:
        evaluator.create_alert("AAPL", AlertType.PERCENT_CHANGE, AlertCondition.BELOW, 2)
        assert evaluator.evaluate(_quote("190", pct="-1.5")) == []
        assert len(evaluator.evaluate(_quote("185", pct="-2.0"))) == 1

    def test_volume_alert(self, evaluator: AlertEvaluator) -> None:
        evaluator.create_alert("AAPL", AlertType.VOLUME, AlertCondition.ABOVE, 1_000_000)
        assert evaluator.evaluate(_quote("190")) == []
        events = evaluator.evaluate(_quote("190", volume=2_000_000))
        assert len(events) == 1
        assert events[0].observed == Decimal("2000000")


class TestAlertManagement:
    """Tests for alert creation and removal."""

    def test_symbol_normalized(self, evaluator: AlertEvaluator) -> None:
        alert = evaluator.create_alert(" aapl ", AlertType.PRICE, AlertCondition.ABOVE, "200.5")
        assert alert.symbol == "AAPL"
        assert alert.threshold == Decimal("200.5")
        assert evaluator.state(alert.id) is AlertState.ARMED

    @pytest.mark.parametrize("threshold", ["abc", "NaN", "Infinity"])
    def test_bad_threshold(self, evaluator: AlertEvaluator, threshold: str) -> None:
        with pytest.raises(InvalidParameterError):
            evaluator.create_alert("AAPL", AlertType.PRICE, AlertCondition.ABOVE, threshold)

    def test_empty_symbol(self, evaluator: AlertEvaluator) -> None:
        with pytest.raises(InvalidParameterError):
            evaluator.create_alert("  ", AlertType.PRICE, AlertCondition.ABOVE, 1)

    def test_negative_volume(self, evaluator: AlertEvaluator) -> None:
        with pytest.raises(InvalidParameterError):
            evaluator.create_alert("AAPL", AlertType.VOLUME, AlertCondition.BELOW, -1)

    def test_remove(self, evaluator: AlertEvaluator) -> None:
        alert = evaluator.create_alert("AAPL", AlertType.PRICE, AlertCondition.ABOVE, 200)
        evaluator.remove_alert(alert.id)
        assert evaluator.alerts() == []
        with pytest.raises(AlertNotFoundError):
            evaluator.remove_alert(alert.id)
        with pytest.raises(AlertNotFoundError):
            evaluator.state(alert.id)

    def test_restored_alerts_start_armed(self) -> None:
        source = AlertEvaluator()
        alert = source.create_alert("AAPL", AlertType.PRICE, AlertCondition.ABOVE, 200)
        source.evaluate(_quote("250"))

        restored = AlertEvaluator(source.alerts())
        assert restored.state(alert.id) is AlertState.ARMED
        assert len(restored.evaluate(_quote("250"))) == 1
