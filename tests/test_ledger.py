"""
Tests for the PortfolioLedger.

Covers holdings, valuation, watchlist semantics, quote application
and change notification. No IO.
"""

import threading
from decimal import Decimal

import pytest

from app.domain.analytics.entities import Portfolio, Stock
from app.domain.analytics.errors import HoldingNotFoundError, InvalidHoldingError
from app.domain.analytics.ledger import LedgerEventKind, PortfolioLedger


def _stock(symbol: str = "AAPL", price: str = "185.92", pct: str = "1.25") -> Stock:
    return Stock(symbol=symbol, name=f"{symbol} Inc.", price=Decimal(price), percent_change=Decimal(pct))


@pytest.fixture
def ledger() -> PortfolioLedger:
    return PortfolioLedger()


class TestHoldings:
    """Tests for adding and removing holdings."""

    def test_add_returns_unique_ids(self, ledger: PortfolioLedger) -> None:
        first = ledger.add_holding(_stock(), 10, "175.50")
        second = ledger.add_holding(_stock(), 5, "180.00")
        assert first != second
        assert len(ledger.holdings()) == 2

    @pytest.mark.parametrize("shares", [0, -3, 1.5, True])
    def test_invalid_shares_rejected(self, ledger: PortfolioLedger, shares) -> None:
        with pytest.raises(InvalidHoldingError):
            ledger.add_holding(_stock(), shares, "100")
        assert ledger.holdings() == ()

    @pytest.mark.parametrize("price", ["0", "-5", "abc", "NaN", "Infinity"])
    def test_invalid_price_rejected(self, ledger: PortfolioLedger, price: str) -> None:
        with pytest.raises(InvalidHoldingError):
            ledger.add_holding(_stock(), 1, price)
        assert ledger.holdings() == ()

    def test_add_then_remove_round_trip(self, ledger: PortfolioLedger) -> None:
        before = ledger.valuation()
        holding_id = ledger.add_holding(_stock(), 3, "150")
        removed = ledger.remove_holding(holding_id)
        assert removed.id == holding_id
        assert ledger.holdings() == ()
        assert ledger.valuation() == before

    def test_remove_unknown_raises(self, ledger: PortfolioLedger) -> None:
        ledger.add_holding(_stock(), 1, "100")
        with pytest.raises(HoldingNotFoundError):
            ledger.remove_holding("missing")
        assert len(ledger.holdings()) == 1

    def test_get_holding(self, ledger: PortfolioLedger) -> None:
        holding_id = ledger.add_holding(_stock(), 2, "100")
        assert ledger.get_holding(holding_id).shares == 2
        with pytest.raises(HoldingNotFoundError):
            ledger.get_holding("missing")


class TestValuation:
    """Tests for portfolio valuation metrics."""

    def test_empty_portfolio(self, ledger: PortfolioLedger) -> None:
        assert ledger.valuation() == Decimal("0")
        assert ledger.total_gain_percent() == Decimal("0")
        assert ledger.daily_change() == Decimal("0")

    def test_single_holding_gain(self, ledger: PortfolioLedger) -> None:
        ledger.add_holding(_stock(), 10, "175.50")
        summary = ledger.summary()
        assert summary.total_value == Decimal("1859.20")
        assert abs(summary.total_gain_percent - Decimal("5.937")) < Decimal("0.001")
        assert summary.holdings_count == 1

    def test_valuation_is_exact_sum(self, ledger: PortfolioLedger) -> None:
        ledger.add_holding(_stock("AAPL", "185.92"), 10, "175.50")
        ledger.add_holding(_stock("MSFT", "337.50", "-0.48"), 5, "310.25")
        ledger.add_holding(_stock("NVDA", "476.35", "4.18"), 8, "420.75")
        assert ledger.valuation() == Decimal("1859.20") + Decimal("1687.50") + Decimal("3810.80")

    def test_daily_change_applies_percent_to_current_value(self, ledger: PortfolioLedger) -> None:
        # Known approximation: percent applied to today's value, not diffed
        # against the previous close.
        ledger.add_holding(_stock(), 10, "175.50")
        approx = ledger.daily_change()
        assert approx == Decimal("1.25") * Decimal("1859.20") / Decimal("100")
        exact = Decimal("1859.20") - Decimal("1859.20") / Decimal("1.0125")
        assert approx != exact
        assert abs(approx - exact) < Decimal("0.5")


class TestWatchlist:
    """Tests for the ledger watchlist."""

    def test_add_twice_single_entry(self, ledger: PortfolioLedger) -> None:
        ledger.add_to_watchlist(_stock())
        ledger.add_to_watchlist(_stock())
        assert [s.symbol for s in ledger.watchlist()] == ["AAPL"]

    def test_remove_absent_is_noop(self, ledger: PortfolioLedger) -> None:
        ledger.add_to_watchlist(_stock())
        ledger.remove_from_watchlist("TSLA")
        assert ledger.is_watchlisted("AAPL")

    def test_remove(self, ledger: PortfolioLedger) -> None:
        ledger.add_to_watchlist(_stock())
        ledger.remove_from_watchlist("AAPL")
        assert ledger.watchlist() == []


class TestQuotes:
    """Tests for applying fresh snapshots."""

    def test_apply_quote_updates_holdings_and_watchlist(self, ledger: PortfolioLedger) -> None:
        ledger.add_holding(_stock(), 10, "175.50")
        ledger.add_holding(_stock("MSFT", "337.50"), 1, "300")
        ledger.add_to_watchlist(_stock())

        updated = ledger.apply_quote(_stock(price="200.00", pct="9.0"))

        assert updated == 2
        assert ledger.valuation() == Decimal("2000.00") + Decimal("337.50")
        assert ledger.watchlist()[0].price == Decimal("200.00")

    def test_apply_quote_for_untracked_symbol(self, ledger: PortfolioLedger) -> None:
        assert ledger.apply_quote(_stock("TSLA")) == 0

    def test_last_known_and_tracked(self, ledger: PortfolioLedger) -> None:
        ledger.add_holding(_stock(), 1, "100")
        ledger.add_to_watchlist(_stock("V", "248.53"))
        ledger.add_to_watchlist(_stock())
        assert ledger.tracked_symbols() == ["AAPL", "V"]
        assert ledger.last_known("V").price == Decimal("248.53")
        assert ledger.last_known("TSLA") is None


class TestNotificationsAndCopies:
    """Tests for change events and aggregate hand-off."""

    def test_events_emitted_after_mutations(self, ledger: PortfolioLedger) -> None:
        events = []
        ledger.subscribe(events.append)

        holding_id = ledger.add_holding(_stock(), 1, "100")
        ledger.add_to_watchlist(_stock())
        ledger.add_to_watchlist(_stock())
        ledger.apply_quote(_stock(price="190"))
        ledger.remove_holding(holding_id)

        kinds = [e.kind for e in events]
        assert kinds == [
            LedgerEventKind.HOLDING_ADDED,
            LedgerEventKind.WATCHLIST_ADDED,
            LedgerEventKind.QUOTE_APPLIED,
            LedgerEventKind.HOLDING_REMOVED,
        ]
        assert events[0].key == holding_id

    def test_failed_mutation_emits_nothing(self, ledger: PortfolioLedger) -> None:
        events = []
        ledger.subscribe(events.append)
        with pytest.raises(InvalidHoldingError):
            ledger.add_holding(_stock(), 0, "100")
        assert events == []

    def test_unsubscribe(self, ledger: PortfolioLedger) -> None:
        events = []
        ledger.subscribe(events.append)
        ledger.unsubscribe(events.append)
        ledger.add_to_watchlist(_stock())
        assert events == []

    def test_portfolio_copy_is_detached(self, ledger: PortfolioLedger) -> None:
        ledger.add_holding(_stock(), 1, "100")
        snapshot = ledger.portfolio()
        snapshot.holdings.clear()
        assert len(ledger.holdings()) == 1

    def test_hydrate_from_portfolio(self) -> None:
        source = PortfolioLedger()
        source.add_holding(_stock(), 10, "175.50")
        source.add_to_watchlist(_stock("V", "248.53"))

        restored = PortfolioLedger(source.portfolio())
        assert restored.valuation() == source.valuation()
        assert restored.tracked_symbols() == ["AAPL", "V"]
        assert isinstance(restored.portfolio(), Portfolio)

    def test_failing_listener_does_not_undo_or_block(self, ledger: PortfolioLedger) -> None:
        events = []

        def broken(_event) -> None:
            raise RuntimeError("listener down")

        ledger.subscribe(broken)
        ledger.subscribe(events.append)

        holding_id = ledger.add_holding(_stock(), 2, "100")

        assert ledger.get_holding(holding_id).shares == 2
        assert [e.kind for e in events] == [LedgerEventKind.HOLDING_ADDED]


class TestConcurrentAccess:
    """Readers never observe a holding list mid-mutation."""

    def test_valuation_reads_during_add_and_remove(self, ledger: PortfolioLedger) -> None:
        ledger.add_holding(_stock(price="100"), 1, "100")
        stop = threading.Event()
        seen: list[tuple[Decimal, Decimal, int]] = []
        errors: list[BaseException] = []

        def writer() -> None:
            try:
                for _ in range(300):
                    holding_id = ledger.add_holding(_stock(price="100"), 1, "100")
                    ledger.remove_holding(holding_id)
            except BaseException as exc:
                errors.append(exc)
            finally:
                stop.set()

        def reader() -> None:
            try:
                while True:
                    summary = ledger.summary()
                    seen.append((ledger.valuation(), summary.total_value, summary.holdings_count))
                    if stop.is_set():
                        break
            except BaseException as exc:
                errors.append(exc)

        threads = [threading.Thread(target=writer)] + [
            threading.Thread(target=reader) for _ in range(3)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert errors == []
        assert seen
        for valuation, total_value, count in seen:
            assert valuation in (Decimal("100"), Decimal("200"))
            assert total_value == Decimal("100") * count
        assert ledger.valuation() == Decimal("100")
        assert len(ledger.holdings()) == 1
