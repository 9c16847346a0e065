"""
Use case: Add and remove portfolio holdings.

Input: AddHoldingCommand / RemoveHoldingCommand
Output: HoldingResult
Side effects: Mutates the ledger and persists the portfolio.
Failure cases: InvalidHoldingError, HoldingNotFoundError, SymbolNotFoundError.
"""

import logging

from app.application.analytics.dtos import (
    AddHoldingCommand,
    HoldingResult,
    RemoveHoldingCommand,
)
from app.application.analytics.snapshots import resolve_stock
from app.domain.analytics.entities import Holding
from app.domain.analytics.ledger import PortfolioLedger
from app.domain.analytics.ports import MarketDataProvider, PortfolioRepository

logger = logging.getLogger(__name__)


def to_holding_result(holding: Holding) -> HoldingResult:
    """Map a domain holding to its output DTO."""
    return HoldingResult(
        id=holding.id,
        symbol=holding.stock.symbol,
        name=holding.stock.name,
        shares=holding.shares,
        purchase_price=holding.purchase_price,
        purchase_date=holding.purchase_date,
        current_price=holding.stock.price,
        current_value=holding.current_value,
        gain_loss=holding.gain_loss,
        gain_loss_percent=holding.gain_loss_percent,
    )


class ManageHoldingsUseCase:
    """Orchestrates holding purchases and removals.

    Resolves the stock snapshot through the market data provider,
    delegates validation and mutation to the ledger, and saves the
    portfolio only after a successful change.
    """

    def __init__(
        self,
        ledger: PortfolioLedger,
        provider: MarketDataProvider,
        portfolio_repo: PortfolioRepository,
    ) -> None:
        self._ledger = ledger
        self._provider = provider
        self._portfolio_repo = portfolio_repo

    def add(self, command: AddHoldingCommand) -> HoldingResult:
        """Add a holding for the command's symbol.

        Returns:
            The created holding with derived values.
        """
        logger.info("Adding holding symbol=%s shares=%s", command.symbol, command.shares)
        stock = resolve_stock(command.symbol, self._provider, self._ledger)
        holding_id = self._ledger.add_holding(
            stock=stock,
            shares=command.shares,
            purchase_price=command.purchase_price,
            purchase_date=command.purchase_date,
        )
        self._portfolio_repo.save(self._ledger.portfolio())
        return to_holding_result(self._ledger.get_holding(holding_id))

    def remove(self, command: RemoveHoldingCommand) -> HoldingResult:
        """Remove a holding by id and return what was removed."""
        logger.info("Removing holding id=%s", command.holding_id)
        holding = self._ledger.remove_holding(command.holding_id)
        self._portfolio_repo.save(self._ledger.portfolio())
        return to_holding_result(holding)
