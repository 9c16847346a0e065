"""
Use case: Portfolio overview.

Input: None
Output: PortfolioResult
Side effects: None.
"""

import logging

from app.application.analytics.dtos import PortfolioResult
from app.application.analytics.manage_holdings import to_holding_result
from app.domain.analytics.ledger import PortfolioLedger

logger = logging.getLogger(__name__)


class GetPortfolioUseCase:
    """Reports valuation metrics and holdings from one consistent read."""

    def __init__(self, ledger: PortfolioLedger) -> None:
        self._ledger = ledger

    def execute(self) -> PortfolioResult:
        summary = self._ledger.summary()
        holdings = self._ledger.holdings()
        logger.debug("Portfolio overview: %d holdings", len(holdings))
        return PortfolioResult(
            total_value=summary.total_value,
            daily_change=summary.daily_change,
            total_gain_percent=summary.total_gain_percent,
            holdings=[to_holding_result(h) for h in holdings],
        )
