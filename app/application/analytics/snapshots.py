"""
Stock snapshot resolution shared by the use cases.

Prefers a fresh quote from the market data provider and falls back to
the ledger's last known snapshot when the provider is stale.
"""

import logging

from app.domain.analytics.entities import Stock
from app.domain.analytics.errors import StaleQuoteError
from app.domain.analytics.ledger import PortfolioLedger
from app.domain.analytics.ports import MarketDataProvider

logger = logging.getLogger(__name__)


def normalize_symbol(symbol: str) -> str:
    return symbol.strip().upper()


def resolve_stock(
    symbol: str,
    provider: MarketDataProvider,
    ledger: PortfolioLedger,
) -> Stock:
    """Return the freshest available snapshot of a symbol.

    Raises:
        SymbolNotFoundError: If the provider does not know the symbol.
        StaleQuoteError: If the provider is stale and no snapshot is known.
    """
    symbol = normalize_symbol(symbol)
    try:
        return provider.fetch_quote(symbol).stock
    except StaleQuoteError:
        last = ledger.last_known(symbol)
        if last is None:
            raise
        logger.warning("Provider stale for %s, using last known snapshot", symbol)
        return last
