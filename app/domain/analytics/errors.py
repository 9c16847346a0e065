"""
Domain-specific errors for the analytics bounded context.

All errors raised from the domain layer must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""


class AnalyticsDomainError(Exception):
    """Base error for all analytics domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class InvalidHoldingError(AnalyticsDomainError):
    """Raised when a holding is requested with non-positive shares or price."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid holding: {reason}")
        self.reason = reason


class InvalidParameterError(AnalyticsDomainError):
    """Raised when an indicator, timeframe or alert parameter is malformed."""

    def __init__(self, name: str, value: object, reason: str) -> None:
        super().__init__(f"Invalid parameter {name}={value!r}: {reason}")
        self.name = name
        self.value = value
        self.reason = reason


class NotFoundError(AnalyticsDomainError):
    """Raised when a lookup or removal targets an absent identifier."""

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class HoldingNotFoundError(NotFoundError):
    """Raised when a holding id is not present in the portfolio."""

    def __init__(self, holding_id: str) -> None:
        super().__init__("Holding", holding_id)
        self.holding_id = holding_id


class AlertNotFoundError(NotFoundError):
    """Raised when a custom alert id is unknown to the evaluator."""

    def __init__(self, alert_id: str) -> None:
        super().__init__("Alert", alert_id)
        self.alert_id = alert_id


class SymbolNotFoundError(NotFoundError):
    """Raised when the market data provider does not know a symbol."""

    def __init__(self, symbol: str) -> None:
        super().__init__("Symbol", symbol)
        self.symbol = symbol


class StaleQuoteError(AnalyticsDomainError):
    """Raised by a market data provider that failed to deliver an update.

    The quote pipeline catches it and keeps the last known snapshot,
    flagged as stale.
    """

    def __init__(self, symbol: str, reason: str = "provider unavailable") -> None:
        super().__init__(f"Stale quote for {symbol}: {reason}")
        self.symbol = symbol
        self.reason = reason


class InsufficientHistoryError(AnalyticsDomainError):
    """Raised when a series is requested for a stock with no stored history."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"No price history available for {symbol}")
        self.symbol = symbol
