"""
Stock Tracker Exception Hierarchy

Every failure mode of the tracker maps to one of these types. None of them is
fatal: callers keep the last-known-good state and carry on.
"""


class StockTrackerError(Exception):
    """Base exception for all stock tracker errors."""

    pass


class QuoteUnavailable(StockTrackerError):
    """Symbol not found, upstream malformed, or the quote service unreachable.

    Isolated per symbol during a refresh; never fails the whole batch.
    """

    def __init__(
        self,
        symbol: str,
        message: str,
        status_code: int | None = None,
        transient: bool = False,
    ):
        super().__init__(f"{symbol}: {message}")
        self.symbol = symbol
        self.status_code = status_code
        self.transient = transient


class RateUnavailable(StockTrackerError):
    """Exchange rates could not be fetched or the body had no rates field."""

    def __init__(
        self,
        base: str,
        message: str,
        status_code: int | None = None,
        transient: bool = False,
    ):
        super().__init__(f"{base}: {message}")
        self.base = base
        self.status_code = status_code
        self.transient = transient


class PersistenceFailure(StockTrackerError):
    """Reading or writing the remote watchlist failed.

    In-memory state is retained; durability is not guaranteed until the next
    successful save.
    """

    def __init__(self, user_id: str, operation: str, message: str):
        super().__init__(f"{operation} failed for user {user_id}: {message}")
        self.user_id = user_id
        self.operation = operation


class NotAuthenticated(StockTrackerError):
    """A watchlist operation was attempted without a signed-in user."""

    pass


class ConfigurationError(StockTrackerError):
    """Required configuration (API key, URL) is missing or invalid."""

    pass


__all__ = [
    "ConfigurationError",
    "NotAuthenticated",
    "PersistenceFailure",
    "QuoteUnavailable",
    "RateUnavailable",
    "StockTrackerError",
]
