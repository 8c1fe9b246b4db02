"""Ports for the external quote and rate sources.

The sync engine and session depend only on these protocols; the Yahoo and
exchangerate-api clients are the shipped implementations.
"""

from typing import Protocol, runtime_checkable

from stock_tracker.shared.models.instruments import QuoteSnapshot
from stock_tracker.shared.models.rates import RateTable


@runtime_checkable
class QuoteSourcePort(Protocol):
    """Returns a canonical snapshot for a symbol."""

    async def fetch_quote(self, symbol: str) -> QuoteSnapshot:
        """
        Fetch a fresh quote.

        Raises:
            QuoteUnavailable: symbol unknown, payload malformed or transport failure
        """
        ...


@runtime_checkable
class RateSourcePort(Protocol):
    """Returns a rate table anchored at a base currency."""

    async def fetch_rates(self, base: str) -> RateTable:
        """
        Fetch the latest rates for base.

        Raises:
            RateUnavailable: non-success status or body without rates
        """
        ...
