"""
In-memory watchlist for one user.

Ordered by insertion, unique by symbol. Only the sync engine mutates it.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from stock_tracker.shared.models.instruments import Instrument, PriceUpdate


@dataclass(frozen=True)
class WatchlistSummary:
    """Rising/falling counts for the dashboard header."""

    total: int
    rising: int
    falling: int

    @property
    def unknown(self) -> int:
        return self.total - self.rising - self.falling


class WatchlistStore:
    """Ordered, symbol-unique collection of instruments scoped to a user."""

    def __init__(self, user_id: str, instruments: Iterable[Instrument] = ()):
        self.user_id = user_id
        self._items: dict[str, Instrument] = {}
        for instrument in instruments:
            self.add(instrument)

    def add(self, instrument: Instrument) -> bool:
        """Append instrument; no-op (returns False) when the symbol is present."""
        if instrument.symbol in self._items:
            return False
        self._items[instrument.symbol] = instrument
        return True

    def remove(self, symbol: str) -> bool:
        """Drop symbol; no-op (returns False) when absent."""
        return self._items.pop(symbol.strip().upper(), None) is not None

    def upsert_prices(self, updates: Mapping[str, PriceUpdate]) -> list[str]:
        """
        Merge price updates into matching instruments.

        Symbols not in the watchlist are ignored. Position, symbol and market
        of existing instruments never change.

        Returns:
            Symbols that were updated
        """
        applied = []
        for symbol, update in updates.items():
            key = symbol.strip().upper()
            current = self._items.get(key)
            if current is None:
                continue
            # Assigning to an existing key keeps its position
            self._items[key] = current.apply(update)
            applied.append(key)
        return applied

    def merge_stored(self, instruments: Iterable[Instrument]) -> None:
        """
        Put stored instruments ahead of the ones already held.

        A symbol held both ways keeps the in-memory instrument; symbols only
        held in memory follow in their current order.
        """
        local = self._items
        self._items = {}
        for instrument in instruments:
            self._items.setdefault(
                instrument.symbol, local.get(instrument.symbol, instrument)
            )
        for symbol, instrument in local.items():
            self._items.setdefault(symbol, instrument)

    def symbols(self) -> list[str]:
        return list(self._items)

    def get(self, symbol: str) -> Instrument | None:
        return self._items.get(symbol.strip().upper())

    def snapshot(self) -> list[Instrument]:
        """Instruments in display order."""
        return list(self._items.values())

    def clear(self) -> None:
        self._items.clear()

    def summary(self) -> WatchlistSummary:
        rising = sum(1 for i in self._items.values() if i.is_rising is True)
        falling = sum(1 for i in self._items.values() if i.is_rising is False)
        return WatchlistSummary(total=len(self._items), rising=rising, falling=falling)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Instrument]:
        return iter(list(self._items.values()))

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and symbol.strip().upper() in self._items

    def __repr__(self) -> str:
        return f"WatchlistStore(user_id={self.user_id!r}, symbols={self.symbols()})"
