"""
Orchestration Layer Protocol Definitions
=========================================

States, triggers and result statuses of the sync engine, plus the gateway
protocol it persists through.
"""

from collections.abc import Sequence
from enum import Enum
from typing import Protocol, runtime_checkable

from stock_tracker.shared.models.instruments import Instrument


class SyncState(str, Enum):
    """Sync engine state."""

    IDLE = "idle"
    REFRESHING = "refreshing"
    FAILED_PARTIAL = "failed_partial"


class RefreshTrigger(str, Enum):
    """What started a refresh batch."""

    USER = "user"
    TIMER = "timer"
    LOGIN = "login"


class RefreshStatus(str, Enum):
    """Outcome of one refresh call."""

    SUCCESS = "success"  # every symbol refreshed
    PARTIAL = "partial"  # some symbols failed
    FAILED = "failed"  # no symbol refreshed, nothing written
    EMPTY = "empty"  # watchlist had no symbols
    COALESCED = "coalesced"  # another batch was in flight


@runtime_checkable
class IWatchlistGateway(Protocol):
    """Remote store of per-user watchlists (full replace, last writer wins)."""

    async def load(self, user_id: str) -> list[Instrument] | None:
        """
        Load a user's watchlist; None when nothing is stored.

        Raises:
            PersistenceFailure: on storage error
        """
        ...

    async def save(self, user_id: str, instruments: Sequence[Instrument]) -> None:
        """
        Replace a user's watchlist.

        Raises:
            PersistenceFailure: on storage error
        """
        ...
