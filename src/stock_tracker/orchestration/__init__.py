"""Orchestration: sync engine, scheduler and session."""

from .ports import IWatchlistGateway, RefreshStatus, RefreshTrigger, SyncState
from .scheduler import RefreshScheduler
from .session import TrackerSession
from .workflows import RefreshResult, SyncEngine, execute_with_retry

__all__ = [
    "IWatchlistGateway",
    "RefreshResult",
    "RefreshScheduler",
    "RefreshStatus",
    "RefreshTrigger",
    "SyncEngine",
    "SyncState",
    "TrackerSession",
    "execute_with_retry",
]
