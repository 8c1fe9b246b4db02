"""Orchestration workflows."""

from .base import RefreshResult, execute_with_retry
from .refresh_workflow import SyncEngine

__all__ = ["RefreshResult", "SyncEngine", "execute_with_retry"]
