"""
Refresh result and retry helper shared by the sync engine and the session.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TypeVar

from stock_tracker.infrastructure.observability import get_sync_logger
from stock_tracker.orchestration.ports import RefreshStatus, RefreshTrigger
from stock_tracker.shared.exceptions import QuoteUnavailable, RateUnavailable

T = TypeVar("T")

logger = get_sync_logger("retry")


@dataclass
class RefreshResult:
    """Result of one refresh batch."""

    status: RefreshStatus
    trigger: RefreshTrigger
    duration_seconds: float = 0.0
    refreshed: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    persisted: bool = False
    persistence_warning: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def ok(self) -> bool:
        return self.status in (RefreshStatus.SUCCESS, RefreshStatus.EMPTY)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "status": self.status.value,
            "trigger": self.trigger.value,
            "duration_seconds": self.duration_seconds,
            "refreshed": self.refreshed,
            "failed": self.failed,
            "persisted": self.persisted,
            "persistence_warning": self.persistence_warning,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }


async def execute_with_retry(
    operation: Callable[..., Awaitable[T]],
    *args: Any,
    retries: int = 1,
    retry_delay_seconds: float = 1.0,
    **kwargs: Any,
) -> T:
    """
    Execute operation, retrying transient quote/rate failures.

    Args:
        operation: Async callable to execute
        *args: Positional arguments for operation
        retries: Extra attempts after the first
        retry_delay_seconds: Sleep between attempts
        **kwargs: Keyword arguments for operation

    Returns:
        Operation result

    Raises:
        QuoteUnavailable | RateUnavailable: non-transient, or retries exhausted
    """
    attempts = retries + 1
    last_error: Exception | None = None

    for attempt in range(attempts):
        try:
            return await operation(*args, **kwargs)
        except (QuoteUnavailable, RateUnavailable) as e:
            if not e.transient:
                raise
            last_error = e
            logger.warning(
                "transient_failure",
                attempt=attempt + 1,
                max_attempts=attempts,
                error=str(e),
            )

            if attempt < attempts - 1:
                await asyncio.sleep(retry_delay_seconds)

    raise last_error
