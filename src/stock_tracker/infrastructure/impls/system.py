"""Default implementations of infrastructure abstractions."""

from datetime import UTC, datetime

from stock_tracker.infrastructure.ports.system import IClock


class SystemClock(IClock):
    """Default implementation using system time."""

    def utcnow(self) -> datetime:
        """Get current UTC time."""
        return datetime.now(UTC)
