"""System infrastructure port definitions."""

from abc import ABC, abstractmethod
from datetime import datetime


class IClock(ABC):
    """Abstract interface for clock operations."""

    @abstractmethod
    def utcnow(self) -> datetime:
        """Get current timezone-aware UTC time."""
        ...
