"""Default implementations of infrastructure ports."""

from .identity import StaticIdentityProvider
from .system import SystemClock

__all__ = ["StaticIdentityProvider", "SystemClock"]
