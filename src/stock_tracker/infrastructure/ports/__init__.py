"""Infrastructure port definitions."""

from .identity import IIdentityProvider
from .system import IClock

__all__ = ["IClock", "IIdentityProvider"]
