"""Identity provider port.

Authentication itself is external and opaque; the tracker only needs a stable
user identifier, or None when nobody is signed in.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class IIdentityProvider(Protocol):
    """Supplies the signed-in user's identifier."""

    async def current_user_id(self) -> str | None:
        """Return the user id of the active session, or None."""
        ...
