"""Identity provider for scripts and tests."""


class StaticIdentityProvider:
    """Identity provider that always reports the same user (or nobody)."""

    def __init__(self, user_id: str | None = None):
        self._user_id = user_id

    async def current_user_id(self) -> str | None:
        return self._user_id

    def sign_out(self) -> None:
        self._user_id = None
