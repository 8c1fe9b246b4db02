"""HTTP transport port used by the quote and rate clients.

The transport only moves bytes and decodes JSON. Status interpretation,
error mapping and retries belong to the clients and the sync engine.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

# Statuses worth another attempt besides the whole 5xx range
TRANSIENT_STATUS_CODES = frozenset({408, 425, 429})


@dataclass
class HttpResponse:
    """Decoded response. Non-JSON bodies arrive wrapped as {"error": text}."""

    status_code: int
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def is_transient_status(status_code: int) -> bool:
    """Whether a failed request with this status is worth retrying."""
    return status_code >= 500 or status_code in TRANSIENT_STATUS_CODES


class IHttpClient(Protocol):
    """GET-only async HTTP transport."""

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        """
        Raises:
            aiohttp.ClientError: connection level failure
            asyncio.TimeoutError: request exceeded its timeout
            ValueError: a 2xx body that is not valid JSON
        """
        ...

    async def close(self) -> None:
        """Release pooled connections."""
        ...
