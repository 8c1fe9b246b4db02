"""aiohttp implementation of IHttpClient.

One ClientSession per client, opened on first request and reopened if it
was closed underneath us.
"""

from typing import Any

import aiohttp

from stock_tracker.ingestion.config.value_objects import HttpClientConfig
from stock_tracker.ingestion.ports.http import HttpResponse


async def _decode_body(resp: aiohttp.ClientResponse) -> dict[str, Any]:
    # Yahoo and exchangerate-api both send JSON with loose content types
    if 200 <= resp.status < 300:
        payload = await resp.json(content_type=None)
    else:
        payload = await resp.text()
    return payload if isinstance(payload, dict) else {"error": payload}


class AiohttpClient:
    """Pooled GET client."""

    def __init__(self, config: HttpClientConfig | None = None):
        self.config = config or HttpClientConfig()
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
            )
        return self._session

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        request_timeout = aiohttp.ClientTimeout(total=timeout or self.config.timeout)
        async with self.session.get(
            url, params=params, headers=headers, timeout=request_timeout
        ) as resp:
            return HttpResponse(
                status_code=resp.status,
                body=await _decode_body(resp),
                headers=dict(resp.headers),
                url=str(resp.url),
            )

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "AiohttpClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
