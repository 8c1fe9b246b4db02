"""
ExchangeRate-API (v6) client.

Endpoint: {base_url}/{api_key}/latest/{base}

Response format (abridged):
    {
      "result": "success",
      "base_code": "USD",
      "time_last_update_unix": 1717372801,
      "conversion_rates": {"USD": 1, "KRW": 1350.0, "EUR": 0.92, ...}
    }

No retries: a failed fetch leaves the previous table in place upstream.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Any

import aiohttp

from stock_tracker.config.state import RateServiceConfig
from stock_tracker.infrastructure.observability import get_ingestion_logger
from stock_tracker.ingestion.adapters.yahoo_plugin.mappers import to_decimal
from stock_tracker.ingestion.config.value_objects import HttpClientConfig
from stock_tracker.ingestion.connectors.aiohttp_client import AiohttpClient
from stock_tracker.ingestion.ports.http import IHttpClient, is_transient_status
from stock_tracker.shared.exceptions import ConfigurationError, RateUnavailable
from stock_tracker.shared.models.rates import RateTable


def parse_rates_response(base: str, body: dict[str, Any]) -> RateTable:
    """
    Build a RateTable from a v6 "latest" body.

    Non-numeric entries are skipped rather than failing the whole table.

    Raises:
        RateUnavailable: if the body has no conversion_rates mapping
    """
    rates = body.get("conversion_rates") if isinstance(body, dict) else None
    if not isinstance(rates, dict):
        reason = body.get("error-type") if isinstance(body, dict) else None
        raise RateUnavailable(base, f"response has no rates ({reason or 'unknown'})")

    parsed = {}
    for code, value in rates.items():
        rate = to_decimal(value)
        if rate is None or not isinstance(code, str):
            continue
        parsed[code] = rate

    fetched_at = None
    if isinstance(body.get("time_last_update_unix"), int | float):
        fetched_at = datetime.fromtimestamp(body["time_last_update_unix"], UTC)

    return RateTable(
        base=body.get("base_code") or base, rates=parsed, fetched_at=fetched_at
    )


class ExchangeRateClient:
    """Rate source backed by exchangerate-api.com."""

    provider = "exchangerate-api"

    def __init__(
        self,
        config: RateServiceConfig | None = None,
        http_client: IHttpClient | None = None,
    ):
        """
        Initialize the rate client.

        Args:
            config: Rate service configuration (api_key required to fetch)
            http_client: HTTP transport (an AiohttpClient is created if None)
        """
        self.config = config or RateServiceConfig()
        self._owns_http = http_client is None
        self._http = http_client or AiohttpClient(
            HttpClientConfig(
                timeout=self.config.timeout, user_agent=self.config.user_agent
            )
        )
        self._log = get_ingestion_logger("rate-client", provider=self.provider)

    async def fetch_rates(self, base: str | None = None) -> RateTable:
        """
        Fetch the latest rates for base (default: configured default_base).

        Raises:
            ConfigurationError: if no API key is configured
            RateUnavailable: on transport failure, bad status or a body without rates
        """
        base = (base or self.config.default_base).strip().upper()
        if not self.config.api_key:
            raise ConfigurationError("API key not configured")

        url = f"{self.config.base_url.rstrip('/')}/{self.config.api_key}/latest/{base}"

        try:
            response = await self._http.get(url, timeout=self.config.timeout)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._log.warning("rate_request_failed", base=base, error=str(e))
            raise RateUnavailable(base, f"network error: {e}", transient=True) from e
        except ValueError as e:
            raise RateUnavailable(base, f"malformed response: {e}") from e

        if not response.ok:
            self._log.warning(
                "rate_request_rejected", base=base, status_code=response.status_code
            )
            raise RateUnavailable(
                base,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
                transient=is_transient_status(response.status_code),
            )

        table = parse_rates_response(base, response.body)
        self._log.debug("rates_fetched", base=table.base, currencies=len(table.rates))
        return table

    async def close(self) -> None:
        """Close the HTTP transport if this client created it."""
        if self._owns_http:
            await self._http.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self.config.base_url})"
