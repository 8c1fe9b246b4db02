"""
Yahoo Finance quote client.

Turns a user-entered symbol into a canonical QuoteSnapshot. Every failure
(unknown symbol, malformed payload, transport error) surfaces as
QuoteUnavailable so callers can isolate it per symbol.
"""

from __future__ import annotations

import asyncio

import aiohttp

from stock_tracker.config.state import MarketConfig, QuoteServiceConfig
from stock_tracker.infrastructure.observability import get_ingestion_logger
from stock_tracker.ingestion.adapters.yahoo_plugin.mappers import (
    normalize_symbol,
    parse_chart_response,
)
from stock_tracker.ingestion.config.value_objects import HttpClientConfig
from stock_tracker.ingestion.connectors.aiohttp_client import AiohttpClient
from stock_tracker.ingestion.ports.http import IHttpClient, is_transient_status
from stock_tracker.shared.exceptions import QuoteUnavailable
from stock_tracker.shared.models.instruments import QuoteSnapshot


class YahooQuoteClient:
    """Quote source backed by the Yahoo Finance chart endpoint."""

    provider = "yahoo"

    def __init__(
        self,
        config: QuoteServiceConfig | None = None,
        http_client: IHttpClient | None = None,
        market_config: MarketConfig | None = None,
    ):
        """
        Initialize the quote client.

        Args:
            config: Quote service configuration
            http_client: HTTP transport (an AiohttpClient is created if None)
            market_config: Domestic suffix rules
        """
        self.config = config or QuoteServiceConfig()
        self.market_config = market_config or MarketConfig()
        self._owns_http = http_client is None
        self._http = http_client or AiohttpClient(
            HttpClientConfig(
                timeout=self.config.timeout, user_agent=self.config.user_agent
            )
        )
        self._log = get_ingestion_logger("quote-client", provider=self.provider)

    def normalize(self, symbol: str):
        """Return (provider_symbol, market) for user input."""
        return normalize_symbol(
            symbol,
            domestic_suffixes=tuple(self.market_config.domestic_suffixes),
            default_suffix=self.market_config.default_domestic_suffix,
        )

    async def fetch_quote(self, symbol: str) -> QuoteSnapshot:
        """
        Fetch the current quote and chart series for symbol.

        Raises:
            QuoteUnavailable: if the symbol is blank, unknown, or the request fails
        """
        try:
            normalized, market = self.normalize(symbol)
        except ValueError as e:
            raise QuoteUnavailable(str(symbol), str(e)) from e

        url = f"{self.config.base_url.rstrip('/')}/{normalized}"
        params = {
            "range": self.config.chart_range,
            "interval": self.config.chart_interval,
        }

        try:
            response = await self._http.get(
                url,
                params=params,
                headers={"User-Agent": self.config.user_agent},
                timeout=self.config.timeout,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._log.warning("quote_request_failed", symbol=normalized, error=str(e))
            raise QuoteUnavailable(
                normalized, f"network error: {e}", transient=True
            ) from e
        except ValueError as e:
            raise QuoteUnavailable(normalized, f"malformed response: {e}") from e

        if not response.ok:
            self._log.warning(
                "quote_request_rejected",
                symbol=normalized,
                status_code=response.status_code,
            )
            raise QuoteUnavailable(
                normalized,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
                transient=is_transient_status(response.status_code),
            )

        snapshot = parse_chart_response(normalized, market, response.body)
        self._log.debug(
            "quote_fetched",
            symbol=normalized,
            market=market.value,
            price=str(snapshot.instrument.price),
            points=len(snapshot.history),
        )
        return snapshot

    async def lookup(self, symbol: str) -> QuoteSnapshot:
        """Search-view lookup; same snapshot as fetch_quote, no side effects."""
        return await self.fetch_quote(symbol)

    async def close(self) -> None:
        """Close the HTTP transport if this client created it."""
        if self._owns_http:
            await self._http.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self.config.base_url})"
