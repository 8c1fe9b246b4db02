"""
Test fixtures package.

Provides mock quote/rate provider responses and small builders for domain
objects used across the test-suite.
"""

import json
from decimal import Decimal
from pathlib import Path
from typing import Any

from stock_tracker.ingestion.ports.http import HttpResponse
from stock_tracker.shared.models.enums import Market
from stock_tracker.shared.models.instruments import Instrument, QuoteSnapshot


def load_fixture(fixture_name: str) -> Any:
    """
    Load fixture data from quote_responses.json.

    Args:
        fixture_name: Name of the fixture to load

    Returns:
        Fixture data (dict, list, etc.)

    Example:
        >>> chart = load_fixture("yahoo_chart_apple")
    """
    fixtures_path = Path(__file__).parent / "quote_responses.json"

    with open(fixtures_path) as f:
        all_fixtures = json.load(f)

    if fixture_name not in all_fixtures:
        raise KeyError(f"Fixture '{fixture_name}' not found")

    return all_fixtures[fixture_name]


def make_response(
    body: Any, status_code: int = 200, url: str = "https://example.test"
) -> HttpResponse:
    """Wrap a body the way AiohttpClient does."""
    return HttpResponse(
        status_code=status_code,
        body=body if isinstance(body, dict) else {"error": body},
        headers={},
        url=url,
    )


def make_instrument(
    symbol: str = "AAPL",
    price: str = "100.00",
    previous_close: str | None = "98.00",
    market: Market | None = None,
    volume: str = "1000",
) -> Instrument:
    """Create an instrument with derived change fields."""
    if market is None:
        market = Market.DOMESTIC if symbol.endswith((".KS", ".KQ")) else Market.FOREIGN
    price_value = Decimal(price)
    return Instrument.from_quote(
        symbol=symbol,
        market=market,
        price=price_value,
        previous_close=Decimal(previous_close) if previous_close is not None else None,
        day_high=price_value,
        day_low=price_value,
        volume=volume,
    )


def make_snapshot(symbol: str = "AAPL", price: str = "100.00", **kwargs) -> QuoteSnapshot:
    return QuoteSnapshot(instrument=make_instrument(symbol, price, **kwargs))


__all__ = [
    "load_fixture",
    "make_instrument",
    "make_response",
    "make_snapshot",
]
