"""
Yahoo Finance symbol mapping and chart response parsing.

Symbol rules:
    "005930"     -> "005930.KS"  (6-digit code gets the default domestic suffix)
    "005930.KS"  -> DOMESTIC
    "035720.KQ"  -> DOMESTIC
    "aapl "      -> "AAPL", FOREIGN
"""

import re
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from stock_tracker.shared.exceptions import QuoteUnavailable
from stock_tracker.shared.models.enums import Market
from stock_tracker.shared.models.instruments import (
    UNKNOWN_VOLUME,
    Instrument,
    PricePoint,
    QuoteSnapshot,
)

DEFAULT_DOMESTIC_SUFFIXES = (".KS", ".KQ")
DEFAULT_DOMESTIC_SUFFIX = ".KS"

_NUMERIC_CODE = re.compile(r"^\d{6}$")


def classify_market(
    symbol: str, domestic_suffixes: tuple[str, ...] = DEFAULT_DOMESTIC_SUFFIXES
) -> Market:
    """DOMESTIC when the symbol carries a recognized domestic suffix."""
    upper = symbol.upper()
    if any(upper.endswith(suffix.upper()) for suffix in domestic_suffixes):
        return Market.DOMESTIC
    return Market.FOREIGN


def normalize_symbol(
    raw: str,
    domestic_suffixes: tuple[str, ...] = DEFAULT_DOMESTIC_SUFFIXES,
    default_suffix: str = DEFAULT_DOMESTIC_SUFFIX,
) -> tuple[str, Market]:
    """
    Normalize user input into a provider symbol and its market.

    Raises:
        ValueError: if raw is blank
    """
    symbol = raw.strip().upper() if raw else ""
    if not symbol:
        raise ValueError("symbol must be a non-empty string")

    if _NUMERIC_CODE.match(symbol):
        symbol = f"{symbol}{default_suffix.upper()}"

    return symbol, classify_market(symbol, domestic_suffixes)


def to_decimal(value: Any) -> Decimal | None:
    """Parse a JSON number into Decimal; None for null, bool or garbage."""
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return parsed if parsed.is_finite() else None


def _format_volume(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return UNKNOWN_VOLUME
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _pick_previous_close(meta: dict[str, Any]) -> Decimal | None:
    # chartPreviousClose wins unless it is zero/negative and previousClose is usable
    candidates = [
        parsed
        for parsed in (
            to_decimal(meta.get("chartPreviousClose")),
            to_decimal(meta.get("previousClose")),
        )
        if parsed is not None
    ]
    if not candidates:
        return None
    return next((c for c in candidates if c > 0), candidates[0])


def _parse_history(result: dict[str, Any]) -> list[PricePoint]:
    timestamps = result.get("timestamp") or []
    quotes = (result.get("indicators") or {}).get("quote") or [{}]
    closes = (quotes[0] or {}).get("close") or []

    history = []
    for ts, close in zip(timestamps, closes):
        price = to_decimal(close)
        if price is None or ts is None:
            continue
        history.append(
            PricePoint(timestamp=datetime.fromtimestamp(ts, UTC), close=price)
        )
    return history


def parse_chart_response(
    symbol: str, market: Market, body: dict[str, Any]
) -> QuoteSnapshot:
    """
    Parse a Yahoo chart response into a QuoteSnapshot.

    Response format (abridged):
        {
          "chart": {
            "result": [{
              "meta": {
                "regularMarketPrice": 71500,
                "chartPreviousClose": 70000,
                "regularMarketDayHigh": 72000,
                "regularMarketDayLow": 70500,
                "regularMarketVolume": 12345678
              },
              "timestamp": [1717372800, ...],
              "indicators": {"quote": [{"close": [70100, null, ...]}]}
            }],
            "error": null
          }
        }

    Raises:
        QuoteUnavailable: no result payload, no current price, or no previous close
    """
    chart = body.get("chart") if isinstance(body, dict) else None
    results = (chart or {}).get("result") or []
    if not results or not isinstance(results[0], dict):
        raise QuoteUnavailable(symbol, "no chart result in response")

    result = results[0]
    meta = result.get("meta") or {}

    price = to_decimal(meta.get("regularMarketPrice"))
    if price is None:
        raise QuoteUnavailable(symbol, "response has no current price")

    previous_close = _pick_previous_close(meta)
    if previous_close is None:
        raise QuoteUnavailable(symbol, "response has no previous close")

    # Fail-soft: a missing day range falls back to the current price
    day_high = to_decimal(meta.get("regularMarketDayHigh"))
    if day_high is None:
        day_high = price
    day_low = to_decimal(meta.get("regularMarketDayLow"))
    if day_low is None:
        day_low = price

    instrument = Instrument.from_quote(
        symbol=symbol,
        market=market,
        price=price,
        previous_close=previous_close,
        day_high=day_high,
        day_low=day_low,
        volume=_format_volume(meta.get("regularMarketVolume")),
    )
    return QuoteSnapshot(instrument=instrument, history=_parse_history(result))
