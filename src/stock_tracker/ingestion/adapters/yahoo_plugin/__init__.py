"""Yahoo Finance quote plugin."""

from .client import YahooQuoteClient
from .mappers import classify_market, normalize_symbol, parse_chart_response

__all__ = [
    "YahooQuoteClient",
    "classify_market",
    "normalize_symbol",
    "parse_chart_response",
]
