"""Currency conversion."""

from .engine import UNAVAILABLE, Unavailable, convert, format_amount
from .valuation import (
    RateQuote,
    Valuation,
    exchange_pairs,
    format_rate,
    market_currency,
    pair_rate,
    rate_board,
    valuate,
)

__all__ = [
    "UNAVAILABLE",
    "RateQuote",
    "Unavailable",
    "Valuation",
    "convert",
    "exchange_pairs",
    "format_amount",
    "format_rate",
    "market_currency",
    "pair_rate",
    "rate_board",
    "valuate",
]
