"""Shared domain models."""

from stock_tracker.shared.models.enums import Market
from stock_tracker.shared.models.instruments import (
    UNKNOWN_VOLUME,
    Instrument,
    PricePoint,
    PriceUpdate,
    QuoteSnapshot,
    compute_change,
)
from stock_tracker.shared.models.rates import ConversionRequest, RateTable

__all__ = [
    # Enums
    "Market",
    # Models
    "ConversionRequest",
    "Instrument",
    "PricePoint",
    "PriceUpdate",
    "QuoteSnapshot",
    "RateTable",
    # Helpers
    "UNKNOWN_VOLUME",
    "compute_change",
]
