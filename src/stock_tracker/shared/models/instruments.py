# stock_tracker/shared/models/instruments.py

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stock_tracker.shared.models.enums import Market

UNKNOWN_VOLUME = "unknown"
TWO_PLACES = Decimal("0.01")


def compute_change(
    price: Decimal, previous_close: Decimal | None
) -> tuple[Decimal, Decimal] | None:
    """Return (change, change_percent) or None when previous close is unusable.

    change_percent is rounded half-up to two decimals.
    """
    if previous_close is None or previous_close <= 0:
        return None
    change = price - previous_close
    percent = (change / previous_close * 100).quantize(
        TWO_PLACES, rounding=ROUND_HALF_UP
    )
    return change, percent


class PriceUpdate(BaseModel):
    """
    Partial instrument used to merge refreshed quotes into a watchlist.

    Fields left as None keep the instrument's current value, which is how
    stale change figures survive a quote without a usable previous close.
    """

    model_config = ConfigDict(frozen=True)

    price: Decimal | None = None
    previous_close: Decimal | None = None
    change: Decimal | None = None
    change_percent: Decimal | None = None
    day_high: Decimal | None = None
    day_low: Decimal | None = None
    volume: str | None = None

    @classmethod
    def from_instrument(cls, instrument: "Instrument") -> "PriceUpdate":
        return cls(
            price=instrument.price,
            previous_close=instrument.previous_close,
            change=instrument.change,
            change_percent=instrument.change_percent,
            day_high=instrument.day_high,
            day_low=instrument.day_low,
            volume=instrument.volume,
        )


class Instrument(BaseModel):
    """
    One tracked equity and its latest known quote.

    symbol is the unique key within a watchlist; symbol and market never
    change once the instrument exists.
    """

    model_config = ConfigDict(frozen=True)

    # ========== IDENTITY ==========
    symbol: str = Field(..., min_length=1)
    market: Market

    # ========== QUOTE ==========
    price: Decimal
    previous_close: Decimal | None = Field(default=None)
    change: Decimal | None = Field(default=None)
    change_percent: Decimal | None = Field(default=None)
    day_high: Decimal
    day_low: Decimal
    volume: str = Field(default=UNKNOWN_VOLUME)

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return v.strip().upper()

    @classmethod
    def from_quote(
        cls,
        symbol: str,
        market: Market,
        price: Decimal,
        previous_close: Decimal | None,
        day_high: Decimal,
        day_low: Decimal,
        volume: str,
    ) -> "Instrument":
        """Build an instrument, deriving change figures from previous close."""
        derived = compute_change(price, previous_close)
        change, change_percent = derived if derived else (None, None)
        return cls(
            symbol=symbol,
            market=market,
            price=price,
            previous_close=previous_close,
            change=change,
            change_percent=change_percent,
            day_high=day_high,
            day_low=day_low,
            volume=volume,
        )

    def apply(self, update: PriceUpdate) -> "Instrument":
        """Return a copy with every non-None field of update applied."""
        fields = update.model_dump(exclude_none=True)
        if not fields:
            return self
        return self.model_copy(update=fields)

    # ==================== PROPERTIES ====================

    @property
    def is_rising(self) -> bool | None:
        """True for change >= 0, False below zero, None when unknown."""
        if self.change is None:
            return None
        return self.change >= 0

    @property
    def change_percent_display(self) -> str:
        if self.change_percent is None:
            return "N/A"
        return f"{self.change_percent:.2f}%"


class PricePoint(BaseModel):
    """One (timestamp, close) pair of a quote's chart series."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    close: Decimal


class QuoteSnapshot(BaseModel):
    """Canonical result of a quote lookup: the instrument plus its chart series."""

    model_config = ConfigDict(frozen=True)

    instrument: Instrument
    history: list[PricePoint] = Field(default_factory=list)

    @property
    def symbol(self) -> str:
        return self.instrument.symbol
