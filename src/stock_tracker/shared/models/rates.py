"""Exchange-rate models.

A RateTable is anchored at one base currency: every entry reads
"1 base = rate x target". The base itself is implicitly 1.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

ONE = Decimal("1")


def _normalize_code(v: Any) -> Any:
    if isinstance(v, str):
        return v.strip().upper()
    return v


class RateTable(BaseModel):
    """Base-currency rate table."""

    model_config = ConfigDict(frozen=True)

    base: str = Field(..., min_length=3, max_length=3)
    rates: dict[str, Decimal] = Field(default_factory=dict)
    fetched_at: datetime | None = Field(default=None)

    @field_validator("base", mode="before")
    @classmethod
    def normalize_base(cls, v):
        return _normalize_code(v)

    @field_validator("rates", mode="before")
    @classmethod
    def normalize_rate_keys(cls, v):
        if isinstance(v, dict):
            return {_normalize_code(code): rate for code, rate in v.items()}
        return v

    def rate_for(self, code: str) -> Decimal | None:
        """Rate of code against the base; None when the table has no entry."""
        code = _normalize_code(code)
        if code == self.base:
            return ONE
        return self.rates.get(code)

    def __contains__(self, code: str) -> bool:
        return self.rate_for(code) is not None


class ConversionRequest(BaseModel):
    """One conversion asked for by the user; stateless."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    amount: Decimal = Field(..., ge=0)
    from_currency: str = Field(..., alias="from", min_length=3, max_length=3)
    to_currency: str = Field(..., alias="to", min_length=3, max_length=3)

    @field_validator("from_currency", "to_currency", mode="before")
    @classmethod
    def normalize_codes(cls, v):
        return _normalize_code(v)
