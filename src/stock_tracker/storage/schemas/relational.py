"""Relational models for the storage layer.

One row per user in the watchlists table:
    - user_id: TEXT PRIMARY KEY
    - stocks: JSONB (ordered array of instruments)
    - updated_at: TIMESTAMPTZ
"""

import json
import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from stock_tracker.shared.models.instruments import Instrument

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def validate_table_name(name: str) -> str:
    """Accept plain or schema-qualified SQL identifiers only."""
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid table name: {name!r}")
    return name


def watchlist_table_ddl(table: str) -> str:
    table = validate_table_name(table)
    return f"""
        CREATE TABLE IF NOT EXISTS {table} (
            user_id TEXT PRIMARY KEY,
            stocks JSONB NOT NULL DEFAULT '[]'::jsonb,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """


class WatchlistRecord(BaseModel):
    """A user's persisted watchlist.

    Stored in: watchlists (relational table, full replace per save)
    """

    user_id: str = Field(..., min_length=1, description="Identity provider user id")
    stocks: list[Instrument] = Field(
        default_factory=list, description="Instruments in display order"
    )
    updated_at: datetime | None = Field(None, description="Last write timestamp")

    @field_validator("stocks", mode="before")
    @classmethod
    def decode_stocks(cls, v: Any) -> Any:
        # asyncpg returns JSONB as text unless a codec is registered
        if isinstance(v, str | bytes):
            return json.loads(v)
        if v is None:
            return []
        return v

    def stocks_json(self) -> str:
        return json.dumps([s.model_dump(mode="json") for s in self.stocks])
