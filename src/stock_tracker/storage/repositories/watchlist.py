"""Watchlist repository: the persistence gateway.

Reads and full-replaces a user's watchlist row. Every database error surfaces
as PersistenceFailure so callers can keep their in-memory state.
"""

from collections.abc import Sequence

from pydantic import ValidationError

from stock_tracker.infrastructure.database.ports import IDatabaseAdapter
from stock_tracker.infrastructure.observability import get_storage_logger
from stock_tracker.shared.exceptions import PersistenceFailure
from stock_tracker.shared.models.instruments import Instrument
from stock_tracker.storage.schemas.relational import (
    WatchlistRecord,
    validate_table_name,
    watchlist_table_ddl,
)


class WatchlistRepository:
    """Repository for per-user watchlists.

    Last writer wins: save() replaces the stored array wholesale.
    """

    def __init__(self, db: IDatabaseAdapter, table: str = "watchlists"):
        """Initialize watchlist repository.

        Args:
            db: Database adapter for SQL execution
            table: Target table name
        """
        self.db = db
        self.table = validate_table_name(table)
        self._log = get_storage_logger("watchlist-repository", table=self.table)

    async def ensure_schema(self) -> None:
        """Create the watchlists table if missing."""
        try:
            await self.db.execute(watchlist_table_ddl(self.table))
        except Exception as e:
            self._log.error("schema_create_failed", error=str(e))
            raise PersistenceFailure("-", "ensure_schema", str(e)) from e

    async def load(self, user_id: str) -> list[Instrument] | None:
        """Load the stored watchlist.

        Returns:
            Instruments in stored order, or None when the user has no row

        Raises:
            PersistenceFailure: on database error or an undecodable row
        """
        query = f"SELECT user_id, stocks, updated_at FROM {self.table} WHERE user_id = $1"

        try:
            row = await self.db.fetch_one(query, user_id)
        except Exception as e:
            self._log.error("watchlist_load_failed", user_id=user_id, error=str(e))
            raise PersistenceFailure(user_id, "load", str(e)) from e

        if row is None:
            self._log.info("watchlist_not_found", user_id=user_id)
            return None

        try:
            record = WatchlistRecord.model_validate(row)
        except (ValidationError, ValueError) as e:
            self._log.error("watchlist_decode_failed", user_id=user_id, error=str(e))
            raise PersistenceFailure(user_id, "load", f"invalid stored data: {e}") from e

        self._log.debug("watchlist_loaded", user_id=user_id, count=len(record.stocks))
        return record.stocks

    async def save(self, user_id: str, instruments: Sequence[Instrument]) -> None:
        """Upsert the full watchlist for user_id.

        Raises:
            PersistenceFailure: on database error
        """
        record = WatchlistRecord(user_id=user_id, stocks=list(instruments))
        query = f"""
            INSERT INTO {self.table} (user_id, stocks, updated_at)
            VALUES ($1, $2::jsonb, NOW())
            ON CONFLICT (user_id)
            DO UPDATE SET
                stocks = EXCLUDED.stocks,
                updated_at = EXCLUDED.updated_at
        """

        try:
            await self.db.execute(query, record.user_id, record.stocks_json())
        except Exception as e:
            self._log.error("watchlist_save_failed", user_id=user_id, error=str(e))
            raise PersistenceFailure(user_id, "save", str(e)) from e

        self._log.debug("watchlist_saved", user_id=user_id, count=len(record.stocks))
