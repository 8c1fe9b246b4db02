"""
Tests for the watchlist repository (persistence gateway).
"""

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from stock_tracker.shared.exceptions import PersistenceFailure
from stock_tracker.storage.repositories import WatchlistRepository
from stock_tracker.storage.schemas import WatchlistRecord, validate_table_name
from tests.fixtures import make_instrument


@pytest.fixture
def mock_db():
    db = MagicMock()
    db.execute = AsyncMock(return_value=None)
    db.fetch_one = AsyncMock(return_value=None)
    return db


@pytest.fixture
def repository(mock_db):
    return WatchlistRepository(mock_db)


@pytest.fixture
def instruments():
    return [make_instrument("AAPL", "189.50"), make_instrument("005930.KS", "71500")]


def _stored_row(instruments, as_text=True):
    stocks = [i.model_dump(mode="json") for i in instruments]
    return {
        "user_id": "user-1",
        "stocks": json.dumps(stocks) if as_text else stocks,
        "updated_at": datetime(2024, 6, 3, tzinfo=UTC),
    }


class TestLoad:
    @pytest.mark.asyncio
    async def test_no_row_returns_none(self, repository, mock_db):
        assert await repository.load("user-1") is None
        assert mock_db.fetch_one.await_args.args[1] == "user-1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("as_text", [True, False])
    async def test_decodes_stored_instruments(
        self, repository, mock_db, instruments, as_text
    ):
        mock_db.fetch_one.return_value = _stored_row(instruments, as_text=as_text)

        loaded = await repository.load("user-1")

        assert loaded == instruments

    @pytest.mark.asyncio
    async def test_database_error(self, repository, mock_db):
        mock_db.fetch_one.side_effect = OSError("connection refused")

        with pytest.raises(PersistenceFailure) as exc_info:
            await repository.load("user-1")

        assert exc_info.value.operation == "load"
        assert exc_info.value.user_id == "user-1"

    @pytest.mark.asyncio
    async def test_corrupt_row(self, repository, mock_db):
        mock_db.fetch_one.return_value = {
            "user_id": "user-1",
            "stocks": '[{"symbol": "AAPL"}]',
            "updated_at": None,
        }

        with pytest.raises(PersistenceFailure, match="invalid stored data"):
            await repository.load("user-1")


class TestSave:
    @pytest.mark.asyncio
    async def test_upserts_full_watchlist(self, repository, mock_db, instruments):
        await repository.save("user-1", instruments)

        mock_db.execute.assert_awaited_once()
        query, user_id, payload = mock_db.execute.await_args.args
        assert "ON CONFLICT (user_id)" in query
        assert "INSERT INTO watchlists" in query
        assert user_id == "user-1"
        assert [s["symbol"] for s in json.loads(payload)] == ["AAPL", "005930.KS"]

    @pytest.mark.asyncio
    async def test_saved_payload_round_trips(self, repository, mock_db, instruments):
        await repository.save("user-1", instruments)
        payload = mock_db.execute.await_args.args[2]

        record = WatchlistRecord(user_id="user-1", stocks=payload)

        assert record.stocks == instruments

    @pytest.mark.asyncio
    async def test_empty_watchlist_is_saved(self, repository, mock_db):
        await repository.save("user-1", [])
        assert json.loads(mock_db.execute.await_args.args[2]) == []

    @pytest.mark.asyncio
    async def test_database_error(self, repository, mock_db, instruments):
        mock_db.execute.side_effect = OSError("disk full")

        with pytest.raises(PersistenceFailure) as exc_info:
            await repository.save("user-1", instruments)

        assert exc_info.value.operation == "save"


class TestSchema:
    @pytest.mark.asyncio
    async def test_ensure_schema(self, mock_db):
        repository = WatchlistRepository(mock_db, table="app.watchlists")

        await repository.ensure_schema()

        ddl = mock_db.execute.await_args.args[0]
        assert "CREATE TABLE IF NOT EXISTS app.watchlists" in ddl
        assert "user_id TEXT PRIMARY KEY" in ddl
        assert "stocks JSONB" in ddl

    @pytest.mark.parametrize("name", ["watchlists; DROP TABLE x", "1table", "a.b.c", ""])
    def test_rejects_unsafe_table_names(self, name):
        with pytest.raises(ValueError):
            validate_table_name(name)
