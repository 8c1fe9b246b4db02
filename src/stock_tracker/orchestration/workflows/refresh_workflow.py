"""
Refresh Workflow
================

The sync engine: single-flight price refresh for one user's watchlist.

A batch takes the symbols tracked when it starts, fetches every quote
concurrently, isolates per-symbol failures, then applies exactly one
upsert_prices and exactly one persistence write. A refresh requested while a
batch is in flight returns a COALESCED result immediately.

Nothing is written while the stored watchlist has not been loaded, or after
the engine is closed. Both guard the full-replace save against wiping the
user's stored list.

State machine:
    IDLE -> REFRESHING -> IDLE
    IDLE -> REFRESHING -> FAILED_PARTIAL -> IDLE
"""

import asyncio
import time
from collections.abc import Callable
from datetime import datetime

from stock_tracker.config.state import SyncConfig
from stock_tracker.infrastructure.impls.system import SystemClock
from stock_tracker.infrastructure.observability import get_sync_logger
from stock_tracker.infrastructure.ports.system import IClock
from stock_tracker.ingestion.ports.data_ports import QuoteSourcePort
from stock_tracker.orchestration.ports import (
    IWatchlistGateway,
    RefreshStatus,
    RefreshTrigger,
    SyncState,
)
from stock_tracker.orchestration.workflows.base import (
    RefreshResult,
    execute_with_retry,
)
from stock_tracker.shared.exceptions import (
    NotAuthenticated,
    PersistenceFailure,
    QuoteUnavailable,
)
from stock_tracker.shared.models.instruments import Instrument, PriceUpdate
from stock_tracker.watchlist.store import WatchlistStore


class SyncEngine:
    """Keeps a WatchlistStore fresh and persisted."""

    def __init__(
        self,
        store: WatchlistStore,
        quote_source: QuoteSourcePort,
        gateway: IWatchlistGateway,
        config: SyncConfig | None = None,
        clock: IClock | None = None,
        on_state_change: Callable[[SyncState], None] | None = None,
        loaded: bool = True,
    ):
        """
        Initialize the sync engine.

        Args:
            store: Watchlist to refresh (mutated only through this engine)
            quote_source: Quote client
            gateway: Persistence gateway
            config: Retry settings
            clock: Time source for result timestamps
            on_state_change: Called with every new state (UI binding)
            loaded: False when the stored watchlist still has to be loaded;
                ensure_loaded() retries it before any refresh or edit
        """
        self._store = store
        self._quotes = quote_source
        self._gateway = gateway
        self.config = config or SyncConfig()
        self._clock = clock or SystemClock()
        self._state = SyncState.IDLE
        self._on_state_change = on_state_change
        self._last_refreshed_at: datetime | None = None
        self.last_persistence_warning: str | None = None
        self.load_warning: str | None = None
        self._loaded = loaded
        self._closed = False
        self._log = get_sync_logger(user_id=store.user_id)

    # ==================== PROPERTIES ====================

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def store(self) -> WatchlistStore:
        return self._store

    @property
    def last_refreshed_at(self) -> datetime | None:
        """When a batch last refreshed at least one symbol."""
        return self._last_refreshed_at

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def closed(self) -> bool:
        return self._closed

    # ==================== LIFECYCLE ====================

    async def ensure_loaded(self) -> bool:
        """
        Load the stored watchlist if that has not succeeded yet.

        Stored instruments go first; anything added locally meanwhile is kept
        after them.

        Returns:
            True once the stored watchlist is loaded
        """
        if self._loaded:
            return True
        try:
            stored = await self._gateway.load(self._store.user_id)
        except PersistenceFailure as e:
            self._log.warning("watchlist_load_failed", error=str(e))
            self.load_warning = str(e)
            return False

        self._store.merge_stored(stored or [])
        self._loaded = True
        self.load_warning = None
        self._log.info("watchlist_loaded", tracked=len(self._store))
        return True

    def close(self) -> None:
        """Stop persisting; a batch still in flight finishes without writing."""
        self._closed = True

    # ==================== REFRESH ====================

    async def refresh(
        self, trigger: RefreshTrigger = RefreshTrigger.USER
    ) -> RefreshResult:
        """
        Run one refresh batch.

        Never raises for quote or persistence failures; they are reported on
        the returned RefreshResult.
        """
        if self._state != SyncState.IDLE:
            self._log.debug("refresh_coalesced", trigger=trigger.value)
            return RefreshResult(status=RefreshStatus.COALESCED, trigger=trigger)

        self._set_state(SyncState.REFRESHING)
        started_at = self._clock.utcnow()
        start = time.monotonic()

        try:
            result = await self._run_batch(trigger)
        finally:
            if self._state == SyncState.REFRESHING:
                self._set_state(SyncState.IDLE)

        result.started_at = started_at
        result.finished_at = self._clock.utcnow()
        result.duration_seconds = time.monotonic() - start

        self._log.info(
            "refresh_completed",
            trigger=trigger.value,
            status=result.status.value,
            refreshed=len(result.refreshed),
            failed=len(result.failed),
            persisted=result.persisted,
            duration_seconds=round(result.duration_seconds, 3),
        )
        return result

    async def _run_batch(self, trigger: RefreshTrigger) -> RefreshResult:
        await self.ensure_loaded()
        symbols = self._store.symbols()
        if not symbols:
            return RefreshResult(status=RefreshStatus.EMPTY, trigger=trigger)

        outcomes = await asyncio.gather(
            *(self._fetch(symbol) for symbol in symbols), return_exceptions=True
        )

        updates: dict[str, PriceUpdate] = {}
        failed: dict[str, str] = {}
        for symbol, outcome in zip(symbols, outcomes):
            if isinstance(outcome, QuoteUnavailable):
                self._log.warning("quote_unavailable", symbol=symbol, error=str(outcome))
                failed[symbol] = str(outcome)
            elif isinstance(outcome, Exception):
                self._log.error(
                    "quote_fetch_error",
                    symbol=symbol,
                    error=str(outcome),
                    error_type=type(outcome).__name__,
                )
                failed[symbol] = f"{type(outcome).__name__}: {outcome}"
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                updates[symbol] = PriceUpdate.from_instrument(outcome.instrument)

        if not updates:
            self._mark_failed_partial()
            return RefreshResult(
                status=RefreshStatus.FAILED, trigger=trigger, failed=failed
            )

        refreshed = self._store.upsert_prices(updates)
        if refreshed:
            self._last_refreshed_at = self._clock.utcnow()
            warning = await self._persist("refresh")
        else:
            # Every fetched symbol left the watchlist while the batch ran
            self._log.info("refresh_discarded", fetched=len(updates))
            warning = None
        status = RefreshStatus.PARTIAL if failed else RefreshStatus.SUCCESS
        if failed:
            self._mark_failed_partial()

        return RefreshResult(
            status=status,
            trigger=trigger,
            refreshed=refreshed,
            failed=failed,
            persisted=bool(refreshed) and warning is None,
            persistence_warning=warning,
        )

    async def _fetch(self, symbol: str):
        return await execute_with_retry(
            self._quotes.fetch_quote,
            symbol,
            retries=self.config.quote_retries,
            retry_delay_seconds=self.config.retry_delay_seconds,
        )

    # ==================== USER EDITS ====================

    async def add_instrument(self, instrument: Instrument) -> bool:
        """
        Track instrument and persist the watchlist.

        Returns:
            False when the symbol was already tracked (nothing written)

        Raises:
            NotAuthenticated: after close()
        """
        self._check_open()
        await self.ensure_loaded()
        if not self._store.add(instrument):
            self._log.debug("instrument_already_tracked", symbol=instrument.symbol)
            return False
        self._log.info("instrument_added", symbol=instrument.symbol)
        await self._persist("add")
        return True

    async def remove_symbol(self, symbol: str) -> bool:
        """
        Stop tracking symbol and persist the watchlist.

        Returns:
            False when the symbol was not tracked (nothing written)

        Raises:
            NotAuthenticated: after close()
        """
        self._check_open()
        await self.ensure_loaded()
        if not self._store.remove(symbol):
            return False
        self._log.info("instrument_removed", symbol=symbol.strip().upper())
        await self._persist("remove")
        return True

    # ==================== INTERNALS ====================

    async def _persist(self, reason: str) -> str | None:
        """Write the full watchlist; returns a warning instead of raising."""
        if self._closed:
            self._log.info("watchlist_persist_skipped", reason=reason, cause="closed")
            return "watchlist closed, changes not saved"
        if not self._loaded:
            warning = (
                f"stored watchlist not loaded, changes not saved: {self.load_warning}"
            )
            self._log.warning(
                "watchlist_persist_skipped", reason=reason, cause="not_loaded"
            )
            self.last_persistence_warning = warning
            return warning

        try:
            await self._gateway.save(self._store.user_id, self._store.snapshot())
        except PersistenceFailure as e:
            self._log.warning("watchlist_persist_failed", reason=reason, error=str(e))
            self.last_persistence_warning = str(e)
            return str(e)
        self.last_persistence_warning = None
        return None

    def _check_open(self) -> None:
        if self._closed:
            raise NotAuthenticated("watchlist session is closed")

    def _mark_failed_partial(self) -> None:
        self._set_state(SyncState.FAILED_PARTIAL)
        self._set_state(SyncState.IDLE)

    def _set_state(self, state: SyncState) -> None:
        if state == self._state:
            return
        self._log.debug("state_changed", previous=self._state.value, state=state.value)
        self._state = state
        if self._on_state_change is not None:
            self._on_state_change(state)
