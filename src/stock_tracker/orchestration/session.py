"""
Tracker session: wires the clients, store, sync engine and scheduler for one
signed-in user.
"""

from decimal import Decimal

from stock_tracker.config.state import ConfigState
from stock_tracker.conversion.engine import UNAVAILABLE, Unavailable, convert
from stock_tracker.conversion.valuation import Valuation, valuate
from stock_tracker.infrastructure.impls.system import SystemClock
from stock_tracker.infrastructure.observability import get_sync_logger
from stock_tracker.infrastructure.ports.identity import IIdentityProvider
from stock_tracker.infrastructure.ports.system import IClock
from stock_tracker.ingestion.ports.data_ports import QuoteSourcePort, RateSourcePort
from stock_tracker.orchestration.ports import IWatchlistGateway, RefreshTrigger
from stock_tracker.orchestration.scheduler import RefreshScheduler
from stock_tracker.orchestration.workflows.base import (
    RefreshResult,
    execute_with_retry,
)
from stock_tracker.orchestration.workflows.refresh_workflow import SyncEngine
from stock_tracker.shared.exceptions import (
    ConfigurationError,
    NotAuthenticated,
    RateUnavailable,
)
from stock_tracker.shared.models.instruments import Instrument, QuoteSnapshot
from stock_tracker.shared.models.rates import ConversionRequest, RateTable
from stock_tracker.watchlist.store import WatchlistStore, WatchlistSummary


class TrackerSession:
    """
    Composition root for one user.

    Quote lookup, rates and conversion work signed out; watchlist operations
    raise NotAuthenticated until sign_in() succeeds.
    """

    def __init__(
        self,
        identity: IIdentityProvider,
        quote_source: QuoteSourcePort,
        rate_source: RateSourcePort,
        gateway: IWatchlistGateway,
        config: ConfigState | None = None,
        clock: IClock | None = None,
    ):
        self.identity = identity
        self.quotes = quote_source
        self.rate_source = rate_source
        self.gateway = gateway
        self.config = config or ConfigState()
        self._clock = clock or SystemClock()

        self._user_id: str | None = None
        self._engine: SyncEngine | None = None
        self._scheduler: RefreshScheduler | None = None
        self._rates: dict[str, RateTable] = {}
        self.last_result: RefreshResult | None = None
        self._log = get_sync_logger("tracker-session")

    # ==================== PROPERTIES ====================

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def is_authenticated(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> SyncEngine:
        if self._engine is None:
            raise NotAuthenticated("sign in to use the watchlist")
        return self._engine

    @property
    def store(self) -> WatchlistStore:
        return self.engine.store

    @property
    def scheduler(self) -> RefreshScheduler | None:
        return self._scheduler

    @property
    def load_warning(self) -> str | None:
        """Why the stored watchlist is not loaded yet; None once it is."""
        return self._engine.load_warning if self._engine is not None else None

    # ==================== LIFECYCLE ====================

    async def sign_in(self) -> bool:
        """
        Load the current user's watchlist and start periodic refresh.

        If the stored watchlist cannot be loaded the session still signs in,
        but nothing is saved until a later refresh or edit loads it.

        Returns:
            False when the identity provider reports no user, or sign_out()
            ran before loading finished
        """
        user_id = await self.identity.current_user_id()
        if not user_id:
            self._log.info("sign_in_skipped", reason="no_user")
            return False

        if self._engine is not None:
            if user_id == self._user_id:
                return True
            await self.sign_out()

        engine = SyncEngine(
            WatchlistStore(user_id),
            self.quotes,
            self.gateway,
            config=self.config.sync,
            clock=self._clock,
            loaded=False,
        )
        self._user_id = user_id
        self._engine = engine
        await engine.ensure_loaded()
        if self._engine is not engine:
            # signed out while loading
            return False

        self._scheduler = RefreshScheduler(
            engine, self.config.sync.refresh_interval_seconds
        )
        self._scheduler.start()
        self._log.info(
            "signed_in",
            user_id=user_id,
            tracked=len(engine.store),
            loaded=engine.loaded,
        )

        result = await engine.refresh(RefreshTrigger.LOGIN)
        if self._engine is engine:
            self.last_result = result
        return True

    async def sign_out(self, close_clients: bool = False) -> None:
        """
        Stop the scheduler and drop the in-memory watchlist.

        Storage is untouched: the engine is closed first, so a batch still in
        flight completes without saving.
        """
        engine, self._engine = self._engine, None
        scheduler, self._scheduler = self._scheduler, None
        user_id, self._user_id = self._user_id, None
        self.last_result = None

        if engine is not None:
            engine.close()
        if scheduler is not None:
            await scheduler.stop()
        if engine is not None:
            engine.store.clear()
            self._log.info("signed_out", user_id=user_id)

        if close_clients:
            for client in (self.quotes, self.rate_source):
                close = getattr(client, "close", None)
                if close is not None:
                    await close()

    # ==================== QUOTES & WATCHLIST ====================

    async def lookup(self, symbol: str) -> QuoteSnapshot:
        """
        Quote for the search view; the watchlist is not touched.

        Raises:
            QuoteUnavailable: symbol unknown or service unreachable
        """
        return await execute_with_retry(
            self.quotes.fetch_quote,
            symbol,
            retries=self.config.sync.quote_retries,
            retry_delay_seconds=self.config.sync.retry_delay_seconds,
        )

    async def add_symbol(self, symbol: str) -> Instrument:
        """
        Fetch a fresh quote for symbol and track it.

        Returns:
            The tracked instrument (the existing one if already tracked)

        Raises:
            NotAuthenticated: when signed out
            QuoteUnavailable: symbol unknown or service unreachable
        """
        engine = self.engine
        snapshot = await self.lookup(symbol)
        await engine.add_instrument(snapshot.instrument)
        return engine.store.get(snapshot.symbol) or snapshot.instrument

    async def remove_symbol(self, symbol: str) -> bool:
        return await self.engine.remove_symbol(symbol)

    async def refresh(self) -> RefreshResult:
        """Explicit user refresh."""
        engine = self.engine
        result = await engine.refresh(RefreshTrigger.USER)
        if self._engine is engine:
            self.last_result = result
        return result

    def summary(self) -> WatchlistSummary:
        return self.store.summary()

    # ==================== RATES & CONVERSION ====================

    async def load_rates(self, base: str | None = None) -> RateTable | None:
        """
        Fetch the latest table for base, keeping the previous one on failure.

        Returns:
            The fresh table, the last good table for base, or None
        """
        base = (base or self.config.rates.default_base).strip().upper()
        try:
            table = await execute_with_retry(
                self.rate_source.fetch_rates,
                base,
                retries=self.config.sync.quote_retries,
                retry_delay_seconds=self.config.sync.retry_delay_seconds,
            )
        except (RateUnavailable, ConfigurationError) as e:
            self._log.warning("rates_unavailable", base=base, error=str(e))
            return self._rates.get(base)

        self._rates[base] = table
        return table

    def rate_table(self, base: str | None = None) -> RateTable | None:
        base = (base or self.config.rates.default_base).strip().upper()
        return self._rates.get(base)

    def convert(
        self,
        amount: Decimal | int | str,
        from_currency: str,
        to_currency: str,
        base: str | None = None,
    ) -> Decimal | Unavailable:
        """Convert against the latest table; UNAVAILABLE when none is loaded."""
        table = self.rate_table(base)
        if table is None:
            return UNAVAILABLE
        request = ConversionRequest(
            amount=Decimal(str(amount)),
            from_currency=from_currency,
            to_currency=to_currency,
        )
        return convert(request, table)

    def valuations(self, target: str, base: str | None = None) -> list[Valuation]:
        """Every tracked instrument's price converted to target."""
        store = self.store
        table = self.rate_table(base) or RateTable(
            base=(base or self.config.rates.default_base)
        )
        return [valuate(i, table, target, self.config.market) for i in store]
