"""
Stock tracker: per-user equity watchlists with periodic price refresh.
Each package owns one concern and talks to the others through small ports.

Modules:
- ingestion: Quote and exchange-rate clients
- shared: Common models, enums, exceptions
- conversion: Currency conversion and valuation
- watchlist: In-memory watchlist store
- orchestration: Sync engine, refresh scheduler, tracker session
- storage: Watchlist persistence
- config: YAML configuration
- infrastructure: Database, logging, clock, identity
"""
