"""Storage schemas."""

from .relational import WatchlistRecord, validate_table_name, watchlist_table_ddl

__all__ = ["WatchlistRecord", "validate_table_name", "watchlist_table_ddl"]
