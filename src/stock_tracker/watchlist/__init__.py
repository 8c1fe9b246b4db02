"""Per-user watchlist state."""

from .store import WatchlistStore, WatchlistSummary

__all__ = ["WatchlistStore", "WatchlistSummary"]
