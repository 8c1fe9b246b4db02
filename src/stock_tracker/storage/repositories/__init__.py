"""Storage repositories."""

from .watchlist import WatchlistRepository

__all__ = ["WatchlistRepository"]
