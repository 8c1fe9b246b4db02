"""Database access for the stock tracker."""

from .ports import DatabaseAdapter, IDatabaseAdapter

__all__ = ["DatabaseAdapter", "IDatabaseAdapter"]
