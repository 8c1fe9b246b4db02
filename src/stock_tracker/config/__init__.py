"""Configuration package for stock_tracker."""

from .state import ConfigLoader, ConfigState, get_config

__all__ = [
    "ConfigLoader",
    "ConfigState",
    "get_config",
]
