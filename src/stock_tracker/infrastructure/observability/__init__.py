"""
Observability for the stock tracker: structured logging with architectural
context (layer, component) bound to every event.
"""

from .logging import (
    get_conversion_logger,
    get_database_logger,
    get_infrastructure_logger,
    get_ingestion_logger,
    get_logger,
    get_storage_logger,
    get_sync_logger,
    setup_logging,
    setup_logging_from_config,
)

__all__ = [
    "get_conversion_logger",
    "get_database_logger",
    "get_infrastructure_logger",
    "get_ingestion_logger",
    "get_logger",
    "get_storage_logger",
    "get_sync_logger",
    "setup_logging",
    "setup_logging_from_config",
]
