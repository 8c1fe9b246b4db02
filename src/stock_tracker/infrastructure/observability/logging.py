"""
structlog configuration and logger factories for the stock tracker.

Every event carries the application name plus the layer and component that
emitted it, so a refresh can be followed from the quote clients through the
sync engine down to the watchlist repository:

    {"app": "stock-tracker", "layer": "sync", "component": "sync-engine",
     "user_id": "u-1", "event": "refresh_completed", "refreshed": 3, ...}

Layers:
    infrastructure  database pool, clock
    ingestion       Yahoo quote client, exchange-rate client
    sync            sync engine, refresh scheduler, tracker session
    conversion      conversion engine, valuation
    storage         watchlist repository
"""

import logging
import sys
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor

from stock_tracker.config.state import LoggingConfig

APP_NAME = "stock-tracker"

Layer = Literal["infrastructure", "ingestion", "sync", "conversion", "storage"]

_SEVERITIES = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["app"] = APP_NAME
    return event_dict


def add_severity_level(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mirror the level as an upper-case `severity` key for log shippers."""
    level = str(event_dict.get("level", "")).upper()
    if level:
        event_dict["severity"] = level if level in _SEVERITIES else "INFO"
    return event_dict


def _build_processors(json_logs: bool, include_timestamp: bool) -> list[Processor]:
    processors: list[Processor] = []
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    processors += [
        structlog.contextvars.merge_contextvars,
        add_app_context,
        structlog.stdlib.add_log_level,
        add_severity_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True, exception_formatter=structlog.dev.plain_traceback
            )
        )
    return processors


def setup_logging(
    level: str = "INFO",
    json_logs: bool = True,
    include_timestamp: bool = True,
) -> None:
    """
    Route structlog through stdlib logging on stdout.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (unknown names mean INFO)
        json_logs: JSON lines when True, coloured console output otherwise
        include_timestamp: Prefix events with an ISO timestamp

    Usage:
        >>> setup_logging(level="DEBUG", json_logs=False)
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=_build_processors(json_logs, include_timestamp),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_logging_from_config(config: LoggingConfig) -> None:
    """setup_logging() driven by the `logging` section of ConfigState."""
    setup_logging(
        level=config.level,
        json_logs=config.json_logs,
        include_timestamp=config.include_timestamp,
    )


def get_logger(
    name: str | None = None,
    layer: Layer | None = None,
    component: str | None = None,
    **initial_context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Logger bound with layer/component context.

    None values are left out of the bound context.

    Usage:
        >>> log = get_logger(__name__, layer="sync", component="sync-engine")
        >>> log.info("refresh_started", symbols=3)
    """
    context = {"layer": layer, "component": component, "module": name}
    context.update(initial_context)
    bound = {key: value for key, value in context.items() if value is not None}

    logger = structlog.get_logger(name)
    return logger.bind(**bound) if bound else logger


def _layer_logger(
    layer: Layer, component: str, **context: Any
) -> structlog.stdlib.BoundLogger:
    return get_logger(layer, layer=layer, component=component, **context)


# ============================================================================
# Layer factories
# ============================================================================


def get_infrastructure_logger(
    component: str, **context: Any
) -> structlog.stdlib.BoundLogger:
    return _layer_logger("infrastructure", component, **context)


def get_ingestion_logger(
    component: str, provider: str | None = None, **context: Any
) -> structlog.stdlib.BoundLogger:
    """
    Logger for the quote and rate clients.

    Usage:
        >>> log = get_ingestion_logger("quote-client", provider="yahoo")
        >>> log.info("quote_fetched", symbol="AAPL")
    """
    return _layer_logger("ingestion", component, provider=provider, **context)


def get_sync_logger(
    component: str = "sync-engine", user_id: str | None = None, **context: Any
) -> structlog.stdlib.BoundLogger:
    """
    Logger for the sync engine, scheduler and session.

    Usage:
        >>> log = get_sync_logger(user_id="u-123")
        >>> log.info("refresh_completed", refreshed=3)
    """
    return _layer_logger("sync", component, user_id=user_id, **context)


def get_conversion_logger(
    component: str = "conversion-engine", **context: Any
) -> structlog.stdlib.BoundLogger:
    return _layer_logger("conversion", component, **context)


def get_storage_logger(component: str, **context: Any) -> structlog.stdlib.BoundLogger:
    return _layer_logger("storage", component, **context)


def get_database_logger(**context: Any) -> structlog.stdlib.BoundLogger:
    """Infrastructure logger for the asyncpg adapter."""
    return get_infrastructure_logger("database-adapter", **context)
