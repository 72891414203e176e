"""
Structured logging infrastructure for market-pulse.

Log Structure:
    {
        "app": "market-pulse",          # Application identifier
        "layer": "storage",             # Architectural layer
        "component": "pulse-store",     # Specific component/service
        "module": "...",                # Logger name (optional)
        "kind": "sentiment",            # Domain context
        "event": "pulse_created",       # What happened
        ...
    }

Architectural Layers:
    - infrastructure: Database adapters, config
    - storage: Repositories and the pulse store service
    - validation: Schema validation of inbound records
    - api: REST API services
"""

import logging
import sys
from typing import Any, Literal

import structlog
from structlog.types import EventDict

Layer = Literal["infrastructure", "storage", "validation", "api"]

APP_NAME = "market-pulse"


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add the application identifier to every log entry."""
    event_dict["app"] = APP_NAME
    return event_dict


def add_severity_level(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Add severity level for cloud logging compatibility.
    """
    level = event_dict.get("level")
    if level:
        severity_map = {
            "debug": "DEBUG",
            "info": "INFO",
            "warning": "WARNING",
            "error": "ERROR",
            "critical": "CRITICAL",
        }
        event_dict["severity"] = severity_map.get(level, "INFO")
    return event_dict


def setup_logging(
    level: str = "INFO",
    json_logs: bool = True,
    include_timestamp: bool = True,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, output JSON. If False, use human-readable format (dev mode).
        include_timestamp: Whether to include ISO timestamps in logs

    Usage:
        >>> from market_pulse.infrastructure.observability import setup_logging
        >>> setup_logging(level="DEBUG", json_logs=True)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        add_app_context,
        structlog.stdlib.add_log_level,
        add_severity_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(
    name: str | None = None,
    layer: Layer | None = None,
    component: str | None = None,
    **initial_context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance with architectural context.

    Args:
        name: Logger name (typically __name__ of the calling module)
        layer: Architectural layer (infrastructure, storage, validation, api)
        component: Specific component/service within the layer
        **initial_context: Additional context key-value pairs to bind to logger

    Usage:
        >>> log = get_logger(__name__, layer="storage", component="pulse-store")
        >>> log.info("pulse_created", kind="sentiment")
    """
    logger = structlog.get_logger(name)

    context = {}

    if layer:
        context["layer"] = layer

    if component:
        context["component"] = component

    if name:
        context["module"] = name

    context.update(initial_context)

    if context:
        logger = logger.bind(**context)

    return logger


# ============================================================================
# Layer-Specific Logger Factories
# ============================================================================


def get_infrastructure_logger(
    component: str,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for infrastructure layer (database adapters, config).

    Usage:
        >>> log = get_infrastructure_logger("sqlite-adapter", path=":memory:")
        >>> log.info("connected")
    """
    return get_logger(
        "infrastructure",
        layer="infrastructure",
        component=component,
        **context,
    )


def get_storage_logger(
    component: str,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for storage layer (repositories, pulse store).

    Usage:
        >>> log = get_storage_logger("pulse-repository", kind="risk")
        >>> log.info("pulse_inserted", pulse_id="...")
    """
    return get_logger(
        "storage",
        layer="storage",
        component=component,
        **context,
    )


def get_validation_logger(
    component: str = "validator",
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for validation layer.

    Usage:
        >>> log = get_validation_logger(kind="flow")
        >>> log.info("record_rejected", fields=["fds"])
    """
    return get_logger(
        "validation",
        layer="validation",
        component=component,
        **context,
    )


def get_api_logger(
    component: str = "fastapi",
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for API layer (REST API services).

    Usage:
        >>> log = get_api_logger()
        >>> log.info("request_received", method="GET", path="/health")
    """
    return get_logger(
        "api",
        layer="api",
        component=component,
        **context,
    )


def get_database_logger(**context: Any) -> structlog.stdlib.BoundLogger:
    """
    Convenience alias for database logging (maps to infrastructure layer).

    Usage:
        >>> log = get_database_logger(backend="postgresql")
        >>> log.info("pool_created", size=10)
    """
    return get_infrastructure_logger("database-adapter", **context)
