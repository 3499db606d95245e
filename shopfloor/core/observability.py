"""
Logging and metrics for the scheduling services.

Every log line carries the correlation id and acting user of the assignment
call that produced it. Counters track assignment outcomes and cycle time
overrides; they are served over HTTP only when ENABLE_METRICS is set.
"""

import contextvars
import logging
import sys
import uuid
from typing import Any

import structlog
from prometheus_client import Counter, start_http_server

from .config import settings

correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)
actor_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("actor_id", default="")

ASSIGNMENT_OPERATIONS = Counter(
    "shopfloor_assignment_operations_total",
    "Total machine assignment operations",
    ["operation", "status"],
)

CYCLE_TIME_OVERRIDES = Counter(
    "shopfloor_cycle_time_overrides_total",
    "Cycle time overrides applied to assignment batches",
)

_metrics_server_started = False


def add_call_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Stamp the current correlation id and actor onto the event."""
    for key, var in (("correlation_id", correlation_id_var), ("actor_id", actor_id_var)):
        value = var.get()
        if value:
            event_dict.setdefault(key, value)
    return event_dict


def _renderer() -> Any:
    if settings.LOG_FORMAT == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=settings.ENVIRONMENT == "local")


def setup_structured_logging() -> None:
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    # add_logger_name reads .name, so the factory has to hand out stdlib loggers
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_call_context,
            structlog.processors.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _renderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    sql_level = logging.INFO if settings.LOG_SQL else logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def setup_metrics() -> None:
    """Start the Prometheus endpoint once per process, if enabled."""
    global _metrics_server_started

    if not settings.ENABLE_METRICS or _metrics_server_started:
        return
    start_http_server(settings.METRICS_PORT)
    _metrics_server_started = True


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind a correlation id to the current context, generating one if absent."""
    correlation_id = correlation_id or uuid.uuid4().hex
    correlation_id_var.set(correlation_id)
    return correlation_id


def set_actor_id(actor_id: str) -> None:
    actor_id_var.set(actor_id)


def initialize_observability() -> None:
    setup_structured_logging()
    setup_metrics()

    get_logger(__name__).info(
        "Logging configured",
        log_format=settings.LOG_FORMAT,
        log_level=settings.LOG_LEVEL,
        metrics_port=settings.METRICS_PORT if settings.ENABLE_METRICS else None,
    )
