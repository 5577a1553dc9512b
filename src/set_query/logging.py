"""
structlog setup for the set query service.

Every event carries the id of the GraphQL request it was logged under, so the
warnings a degraded set item produces can be traced back to one query.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

# Longest inbound X-Request-ID accepted as-is
MAX_REQUEST_ID_LENGTH = 64

request_id_var: ContextVar[str | None] = ContextVar("set_query_request_id", default=None)


def add_request_id(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor stamping the current request id onto the event."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def configure_logging(debug: bool = False, level: str | None = None) -> None:
    """Configure structlog on top of the standard library root logger.

    Args:
        debug: Render colored console output instead of JSON lines
        level: Level name such as "INFO"; defaults to DEBUG when debug is set
    """
    if level is None:
        log_level = logging.DEBUG if debug else logging.INFO
    else:
        log_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    logging.basicConfig(level=log_level, stream=sys.stdout, format="%(message)s", force=True)

    renderer = structlog.dev.ConsoleRenderer(colors=True) if debug else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_request_id,
            structlog.processors.TimeStamper(fmt="ISO", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def bind_request_id(request_id: str | None = None) -> str:
    """Bind the request id for the current context and return it.

    An inbound id is kept when it is short printable text, otherwise a fresh
    uuid4 hex id is generated.
    """
    if not request_id or len(request_id) > MAX_REQUEST_ID_LENGTH or not request_id.isprintable():
        request_id = uuid.uuid4().hex
    request_id_var.set(request_id)
    return request_id


def unbind_request_id() -> None:
    request_id_var.set(None)
