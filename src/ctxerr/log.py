"""
Logging helpers — structlog configuration and log fields for CtxError.

ctxerr itself only emits a couple of diagnostic events (cycle detection,
optional attempt() tracing). Applications that want those events rendered
the same way as their own call configure_structlog() once at startup.

error_fields() is the bridge between a CtxError and a log call: it turns the
chain and its context into keyword arguments, leaving transport and
serialization to whatever logger the caller uses.

    log = structlog.get_logger()
    if is_err(result):
        log.error("sync.failed", **error_fields(result))
"""

from __future__ import annotations

import logging
from typing import Any

import structlog

from ctxerr.config import get_settings
from ctxerr.error import CtxError


def configure_structlog(log_level: str | None = None) -> None:
    """
    Configure structlog for human-readable console output.

    This changes process-wide structlog configuration, so ctxerr never calls
    it on import. It is exported for applications and scripts that have no
    logging setup of their own and want the cycle and attempt() events
    rendered; applications that already configure structlog skip it.

    log_level defaults to CTXERR_LOG_LEVEL. Unknown level names fall back to INFO.
    """
    if log_level is None:
        log_level = get_settings().log_level
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping().get(log_level.strip().upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def error_fields(error: CtxError, message: str | None = None) -> dict[str, Any]:
    """
    Flatten an error into log fields.

    Every context key found along the chain is included once, with the
    deepest value winning (same rule as CtxError.get). The formatted chain
    goes under "error" and always wins over a context key of that name.
    """
    fields: dict[str, Any] = {}
    for link in error.iter_chain():
        if not isinstance(link, CtxError):
            break
        if link.context:
            fields.update(link.context)
    fields["error"] = error.fmt_err(message)
    return fields
