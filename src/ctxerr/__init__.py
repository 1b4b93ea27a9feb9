"""
ctxerr — errors as values, with context.

Exceptions from code you don't control are caught once, by attempt(), and
returned as CtxError values. Every level above wraps the error with a
message and context, and the top level prints the whole chain:

    from ctxerr import Result, attempt, err, is_err

    def connect(db_id: str) -> Result[None]:
        result = attempt(lambda: db.connect(db_id))
        if is_err(result):
            return err("failed to connect to database", result).ctx({"db_id": db_id})

    error = connect("db-prod-1")
    if is_err(error):
        print(error.fmt_err("startup failed"))
        # startup failed -> failed to connect to database -> ConnectionError: refused
"""

from ctxerr.error import CtxError
from ctxerr.attempt import Result, attempt, err, err_with_ctx, is_err
from ctxerr.batch import FilterMapResult, filter_map
from ctxerr.assertions import ErrAssertions
from ctxerr.config import CtxErrSettings, clear_settings_cache, get_settings
from ctxerr.log import configure_structlog, error_fields

__all__ = [
    "CtxError",
    "Result",
    "attempt",
    "err",
    "err_with_ctx",
    "is_err",
    "filter_map",
    "FilterMapResult",
    "ErrAssertions",
    "CtxErrSettings",
    "get_settings",
    "clear_settings_cache",
    "configure_structlog",
    "error_fields",
]

__version__ = "1.0.0"
