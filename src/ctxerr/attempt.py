"""
Conversion layer — turn raised exceptions into returned values.

Result[T] is simply ``T | CtxError``: a function that would return T
returns Result[T] instead, and callers branch on is_err().

    def load_config(path: str) -> Result[dict]:
        text = attempt(lambda: Path(path).read_text())
        if is_err(text):
            return err("failed to read config", text).ctx({"path": path})
        return json.loads(text)

attempt() belongs as close as possible to code you don't control: it is
the one place where raised exceptions are caught. Above it, errors travel
as values and are re-wrapped with err() at each level.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Coroutine, Mapping
from typing import Any, TypeGuard, TypeVar, overload

import structlog

from ctxerr.config import get_settings
from ctxerr.error import CtxError

T = TypeVar("T")
logger = structlog.get_logger(__name__)

Result = T | CtxError


@overload
def attempt(fn: Callable[[], Awaitable[T]]) -> Coroutine[Any, Any, Result[T]]: ...


@overload
def attempt(fn: Callable[[], T]) -> Result[T]: ...


def attempt(fn: Callable[[], Any]) -> Any:
    """
    Call fn and return its value, or the raised exception as a CtxError.

    If fn returns an awaitable (a coroutine, a Task, a Future), a coroutine
    is returned instead; awaiting it yields the resolved value or the
    converted exception.

        value = attempt(lambda: int(raw))
        body = await attempt(lambda: client.get(url))

    Only Exception subclasses are caught. KeyboardInterrupt, SystemExit and
    asyncio.CancelledError propagate.
    """
    try:
        value = fn()
    except Exception as exc:
        return _convert(exc)
    if inspect.isawaitable(value):
        return _settle(value)
    return value


async def _settle(awaitable: Awaitable[T]) -> Result[T]:
    try:
        return await awaitable
    except Exception as exc:
        return _convert(exc)


def _convert(exc: Exception) -> CtxError:
    converted = CtxError.from_exception(exc)
    if get_settings().log_attempts:
        logger.debug("ctxerr.attempt.caught", exc_type=converted.name, error=converted.fmt_err())
    return converted


def err(message: str, cause: Any = None) -> CtxError:
    """
    Build a CtxError from a message and an optional cause.

        return err("failed to query db", result).ctx({"query": sql})
    """
    return CtxError(message, cause)


def err_with_ctx(default_context: Mapping[str, Any]) -> Callable[..., CtxError]:
    """
    Return an err() that attaches default_context to every error it builds.

        service_err = err_with_ctx({"scope": "user_service"})
        ...
        if is_err(result):
            return service_err("failed to find user", result)
    """
    defaults = dict(default_context)

    def scoped_err(message: str, cause: Any = None) -> CtxError:
        return CtxError(message, cause).ctx(defaults)

    return scoped_err


def is_err(result: object) -> TypeGuard[CtxError]:
    """True when result is a CtxError (the failure branch of a Result)."""
    return isinstance(result, CtxError)
