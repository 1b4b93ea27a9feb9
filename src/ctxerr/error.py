"""
CtxError — an exception that is meant to be returned, not raised.

A CtxError carries:
  - its own message (never the chain)
  - at most one cause (any exception, possibly another CtxError)
  - an optional flat context dict, attached with .ctx() as the error
    travels up the call stack

At the top of the stack the whole chain is rendered in one line:

    >>> deep = CtxError("connection refused").ctx({"host": "db-1"})
    >>> top = CtxError("failed to load user", deep).ctx({"user_id": 7})
    >>> top.fmt_err()
    'failed to load user -> connection refused'
    >>> top.get("host")
    'db-1'

Chain layout:

    CtxError ──cause──► CtxError ──cause──► ValueError ──__cause__──► OSError
    └──────── context lookups (get/get_all) ────────┘
    └──────────────────── fmt_err / root_stack ───────────────────────────┘

Context lookups only follow the contiguous run of CtxError links; message
formatting follows the whole chain, using __cause__ on foreign exceptions.
"""

from __future__ import annotations

import re
import traceback
from collections.abc import Iterator, Mapping
from itertools import islice, takewhile
from pathlib import Path
from typing import Any

import structlog

from ctxerr.config import get_settings
from ctxerr.throwable import normalize

logger = structlog.get_logger(__name__)

DEFAULT_NAME = "CtxError"

# Names rendered without a "<name>: " prefix in a formatted chain.
_UNPREFIXED_NAMES = frozenset({"Exception", "Error", DEFAULT_NAME})

_PACKAGE_DIR = Path(__file__).resolve().parent
_FRAME_START = re.compile(r'^(?=  File ")', re.MULTILINE)
_FRAME_FILE = re.compile(r'^  File "(?P<file>[^"]+)", line \d+')


class CtxError(Exception):
    """
    Exception carrying a cause chain and a context map.

    Instances are plain Exceptions: they can be raised, caught and printed
    like any other. __cause__ mirrors .cause so a raised CtxError shows the
    full chain in a Python traceback.

    ctx() mutates the instance in place. Sharing one instance between
    concurrently running tasks that both call ctx() is not supported.
    """

    def __init__(
        self,
        message: str = "",
        cause: Any = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.name: str = DEFAULT_NAME
        self.message: str = message
        self.cause: BaseException | None = None if cause is None else normalize(cause)
        self.__cause__ = self.cause
        self.context: dict[str, Any] | None = dict(context) if context is not None else None
        self.exception: BaseException | None = None
        self.stack: str = "".join(traceback.format_list(traceback.extract_stack()))

    @classmethod
    def from_exception(cls, exc: BaseException) -> CtxError:
        """
        Promote a foreign exception to a CtxError without adding a chain link.

        name, message, stack and cause are copied from the exception; the
        exception itself stays reachable through .exception.
        """
        if isinstance(exc, CtxError):
            return exc
        converted = cls(str(exc), exc.__cause__)
        converted.name = type(exc).__name__
        converted.stack = "".join(traceback.format_tb(exc.__traceback__))
        converted.exception = exc
        return converted

    # ──────────────────────── Context ────────────────────────

    def ctx(self, context: Mapping[str, Any]) -> CtxError:
        """
        Merge context over the existing context (new values win) and return self.

            err("query failed", cause).ctx({"table": "users"}).ctx({"retry": 2})
        """
        self.context = {**(self.context or {}), **context}
        return self

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a context value along the chain, preferring the deepest one.

        Presence is decided by the key, so stored falsy values (0, "", False,
        None) are returned as-is. Returns default when no link has the key.
        """
        found = default
        for link in self._context_links():
            if link.context is not None and key in link.context:
                found = link.context[key]
        return found

    def get_all(self, key: str) -> list[Any]:
        """All context values for key, from this error down to the root cause."""
        return [
            link.context[key]
            for link in self._context_links()
            if link.context is not None and key in link.context
        ]

    # ──────────────────────── Chain ────────────────────────

    def iter_chain(self) -> Iterator[BaseException]:
        """
        Yield this error and every cause below it.

        Stops (and logs a warning) if a link is reached twice, so a chain that
        was wired into a loop by hand still terminates.
        """
        seen: set[int] = set()
        link: BaseException | None = self
        while link is not None:
            if id(link) in seen:
                logger.warning("ctxerr.cycle_detected", links=len(seen), error=self.message)
                return
            seen.add(id(link))
            yield link
            link = link.cause if isinstance(link, CtxError) else link.__cause__

    def fmt_err(self, message: str | None = None) -> str:
        """
        Render the cause chain as ``message -> cause1 -> cause2 -> ...``.

        message, when given, is placed first. Causes with a non-default name
        are shown as ``Name: message``. Blank segments are dropped; if nothing
        is left the configured unknown-error text is returned.
        """
        settings = get_settings()
        segments = [message, self.message]
        segments.extend(_segment(link) for link in islice(self.iter_chain(), 1, None))
        kept = [segment for segment in segments if segment and segment.strip()]
        if not kept:
            return settings.unknown_error_message
        return settings.chain_separator.join(kept)

    @property
    def root_stack(self) -> str:
        """
        Trace of the deepest error in the chain that has one.

        Frames from inside ctxerr (the constructor, err(), attempt()) are
        removed so the trace starts at the caller's code.
        """
        for link in reversed(list(self.iter_chain())):
            cleaned = _clean_stack(_stack_of(link))
            if cleaned.strip():
                return cleaned
        return get_settings().no_stack_message

    def _context_links(self) -> Iterator[CtxError]:
        return takewhile(lambda link: isinstance(link, CtxError), self.iter_chain())  # type: ignore[return-value]

    # ──────────────────────── Dunder methods ────────────────────────

    def __str__(self) -> str:
        return self.fmt_err()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, message={self.message!r})"


def _segment(link: BaseException) -> str:
    if isinstance(link, CtxError):
        name, message = link.name, link.message
    else:
        name, message = type(link).__name__, str(link)
    if name in _UNPREFIXED_NAMES:
        return message
    return f"{name}: {message}"


def _stack_of(link: BaseException) -> str:
    if isinstance(link, CtxError):
        return link.stack or ""
    return "".join(traceback.format_tb(link.__traceback__))


def _is_internal_frame(block: str) -> bool:
    header = _FRAME_FILE.match(block)
    if header is None:
        return False
    return Path(header["file"]).resolve().parent == _PACKAGE_DIR


def _clean_stack(stack: str) -> str:
    return "".join(block for block in _FRAME_START.split(stack) if not _is_internal_frame(block))
