"""
Batch helper — map many items, keep going past failures.

attempt() stops at the first exception; filter_map() is for the opposite
case, where every item should be processed and failures collected:

    values, errors = filter_map(rows, lambda row, _: parse_row(row))
    if errors:
        log.warning("import.partial", failed=len(errors))

Per-item results are partitioned:
  - None       → dropped (the item is skipped)
  - CtxError   → errors
  - any other  → values

If fn returns awaitables, filter_map() returns a coroutine that waits for
all of them together and partitions in input order.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Coroutine, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ctxerr.error import CtxError

I = TypeVar("I")  # noqa: E741
T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class FilterMapResult(Generic[T]):
    """
    Values and errors from filter_map(), both in input order.

    errors is None (not an empty list) when nothing failed, so
    ``if result.errors:`` and ``if result.errors is None:`` both read naturally.
    Unpacks as ``values, errors = result``.
    """

    values: list[T]
    errors: list[CtxError] | None = None

    def __iter__(self) -> Iterator[Any]:
        yield self.values
        yield self.errors


def filter_map(
    items: Iterable[I],
    fn: Callable[[I, int], Any],
) -> FilterMapResult[Any] | Coroutine[Any, Any, FilterMapResult[Any]]:
    """
    Call fn(item, index) for every item and partition the results.

    Returns a FilterMapResult, or a coroutine resolving to one when any call
    returned an awaitable. Exceptions raised by fn are not converted; wrap
    the body with attempt() for that.

    If fn raises, coroutines already returned for earlier items are closed
    before the exception propagates. If an awaited item raises, the other
    items still run to completion and the first exception (in input order)
    is raised afterwards.
    """
    results: list[Any] = []
    try:
        for index, item in enumerate(items):
            results.append(fn(item, index))
    except BaseException:
        _close_pending(results)
        raise
    if any(inspect.isawaitable(result) for result in results):
        return _gather(results)
    return _partition(results)


async def _gather(results: list[Any]) -> FilterMapResult[Any]:
    settled = await asyncio.gather(*(_resolve(result) for result in results))
    for _, raised in settled:
        if raised is not None:
            raise raised
    return _partition(value for value, _ in settled)


async def _resolve(result: Any) -> tuple[Any, Exception | None]:
    if not inspect.isawaitable(result):
        return result, None
    try:
        return await result, None
    except Exception as e:
        return None, e


def _close_pending(results: list[Any]) -> None:
    for result in results:
        if inspect.iscoroutine(result):
            result.close()


def _partition(results: Iterable[Any]) -> FilterMapResult[Any]:
    values: list[Any] = []
    errors: list[CtxError] = []
    for result in results:
        if result is None:
            continue
        if isinstance(result, CtxError):
            errors.append(result)
        else:
            values.append(result)
    return FilterMapResult(values, errors or None)
