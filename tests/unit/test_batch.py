"""Tests for filter_map — partial-failure batch processing."""

from __future__ import annotations

import asyncio
import inspect

import pytest

from ctxerr import FilterMapResult, attempt, err, filter_map, is_err


class TestFilterMapSync:
    def test_partitions_values_and_errors(self):
        bad = err("bad")
        result = filter_map([1, 2, 3], lambda i, _: bad if i == 2 else i * 2)
        assert result.values == [2, 6]
        assert result.errors == [bad]

    def test_errors_is_none_when_nothing_failed(self):
        result = filter_map([1, 2, 3], lambda i, _: i)
        assert result.values == [1, 2, 3]
        assert result.errors is None

    def test_none_omits_the_item(self):
        result = filter_map(["a", "", "b"], lambda s, _: s or None)
        assert result.values == ["a", "b"]
        assert result.errors is None

    def test_falsy_values_are_kept(self):
        result = filter_map([0, 1], lambda i, _: i)
        assert result.values == [0, 1]

    def test_passes_index(self):
        result = filter_map(["a", "b", "c"], lambda item, index: f"{index}:{item}")
        assert result.values == ["0:a", "1:b", "2:c"]

    def test_preserves_error_order(self):
        result = filter_map(range(5), lambda i, _: err(f"e{i}") if i % 2 else i)
        assert result.values == [0, 2, 4]
        assert [e.message for e in result.errors] == ["e1", "e3"]

    def test_empty_input(self):
        result = filter_map([], lambda i, _: i)
        assert result == FilterMapResult([], None)

    def test_unpacks_into_values_and_errors(self):
        values, errors = filter_map([1], lambda i, _: i)
        assert values == [1]
        assert errors is None

    def test_accepts_generators(self):
        result = filter_map((n for n in range(3)), lambda i, _: i + 1)
        assert result.values == [1, 2, 3]

    def test_combined_with_attempt(self):
        result = filter_map(["1", "x", "3"], lambda raw, _: attempt(lambda: int(raw)))
        assert result.values == [1, 3]
        assert len(result.errors) == 1
        assert result.errors[0].name == "ValueError"

    def test_exceptions_from_fn_propagate(self):
        def explode(item: int, index: int) -> int:
            raise RuntimeError("not converted")

        with pytest.raises(RuntimeError, match="not converted"):
            filter_map([1], explode)


class TestFilterMapAsync:
    @pytest.mark.asyncio
    async def test_returns_awaitable_when_fn_is_async(self):
        async def double(i: int, _: int):
            return err("bad") if i == 2 else i * 2

        result = await filter_map([1, 2, 3], double)
        assert result.values == [2, 6]
        assert len(result.errors) == 1
        assert is_err(result.errors[0])

    @pytest.mark.asyncio
    async def test_preserves_input_order_regardless_of_completion(self):
        async def delayed(i: int, _: int) -> int:
            await asyncio.sleep(0.01 * (3 - i))
            return i

        result = await filter_map([0, 1, 2], delayed)
        assert result.values == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_runs_items_concurrently(self):
        started: list[int] = []
        release = asyncio.Event()

        async def wait_for_all(i: int, _: int) -> int:
            started.append(i)
            if len(started) == 3:
                release.set()
            await release.wait()
            return i

        result = await asyncio.wait_for(filter_map([1, 2, 3], wait_for_all), timeout=1)
        assert result.values == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_mixed_sync_and_async_results(self):
        async def later(i: int) -> int:
            return i

        result = await filter_map([1, 2, 3], lambda i, _: later(i) if i != 2 else None)
        assert result.values == [1, 3]
        assert result.errors is None

    @pytest.mark.asyncio
    async def test_async_attempt_per_item(self):
        async def fetch(i: int) -> int:
            if i == 2:
                raise ConnectionError("refused")
            return i

        result = await filter_map([1, 2, 3], lambda i, _: attempt(lambda: fetch(i)))
        assert result.values == [1, 3]
        assert err("fetch failed", result.errors[0]).fmt_err() == "fetch failed -> ConnectionError: refused"


class TestFilterMapExceptions:
    def test_created_coroutines_are_closed_when_fn_raises(self):
        """
        GIVEN fn returns a coroutine for item 0 and raises for item 1
        WHEN filter_map is called
        THEN the exception propagates and the coroutine is closed, not left unawaited.
        """
        created = []

        async def later(i: int) -> int:
            return i

        def fn(i: int, _: int):
            if i == 1:
                raise RuntimeError("not converted")
            coroutine = later(i)
            created.append(coroutine)
            return coroutine

        with pytest.raises(RuntimeError, match="not converted"):
            filter_map([0, 1], fn)
        assert len(created) == 1
        assert inspect.getcoroutinestate(created[0]) == inspect.CORO_CLOSED

    @pytest.mark.asyncio
    async def test_siblings_finish_before_the_exception_propagates(self):
        """
        GIVEN two async items where the first raises immediately
        WHEN the filter_map coroutine is awaited
        THEN the slower sibling runs to completion before the exception is raised.
        """
        finished: list[int] = []

        async def work(i: int, _: int) -> int:
            if i == 0:
                raise ConnectionError("refused")
            await asyncio.sleep(0.01)
            finished.append(i)
            return i

        with pytest.raises(ConnectionError, match="refused"):
            await filter_map([0, 1], work)
        assert finished == [1]

    @pytest.mark.asyncio
    async def test_first_exception_in_input_order_wins(self):
        async def work(i: int, _: int) -> int:
            await asyncio.sleep(0.01 * (2 - i))
            raise ValueError(f"item {i}")

        with pytest.raises(ValueError, match="item 0"):
            await filter_map([0, 1], work)
