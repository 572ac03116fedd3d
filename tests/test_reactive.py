"""Tests for lyven.reactive — Single, Multi, and operators."""

import concurrent.futures

import pytest

from lyven.reactive import Multi, Single
from lyven.reactive.operators import (
    catch_error,
    combine_latest,
    delay,
    empty,
    from_future,
    from_supplier,
    interval,
    just,
    merge,
    retry,
    timeout,
    timer,
)


class Flaky:
    """Fails ``failures`` times, then returns ``"ok"``."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            msg = f"attempt {self.calls}"
            raise ConnectionError(msg)
        return "ok"


class TestSingle:
    @pytest.mark.asyncio
    async def test_of_and_await(self) -> None:
        assert await Single.of(5) == 5

    @pytest.mark.asyncio
    async def test_empty(self) -> None:
        single = Single.empty()
        assert await single is None
        assert await single.is_empty()

    @pytest.mark.asyncio
    async def test_map_sync_and_async(self) -> None:
        async def double(n: int) -> int:
            return n * 2

        result = await Single.of(3).map(lambda n: n + 1).map(double)
        assert result == 8

    @pytest.mark.asyncio
    async def test_map_skips_empty(self) -> None:
        calls: list[object] = []
        assert await Single.empty().map(calls.append) is None
        assert calls == []

    @pytest.mark.asyncio
    async def test_flat_map(self) -> None:
        assert await Single.of(2).flat_map(lambda n: Single.of(n * 10)) == 20

    @pytest.mark.asyncio
    async def test_cold(self) -> None:
        counter = {"n": 0}

        def supplier() -> int:
            counter["n"] += 1
            return counter["n"]

        single = Single.from_supplier(supplier)
        assert counter["n"] == 0
        assert await single == 1
        assert await single == 2

    @pytest.mark.asyncio
    async def test_awaitable_remembered(self) -> None:
        async def compute() -> int:
            return 7

        single = Single.from_awaitable(compute())
        assert await single == 7
        assert await single == 7

    @pytest.mark.asyncio
    async def test_subscribe(self) -> None:
        seen: list[int] = []
        await Single.of(1).subscribe(seen.append)
        await Single.empty().subscribe(seen.append)
        assert seen == [1]

    @pytest.mark.asyncio
    async def test_subscribe_error(self) -> None:
        errors: list[BaseException] = []
        await Single(Flaky(1)).subscribe(lambda _: None, errors.append)
        assert isinstance(errors[0], ConnectionError)
        with pytest.raises(ConnectionError):
            await Single(Flaky(1)).subscribe(lambda _: None)

    def test_block(self) -> None:
        assert Single.of("done").block() == "done"

    def test_from_future(self) -> None:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(lambda: 41 + 1)
            assert Single.from_future(future).block() == 42


class TestMulti:
    @pytest.mark.asyncio
    async def test_iterate(self) -> None:
        assert [n async for n in Multi.of(1, 2, 3)] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_map_filter_collect(self) -> None:
        stream = Multi.from_iterable(range(6)).filter(lambda n: n % 2 == 0).map(lambda n: n * n)
        assert await stream.collect_list() == [0, 4, 16]

    @pytest.mark.asyncio
    async def test_replayable(self) -> None:
        stream = Multi.from_iterable(iter([1, 2]))
        assert await stream.collect_list() == [1, 2]
        assert await stream.collect_list() == [1, 2]

    @pytest.mark.asyncio
    async def test_take(self) -> None:
        assert await Multi.of(1, 2, 3).take(2).collect_list() == [1, 2]
        assert await Multi.of(1, 2, 3).take(0).collect_list() == []

    @pytest.mark.asyncio
    async def test_from_async_iterable(self) -> None:
        async def numbers():
            yield 1
            yield 2

        assert await Multi.from_async_iterable(numbers()).collect_list() == [1, 2]

    @pytest.mark.asyncio
    async def test_subscribe(self) -> None:
        seen: list[str] = []
        await Multi.of("a", "b").subscribe(seen.append)
        assert seen == ["a", "b"]


class TestFactories:
    @pytest.mark.asyncio
    async def test_just_and_empty(self) -> None:
        assert await just(1) == 1
        assert await empty() is None

    @pytest.mark.asyncio
    async def test_from_supplier(self) -> None:
        assert await from_supplier(lambda: "value") == "value"

    def test_from_future(self) -> None:
        future: concurrent.futures.Future[str] = concurrent.futures.Future()
        future.set_result("done")
        assert from_future(future).block() == "done"

    @pytest.mark.asyncio
    async def test_timer(self) -> None:
        assert await timer(0.01) == 0

    @pytest.mark.asyncio
    async def test_interval(self) -> None:
        assert await interval(0.001).take(3).collect_list() == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_combine_latest(self) -> None:
        assert await combine_latest(just(2), just(3), lambda a, b: a * b) == 6
        assert await combine_latest(just(2), empty(), lambda a, b: a * b) is None

    @pytest.mark.asyncio
    async def test_merge(self) -> None:
        slow = just("slow").pipe(delay(0.05))
        values = await merge(slow, just("fast"), empty()).collect_list()
        assert values == ["fast", "slow"]


class TestOperators:
    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        with pytest.raises(TimeoutError):
            await timer(1.0).pipe(timeout(0.01))
        assert await just(1).pipe(timeout(1.0)) == 1

    @pytest.mark.asyncio
    async def test_retry_recovers(self) -> None:
        flaky = Flaky(2)
        assert await Single(flaky).pipe(retry(2)) == "ok"
        assert flaky.calls == 3

    @pytest.mark.asyncio
    async def test_retry_exhausted(self) -> None:
        flaky = Flaky(5)
        with pytest.raises(ConnectionError, match="attempt 3"):
            await Single(flaky).pipe(retry(2))
        assert flaky.calls == 3

    @pytest.mark.asyncio
    async def test_catch_error(self) -> None:
        result = await Single(Flaky(1)).pipe(catch_error(lambda exc: just(str(exc))))
        assert result == "attempt 1"

    @pytest.mark.asyncio
    async def test_delay(self) -> None:
        assert await just("later").pipe(delay(0.01)) == "later"
