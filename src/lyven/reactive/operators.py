"""Reactive operators and factories.

Operators are ``Single -> Single`` functions meant for ``Single.pipe``::

    price = (
        Single.from_supplier(fetch_price)
        .pipe(timeout(2.0), retry(3), catch_error(lambda exc: Single.of(0)))
    )

Factories (``just``, ``timer``, ``interval``, ``merge`` ...) build new
singles and streams. Timing uses anyio, so everything here runs on
either asyncio or trio.
"""

import concurrent.futures
import itertools
from collections.abc import AsyncIterator, Callable
from typing import Any

import anyio

from lyven.reactive.multi import Multi
from lyven.reactive.single import EMPTY, Single

type Operator = Callable[[Single[Any]], Single[Any]]


# -- Factories --


def just[T](value: T) -> Single[T]:
    return Single.of(value)


def empty() -> Single[Any]:
    return Single.empty()


def from_future[T](future: concurrent.futures.Future[T]) -> Single[T]:
    return Single.from_future(future)


def from_supplier[T](supplier: Callable[[], T]) -> Single[T]:
    return Single.from_supplier(supplier)


def timer(seconds: float) -> Single[int]:
    """Emit ``0`` after *seconds*."""

    async def _fire() -> int:
        await anyio.sleep(seconds)
        return 0

    return Single(_fire)


def interval(period: float) -> Multi[int]:
    """Emit ``0, 1, 2, ...`` every *period* seconds, forever. Bound it with ``take``."""

    async def _tick() -> AsyncIterator[int]:
        for n in itertools.count():
            await anyio.sleep(period)
            yield n

    return Multi(_tick)


def combine_latest[A, B, R](
    first: Single[A],
    second: Single[B],
    combiner: Callable[[A, B], R],
) -> Single[R]:
    """Resolve both singles concurrently and combine their values.

    Empty when either input is empty.
    """

    async def _combined() -> Any:
        results: list[Any] = [EMPTY, EMPTY]

        async def _run(index: int, single: Single[Any]) -> None:
            results[index] = await single.resolve_raw()

        async with anyio.create_task_group() as tg:
            tg.start_soon(_run, 0, first)
            tg.start_soon(_run, 1, second)

        if EMPTY in (results[0], results[1]):
            return EMPTY
        return combiner(results[0], results[1])

    return Single(_combined)


def merge[T](*singles: Single[T]) -> Multi[T]:
    """Resolve all singles concurrently; emit values in completion order.

    Empty singles contribute nothing.
    """

    async def _merged() -> AsyncIterator[T]:
        completed: list[Any] = []

        async def _run(single: Single[T]) -> None:
            value = await single.resolve_raw()
            if value is not EMPTY:
                completed.append(value)

        async with anyio.create_task_group() as tg:
            for single in singles:
                tg.start_soon(_run, single)

        for value in completed:
            yield value

    return Multi(_merged)


# -- Operators --


def delay(seconds: float) -> Operator:
    """Wait *seconds* before resolving the upstream single."""

    def _operator(upstream: Single[Any]) -> Single[Any]:
        async def _delayed() -> Any:
            await anyio.sleep(seconds)
            return await upstream.resolve_raw()

        return Single(_delayed)

    return _operator


def timeout(seconds: float) -> Operator:
    """Fail with ``TimeoutError`` when upstream takes longer than *seconds*."""

    def _operator(upstream: Single[Any]) -> Single[Any]:
        async def _bounded() -> Any:
            with anyio.fail_after(seconds):
                return await upstream.resolve_raw()

        return Single(_bounded)

    return _operator


def retry(times: int) -> Operator:
    """Re-run upstream up to *times* more times after a failure.

    The last failure propagates.
    """

    def _operator(upstream: Single[Any]) -> Single[Any]:
        async def _retrying() -> Any:
            failures = 0
            while True:
                try:
                    return await upstream.resolve_raw()
                except Exception:
                    if failures >= times:
                        raise
                    failures += 1

        return Single(_retrying)

    return _operator


def catch_error(handler: Callable[[Exception], Single[Any]]) -> Operator:
    """Replace an upstream failure with the single *handler* returns."""

    def _operator(upstream: Single[Any]) -> Single[Any]:
        async def _caught() -> Any:
            try:
                return await upstream.resolve_raw()
            except Exception as exc:
                return await handler(exc).resolve_raw()

        return Single(_caught)

    return _operator
