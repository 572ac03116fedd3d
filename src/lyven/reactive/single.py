"""Single — a deferred value that resolves at most once per subscription.

A ``Single`` wraps a zero-argument async factory. Nothing runs until the
single is awaited, blocked on, or subscribed to, and each of those runs
the factory again (cold semantics). ``from_awaitable`` is the exception:
an awaitable can only be awaited once, so its result is remembered.

A single may be empty. Awaiting an empty single returns ``None``;
``map`` and ``flat_map`` skip empty singles; ``subscribe`` does not call
``on_next`` for them.

Usage::

    user = Single.from_supplier(lambda: repo.load(42)).map(lambda u: u.name)
    name = await user
    name = user.block()        # outside an event loop
"""

import concurrent.futures
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import anyio
import anyio.to_thread

from lyven._internal.invoke import invoke

logger = logging.getLogger("lyven.reactive")


class _Empty:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<empty>"


EMPTY: Any = _Empty()


class Single[T]:
    """A cold, deferred value."""

    __slots__ = ("_source",)

    def __init__(self, source: Callable[[], Awaitable[T]]) -> None:
        self._source = source

    # -- Construction --

    @classmethod
    def of(cls, value: T) -> Single[T]:
        async def _value() -> T:
            return value

        return cls(_value)

    @classmethod
    def empty(cls) -> Single[Any]:
        async def _nothing() -> Any:
            return EMPTY

        return cls(_nothing)

    @classmethod
    def from_awaitable(cls, awaitable: Awaitable[T]) -> Single[T]:
        """Wrap a coroutine or other awaitable; its result is remembered."""
        memo: list[Any] = []

        async def _await() -> T:
            if not memo:
                memo.append(await awaitable)
            return memo[0]

        return cls(_await)

    @classmethod
    def from_future(cls, future: concurrent.futures.Future[T]) -> Single[T]:
        """Wait for a ``concurrent.futures.Future`` in a worker thread."""

        async def _wait() -> T:
            return await anyio.to_thread.run_sync(future.result)

        return cls(_wait)

    @classmethod
    def from_supplier(cls, supplier: Callable[[], T]) -> Single[T]:
        """Run a blocking *supplier* in a worker thread on each resolution."""

        async def _supply() -> T:
            return await anyio.to_thread.run_sync(supplier)

        return cls(_supply)

    # -- Transformation --

    def map[R](self, func: Callable[[T], R] | Callable[[T], Awaitable[R]]) -> Single[R]:
        """Transform the value. *func* may be sync or async."""
        source = self._source

        async def _mapped() -> Any:
            value = await source()
            if value is EMPTY:
                return EMPTY
            return await invoke(func, value)

        return Single(_mapped)

    def flat_map[R](self, func: Callable[[T], Single[R]]) -> Single[R]:
        """Chain a single-producing step."""
        source = self._source

        async def _chained() -> Any:
            value = await source()
            if value is EMPTY:
                return EMPTY
            return await func(value).resolve_raw()

        return Single(_chained)

    def pipe(self, *operators: Callable[[Single[Any]], Single[Any]]) -> Single[Any]:
        """Apply operators left to right: ``s.pipe(timeout(1), retry(3))``."""
        result: Single[Any] = self
        for operator in operators:
            result = operator(result)
        return result

    # -- Resolution --

    async def resolve_raw(self) -> Any:
        """Run the factory; empty singles return the ``EMPTY`` sentinel."""
        return await self._source()

    async def resolve(self) -> T | None:
        value = await self._source()
        return None if value is EMPTY else value

    def __await__(self) -> Any:
        return self.resolve().__await__()

    async def is_empty(self) -> bool:
        return await self._source() is EMPTY

    def block(self) -> T | None:
        """Resolve on a fresh event loop. Must not be called from async code."""
        return anyio.run(self.resolve)

    async def subscribe(
        self,
        on_next: Callable[[T], Any],
        on_error: Callable[[BaseException], Any] | None = None,
    ) -> None:
        """Resolve and deliver the value to *on_next*.

        Failures go to *on_error* when given and propagate otherwise.
        """
        try:
            value = await self._source()
        except Exception as exc:
            if on_error is None:
                raise
            logger.debug("Single failed: %s", exc)
            await invoke(on_error, exc)
            return
        if value is not EMPTY:
            await invoke(on_next, value)

    def __repr__(self) -> str:
        return f"Single({getattr(self._source, '__qualname__', self._source)!r})"
