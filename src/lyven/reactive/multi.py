"""Multi — a deferred stream of values.

Backed by a zero-argument factory returning an async iterator, so each
``async for`` or ``subscribe`` starts the stream over.

Usage::

    names = Multi.from_iterable(users).filter(lambda u: u.active).map(lambda u: u.name)
    async for name in names:
        ...
    first_ten = await names.take(10).collect_list()
"""

from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable
from typing import Any

from lyven._internal.invoke import invoke
from lyven.reactive.single import Single


class Multi[T]:
    """A cold, deferred stream."""

    __slots__ = ("_source",)

    def __init__(self, source: Callable[[], AsyncIterator[T]]) -> None:
        self._source = source

    # -- Construction --

    @classmethod
    def of(cls, *values: T) -> Multi[T]:
        return cls.from_iterable(values)

    @classmethod
    def from_iterable(cls, values: Iterable[T]) -> Multi[T]:
        """Stream the items of *values*. Re-iterated on each subscription."""
        items = list(values)

        async def _items() -> AsyncIterator[T]:
            for item in items:
                yield item

        return cls(_items)

    @classmethod
    def from_async_iterable(cls, values: AsyncIterable[T]) -> Multi[T]:
        """Wrap an async iterable. Async generators can only be consumed once."""

        async def _items() -> AsyncIterator[T]:
            async for item in values:
                yield item

        return cls(_items)

    # -- Transformation --

    def map[R](self, func: Callable[[T], R] | Callable[[T], Awaitable[R]]) -> Multi[R]:
        source = self._source

        async def _mapped() -> AsyncIterator[Any]:
            async for item in source():
                yield await invoke(func, item)

        return Multi(_mapped)

    def filter(self, predicate: Callable[[T], Any]) -> Multi[T]:
        source = self._source

        async def _filtered() -> AsyncIterator[T]:
            async for item in source():
                if await invoke(predicate, item):
                    yield item

        return Multi(_filtered)

    def take(self, count: int) -> Multi[T]:
        """Stop after *count* items. Works on infinite streams such as ``interval``."""
        source = self._source

        async def _taken() -> AsyncIterator[T]:
            if count <= 0:
                return
            seen = 0
            iterator = source()
            try:
                async for item in iterator:
                    yield item
                    seen += 1
                    if seen >= count:
                        break
            finally:
                aclose = getattr(iterator, "aclose", None)
                if aclose is not None:
                    await aclose()

        return Multi(_taken)

    # -- Consumption --

    def __aiter__(self) -> AsyncIterator[T]:
        return self._source()

    def collect_list(self) -> Single[list[T]]:
        source = self._source

        async def _collect() -> list[T]:
            return [item async for item in source()]

        return Single(_collect)

    async def subscribe(
        self,
        on_next: Callable[[T], Any],
        on_error: Callable[[BaseException], Any] | None = None,
    ) -> None:
        """Deliver every item to *on_next*; failures go to *on_error* when given."""
        try:
            async for item in self._source():
                await invoke(on_next, item)
        except Exception as exc:
            if on_error is None:
                raise
            await invoke(on_error, exc)
