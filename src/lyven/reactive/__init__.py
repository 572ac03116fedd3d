"""Deferred results for route handlers.

Handlers may return a ``Single`` (one value) or a ``Multi`` (a stream).
The router passes them through untouched and wraps coroutines, futures
and async iterators into them, so callers always get one of two shapes
for asynchronous results.

Basic usage::

    from lyven.reactive import Single
    from lyven.reactive.operators import retry, timeout

    @get("/users/{id}")
    def show(self, id: int) -> Single[User]:
        return Single.from_supplier(lambda: self.users.load(id)).pipe(timeout(2), retry(1))
"""

from lyven.reactive.multi import Multi
from lyven.reactive.single import Single

__all__ = [
    "Multi",
    "Single",
]
