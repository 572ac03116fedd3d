"""Route table — discovery, matching, and dispatch.

Routes are discovered once, when the router is built: every structural
component registered in the container is instantiated and its handler
methods are compiled in definition order (base classes first). After
that the table is read-only and lookups take no locks.

Matching is a linear scan of the verb's routes in discovery order; the
first full match wins, so ``/users`` declared before ``/users/{id}``
handles ``/users`` and the template handles ``/users/7``.
"""

import concurrent.futures
import inspect
import logging
from collections.abc import Sequence
from types import MappingProxyType
from typing import Any

from lyven.context import RequestContext, context_var
from lyven.di.container import Container
from lyven.errors import RouteExecutionError, RouteNotFoundError
from lyven.markers import route_specs
from lyven.reactive import Multi, Single
from lyven.routing.binding import analyze_handler, bind_arguments
from lyven.routing.codec import BodyCodec, JsonCodec
from lyven.routing.route import Route

logger = logging.getLogger("lyven.routing")


def normalize_result(result: Any) -> Any:
    """Wrap asynchronous handler results into ``Single`` or ``Multi``.

    ``Single`` and ``Multi`` pass through. Awaitables and
    ``concurrent.futures.Future`` become ``Single``; async iterators
    become ``Multi``. Anything else is returned unchanged.
    """
    if isinstance(result, (Single, Multi)):
        return result
    if isinstance(result, concurrent.futures.Future):
        return Single.from_future(result)
    if inspect.isawaitable(result):
        return Single.from_awaitable(result)
    if hasattr(result, "__aiter__"):
        return Multi.from_async_iterable(result)
    return result


def _handlers_of(cls: type) -> list[tuple[str, Any]]:
    """Plain functions carrying route markers, base classes first."""
    found: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        for name, attr in vars(klass).items():
            if inspect.isfunction(attr) and route_specs(attr):
                # an override keeps the base position
                found[name] = attr
    return list(found.items())


class Router:
    """Discovers, matches, and dispatches routes.

    Args:
        container: Supplies component instances; routes are discovered
            from its registered structural components.
        codec: Decodes ``Body``-marked parameters (JSON by default).
        strict_binding: Raise ``UnbindableParameterError`` for handler
            parameters with no binding source instead of passing their
            default (or ``None``).
    """

    __slots__ = ("_by_method", "_codec", "_container", "_routes", "_strict_binding")

    def __init__(
        self,
        container: Container,
        *,
        codec: BodyCodec | None = None,
        strict_binding: bool = False,
    ) -> None:
        self._container = container
        self._codec: BodyCodec = codec or JsonCodec()
        self._strict_binding = strict_binding
        self._routes: list[Route] = []
        self._by_method: dict[str, list[Route]] = {}
        self._discover()

    # -- Discovery --

    def _discover(self) -> None:
        for cls in self._container.registry.all_components():
            instance = self._container.get(cls)
            for _name, func in _handlers_of(cls):
                for spec in route_specs(func):
                    route = Route.compile(spec.method, spec.path, func, owner=instance)
                    self.add_route(route)
                    logger.debug("Registered route: %s", route.description)
        logger.info("Router initialized with %d routes", len(self._routes))

    def add_route(self, route: Route) -> None:
        self._routes.append(route)
        self._by_method.setdefault(route.method, []).append(route)

    def clear_routes(self) -> None:
        self._routes.clear()
        self._by_method.clear()

    # -- Lookup --

    def find_route(self, path: str, method: str) -> Route | None:
        """Return the first route matching *path* for *method*, or ``None``."""
        for route in self._by_method.get(method.upper(), ()):
            if route.pattern.fullmatch(path) is not None:
                return route
        return None

    def has_route(self, path: str, method: str) -> bool:
        return self.find_route(path, method) is not None

    def all_routes(self) -> Sequence[Route]:
        return tuple(self._routes)

    def routes_by_method(self) -> MappingProxyType[str, tuple[Route, ...]]:
        return MappingProxyType({m: tuple(rs) for m, rs in self._by_method.items()})

    def route_stats(self) -> dict[str, Any]:
        return {
            "total_routes": len(self._routes),
            "routes_by_method": {m: len(rs) for m, rs in self._by_method.items()},
        }

    # -- Dispatch --

    def execute_route(self, path: str, method: str, context: RequestContext) -> Any:
        """Match, bind, and invoke; return the normalized handler result.

        Raises ``RouteNotFoundError`` when nothing matches, and
        ``RouteExecutionError`` (with the original exception as
        ``__cause__``) when binding or invocation fails.
        """
        route = self.find_route(path, method)
        if route is None:
            raise RouteNotFoundError(method.upper(), path)

        token = context_var.set(context)
        try:
            params = analyze_handler(route.handler, skip_first=route.owner is not None)
            args, kwargs = bind_arguments(
                params,
                context,
                route.extract_path_variables(path),
                self._codec,
                strict=self._strict_binding,
            )
            result = route.invoke(args, kwargs)
        except Exception as exc:
            raise RouteExecutionError(route.description, exc) from exc
        finally:
            context_var.reset(token)

        return normalize_result(result)

    def __len__(self) -> int:
        return len(self._routes)
