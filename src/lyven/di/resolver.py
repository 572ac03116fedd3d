"""Dependency resolver — constructor arguments, cycles, dependency chains.

Resolution order for each constructor parameter type ``T``:

1. ``T`` is registered or bound in the container → ``container.get(T)``
2. ``T`` carries ``@component`` / ``@injectable`` → register, then get
3. the parameter declares a default → the default
4. otherwise → ``DependencyResolutionError``

Cycle analysis walks the same constructors the container would select,
following bindings, and reports one of three outcomes: ``NoCycle``,
``CycleFound`` or ``Unanalyzable``. A type whose constructor cannot be
introspected is not silently treated as acyclic.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from lyven._internal.annotations import bare_type
from lyven.di.constructors import Constructor, DependencyParam, select_constructor
from lyven.errors import DependencyResolutionError
from lyven.markers import component_meta

if TYPE_CHECKING:
    from lyven.di.container import Container

logger = logging.getLogger("lyven.di")

_NOT_RESOLVABLE = "not registered and not auto-registrable"


@dataclass(frozen=True, slots=True)
class NoCycle:
    """Traversal completed without revisiting a type on the active path."""


@dataclass(frozen=True, slots=True)
class CycleFound:
    """``path`` ends with the type that reappeared on the active path."""

    path: tuple[type, ...]


@dataclass(frozen=True, slots=True)
class Unanalyzable:
    """Constructor or parameter introspection failed for ``cls``."""

    cls: Any
    reason: str


CycleCheck = NoCycle | CycleFound | Unanalyzable


def is_auto_registrable(cls: Any) -> bool:
    """True when *cls* carries a component or injectable marker."""
    return component_meta(cls) is not None


class DependencyResolver:
    """Resolves constructor dependencies against a container.

    Stateless apart from the container reference; safe to share between
    threads.
    """

    __slots__ = ("_container",)

    def __init__(self, container: "Container") -> None:
        self._container = container

    def resolve_dependencies(self, constructor: Constructor) -> list[Any]:
        """Return one resolved value per constructor parameter, in order."""
        return [self._resolve(param) for param in constructor.parameters]

    def _resolve(self, param: DependencyParam) -> Any:
        if param.annotation is inspect.Parameter.empty:
            if param.has_default:
                return param.default
            raise DependencyResolutionError(
                param.name, "parameter has no type annotation and no default"
            )

        dependency = bare_type(param.annotation)
        container = self._container

        if container.is_registered(dependency):
            return container.get(dependency)

        if is_auto_registrable(dependency):
            logger.debug("Auto-registering %s", dependency.__qualname__)
            container.register(dependency)
            return container.get(dependency)

        if param.has_default:
            return param.default

        raise DependencyResolutionError(dependency, _NOT_RESOLVABLE)

    # -- Graph analysis --

    def _constructor_for(self, cls: Any) -> Constructor:
        return select_constructor(cls, strict=self._container.strict)

    def _dependencies_of(self, cls: Any) -> list[Any]:
        """Bare dependency types of *cls* after following its binding."""
        target = self._container.binding_for(cls)
        if not isinstance(target, type):
            msg = f"{target!r} is not a class"
            raise TypeError(msg)
        constructor = self._constructor_for(target)
        return [
            bare_type(p.annotation)
            for p in constructor.parameters
            if p.annotation is not inspect.Parameter.empty
            and not self._container.has_instance(bare_type(p.annotation))
        ]

    def find_cycle(self, root: Any) -> CycleCheck:
        """Depth-first search for a dependency cycle reachable from *root*."""
        return self._visit(root, ())

    def _visit(self, cls: Any, path: tuple[Any, ...]) -> CycleCheck:
        if cls in path:
            return CycleFound((*path, cls))

        try:
            dependencies = self._dependencies_of(cls)
        except Exception as exc:
            return Unanalyzable(cls, f"{type(exc).__name__}: {exc}")

        active = (*path, cls)
        first_failure: Unanalyzable | None = None
        for dependency in dependencies:
            if not isinstance(dependency, type):
                continue
            outcome = self._visit(dependency, active)
            if isinstance(outcome, CycleFound):
                return outcome
            if isinstance(outcome, Unanalyzable) and first_failure is None:
                first_failure = outcome
        return first_failure or NoCycle()

    def has_circular_dependency(self, root: Any) -> bool:
        """True only when a cycle was found; analysis failures are not cycles."""
        return isinstance(self.find_cycle(root), CycleFound)

    def dependency_chain(self, root: Any) -> list[Any]:
        """Types reachable from *root*, depth-first, each listed once."""
        chain: list[Any] = []
        self._collect(root, chain)
        return chain

    def _collect(self, cls: Any, chain: list[Any]) -> None:
        if cls in chain:
            return
        chain.append(cls)
        try:
            dependencies = self._dependencies_of(cls)
        except Exception as exc:
            logger.debug("Stopping chain at %r: %s", cls, exc)
            return
        for dependency in dependencies:
            if isinstance(dependency, type):
                self._collect(dependency, chain)
