"""Dependency injection container.

Owns the singleton cache and interface bindings, and orchestrates the
service registry and dependency resolver to build instances on demand.

Usage::

    container = Container()
    container.register(UserService)
    container.register(Repository, SqlRepository)

    controller = container.get(UserController)

Thread safety:
    Bindings are installed during single-threaded setup and read-only
    afterwards. Singleton creation is an atomic compute-if-absent: a
    per-type Lock plus a double-checked read guarantees at most one
    instance per type even when several threads race on the first
    ``get()``. Locks are taken in dependency order, and cyclic graphs
    are rejected before construction, so they cannot deadlock.
"""

import logging
import threading
from contextvars import ContextVar
from typing import Any, TypeVar, cast

from lyven.di.constructors import select_constructor
from lyven.di.registry import ComponentDescriptor, ServiceRegistry
from lyven.di.resolver import CycleFound, DependencyResolver, Unanalyzable
from lyven.errors import CircularDependencyDetected, InstantiationError, LyvenError
from lyven.markers import component_meta

T = TypeVar("T")

logger = logging.getLogger("lyven.di")

_MISSING: Any = object()

# Types under construction in the current thread/task, outermost first.
_constructing: ContextVar[tuple[type, ...]] = ContextVar("lyven_constructing", default=())


class Container:
    """Registry + resolver + singleton cache.

    Args:
        strict: Raise ``AmbiguousConstructorError`` instead of falling
            back to the first declared constructor.
    """

    __slots__ = (
        "_bindings",
        "_creation_locks",
        "_instances",
        "_lock",
        "_registry",
        "_resolver",
        "_singletons",
        "_strict",
    )

    def __init__(self, *, strict: bool = False) -> None:
        self._registry = ServiceRegistry()
        self._resolver = DependencyResolver(self)
        self._bindings: dict[type, type] = {}
        self._singletons: dict[type, Any] = {}
        self._instances: dict[type, Any] = {}
        self._creation_locks: dict[type, threading.RLock] = {}
        self._lock = threading.Lock()
        self._strict = strict

    # -- Registration --

    def register(self, cls: type, implementation: type | None = None) -> ComponentDescriptor | None:
        """Register a marked class, or bind *cls* to *implementation*.

        ``register(Impl)`` classifies ``Impl`` by its marker (unmarked
        classes are ignored). ``register(Interface, Impl)`` also installs
        a binding so ``get(Interface)`` builds ``Impl``. Re-binding an
        interface replaces the previous binding.
        """
        if implementation is None:
            return self._registry.register(cls)

        previous = self._bindings.get(cls)
        if previous is not None and previous is not implementation:
            logger.debug(
                "Rebinding %s: %s -> %s",
                cls.__qualname__,
                previous.__qualname__,
                implementation.__qualname__,
            )
        self._bindings[cls] = implementation
        return self._registry.register(implementation)

    def register_instance(self, cls: type, instance: Any) -> None:
        """Supply a ready-made instance for *cls*."""
        self._instances[cls] = instance

    # -- Queries --

    @property
    def registry(self) -> ServiceRegistry:
        return self._registry

    @property
    def resolver(self) -> DependencyResolver:
        return self._resolver

    @property
    def strict(self) -> bool:
        return self._strict

    def binding_for(self, cls: Any) -> Any:
        """Return the implementation bound to *cls* (one level), or *cls*."""
        return self._bindings.get(cls, cls)

    def has_instance(self, cls: Any) -> bool:
        return cls in self._instances

    def is_registered(self, cls: Any) -> bool:
        """True when registered directly, bound, or supplied as an instance."""
        return (
            self._registry.is_registered(cls)
            or cls in self._bindings
            or cls in self._instances
        )

    def is_singleton(self, cls: Any) -> bool:
        """Singleton unless the descriptor or marker declares ``singleton=False``."""
        descriptor = self._registry.descriptor(cls)
        if descriptor is not None:
            return descriptor.singleton
        meta = component_meta(cls)
        if meta is not None:
            return meta.singleton
        return True

    def has_circular_dependency(self, cls: Any) -> bool:
        return self._resolver.has_circular_dependency(cls)

    def dependency_chain(self, cls: Any) -> list[Any]:
        return self._resolver.dependency_chain(cls)

    # -- Resolution --

    def get(self, cls: type[T]) -> T:
        """Return an instance of *cls*, building it and its dependencies as needed."""
        if cls in self._instances:
            return cast(T, self._instances[cls])

        target = self.binding_for(cls)
        if target is not cls and target in self._instances:
            return cast(T, self._instances[target])

        stack = _constructing.get()
        if target in stack:
            raise CircularDependencyDetected((*stack, target))

        if not self.is_singleton(target):
            return cast(T, self._create(target))

        instance = self._singletons.get(target, _MISSING)
        if instance is not _MISSING:
            return cast(T, instance)

        with self._creation_lock(target):
            instance = self._singletons.get(target, _MISSING)
            if instance is _MISSING:
                instance = self._create(target)
                self._singletons[target] = instance
        return cast(T, instance)

    def _creation_lock(self, cls: type) -> threading.RLock:
        with self._lock:
            lock = self._creation_locks.get(cls)
            if lock is None:
                lock = threading.RLock()
                self._creation_locks[cls] = lock
            return lock

    def _create(self, cls: type) -> Any:
        """Select a constructor, resolve its arguments, and invoke it."""
        stack = _constructing.get()
        if not stack:
            outcome = self._resolver.find_cycle(cls)
            if isinstance(outcome, CycleFound):
                raise CircularDependencyDetected(outcome.path)
            if isinstance(outcome, Unanalyzable):
                logger.debug(
                    "Cycle check incomplete for %s at %r: %s",
                    cls.__qualname__,
                    outcome.cls,
                    outcome.reason,
                )

        token = _constructing.set((*stack, cls))
        try:
            try:
                constructor = select_constructor(cls, strict=self._strict)
            except LyvenError:
                raise
            except Exception as exc:
                raise InstantiationError(cls, exc) from exc

            values = self._resolver.resolve_dependencies(constructor)

            try:
                instance = constructor.invoke(values)
            except LyvenError:
                raise
            except Exception as exc:
                raise InstantiationError(cls, exc) from exc
        finally:
            _constructing.reset(token)

        logger.debug("Created %s via %s", cls.__qualname__, constructor)
        return instance

    # -- Lifecycle --

    def reset(self) -> None:
        """Empty the singleton cache. Supplied instances and registrations stay.

        Per-type creation locks survive, so a construction already in progress
        still excludes callers that arrive after the reset.
        """
        with self._lock:
            self._singletons.clear()
