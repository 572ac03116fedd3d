"""Service registry — descriptors of registered components and services.

Thread safety:
    Membership maps are copy-on-write. Writers build a new dict under a
    Lock and swap the reference; readers grab the current reference and
    iterate an immutable snapshot, so they never observe a partially
    added entry and never need the lock.
"""

import logging
import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from lyven.di.constructors import Selected, choose_constructor
from lyven.markers import ComponentKind, component_meta

logger = logging.getLogger("lyven.di")


@dataclass(frozen=True, slots=True)
class ComponentDescriptor:
    """Registered metadata about a constructible type. Immutable."""

    cls: type
    kind: ComponentKind
    dependencies: tuple[Any, ...] = ()
    singleton: bool = True
    selector: str = ""
    providers: tuple[type, ...] = ()

    @property
    def token(self) -> str:
        """Dotted name identifying the type in logs and summaries."""
        return f"{self.cls.__module__}.{self.cls.__qualname__}"


def _declared_dependencies(cls: type) -> tuple[Any, ...]:
    try:
        choice = choose_constructor(cls)
        ctor = choice.constructor if isinstance(choice, Selected) else choice.fallback
        return ctor.dependency_types
    except (NameError, TypeError, ValueError) as exc:
        # Forward references may only resolve once the whole module has
        # loaded; the resolver re-analyzes at construction time.
        logger.debug("Dependencies of %s not analyzable yet: %s", cls.__qualname__, exc)
        return ()


class ServiceRegistry:
    """Registered components (``@component``) and services (``@injectable``)."""

    __slots__ = ("_all", "_components", "_injectables", "_lock")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._all: MappingProxyType[type, ComponentDescriptor] = MappingProxyType({})
        self._components: MappingProxyType[type, ComponentDescriptor] = MappingProxyType({})
        self._injectables: MappingProxyType[type, ComponentDescriptor] = MappingProxyType({})

    def register(self, cls: type) -> ComponentDescriptor | None:
        """Classify *cls* by its marker and record a descriptor.

        Returns the descriptor, or ``None`` when *cls* carries no marker.
        Registering the same type twice keeps the first descriptor.
        """
        meta = component_meta(cls)
        if meta is None:
            logger.debug("Ignoring unmarked type %s", getattr(cls, "__qualname__", cls))
            return None

        existing = self._all.get(cls)
        if existing is not None:
            return existing

        descriptor = ComponentDescriptor(
            cls=cls,
            kind=meta.kind,
            dependencies=_declared_dependencies(cls),
            singleton=meta.singleton,
            selector=meta.selector,
            providers=meta.providers,
        )

        with self._lock:
            if cls in self._all:
                return self._all[cls]
            self._all = MappingProxyType({**self._all, cls: descriptor})
            if meta.kind is ComponentKind.COMPONENT:
                self._components = MappingProxyType({**self._components, cls: descriptor})
            else:
                self._injectables = MappingProxyType({**self._injectables, cls: descriptor})

        logger.debug("Registered %s %s", meta.kind.value, descriptor.token)
        return descriptor

    # -- Membership --

    def is_registered(self, cls: Any) -> bool:
        return cls in self._all

    def is_component(self, cls: Any) -> bool:
        return cls in self._components

    def is_injectable(self, cls: Any) -> bool:
        return cls in self._injectables

    def descriptor(self, cls: Any) -> ComponentDescriptor | None:
        return self._all.get(cls)

    # -- Declared metadata --

    def get_selector(self, cls: Any) -> str | None:
        """Return the component selector.

        Empty selectors default to the lower-cased class name. Returns
        ``None`` when *cls* is not a registered component.
        """
        descriptor = self._components.get(cls)
        if descriptor is None:
            return None
        return descriptor.selector or cls.__name__.lower()

    def get_providers(self, cls: Any) -> tuple[type, ...]:
        descriptor = self._components.get(cls)
        if descriptor is None:
            return ()
        return descriptor.providers

    # -- Snapshots (registration order) --

    def all_registered(self) -> tuple[type, ...]:
        return tuple(self._all)

    def all_components(self) -> tuple[type, ...]:
        return tuple(self._components)

    def all_injectables(self) -> tuple[type, ...]:
        return tuple(self._injectables)

    @property
    def registration_count(self) -> int:
        return len(self._all)

    def __len__(self) -> int:
        return len(self._all)

    def __contains__(self, cls: object) -> bool:
        return cls in self._all

    def clear(self) -> None:
        """Drop every registration."""
        with self._lock:
            empty: MappingProxyType[type, ComponentDescriptor] = MappingProxyType({})
            self._all = empty
            self._components = empty
            self._injectables = empty
