"""Declarative markers — component, injection, and HTTP-intent metadata.

Decorators attach frozen metadata objects to classes and functions.
Nothing here performs registration; the container and router read the
metadata when types are registered or routes are discovered.

Usage::

    from typing import Annotated

    from lyven.markers import Body, component, get, injectable, post


    @injectable
    class UserService:
        def find_all(self) -> list[str]: ...


    @component(selector="user-controller")
    class UserController:
        def __init__(self, users: UserService) -> None:
            self.users = users

        @get("/users")
        def list_users(self) -> list[str]:
            return self.users.find_all()

        @post("/users")
        def create_user(self, data: Annotated[str, Body]) -> str: ...
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, overload

_COMPONENT_ATTR = "_lyven_component"
_ROUTES_ATTR = "_lyven_routes"
_INJECT_ATTR = "_lyven_inject"
_CONSTRUCTOR_ATTR = "_lyven_constructor"


class ComponentKind(Enum):
    """How a marked type is classified by the registry."""

    SERVICE = "service"
    COMPONENT = "structural-component"


@dataclass(frozen=True, slots=True)
class ComponentMeta:
    """Metadata carried by ``@component`` and ``@injectable``."""

    kind: ComponentKind
    selector: str = ""
    providers: tuple[type, ...] = ()
    singleton: bool = True
    template: str = ""


@dataclass(frozen=True, slots=True)
class RouteSpec:
    """HTTP intent attached to a handler method: verb and path template."""

    method: str
    path: str = ""


# -- Class markers --


def _mark_class(cls: type, meta: ComponentMeta) -> type:
    setattr(cls, _COMPONENT_ATTR, meta)
    return cls


@overload
def component(cls: type, /) -> type: ...
@overload
def component(
    *,
    selector: str = "",
    providers: tuple[type, ...] = (),
    singleton: bool = True,
    template: str = "",
) -> Callable[[type], type]: ...


def component(
    cls: type | None = None,
    /,
    *,
    selector: str = "",
    providers: tuple[type, ...] = (),
    singleton: bool = True,
    template: str = "",
) -> Any:
    """Mark a class as a structural component.

    Components are scanned for route handlers. Works bare (``@component``)
    or with arguments (``@component(selector="user-controller")``).
    """
    meta = ComponentMeta(
        kind=ComponentKind.COMPONENT,
        selector=selector,
        providers=tuple(providers),
        singleton=singleton,
        template=template,
    )
    if cls is not None:
        return _mark_class(cls, meta)
    return lambda target: _mark_class(target, meta)


@overload
def injectable(cls: type, /) -> type: ...
@overload
def injectable(*, singleton: bool = True) -> Callable[[type], type]: ...


def injectable(cls: type | None = None, /, *, singleton: bool = True) -> Any:
    """Mark a class as an injectable service."""
    meta = ComponentMeta(kind=ComponentKind.SERVICE, singleton=singleton)
    if cls is not None:
        return _mark_class(cls, meta)
    return lambda target: _mark_class(target, meta)


def component_meta(cls: Any) -> ComponentMeta | None:
    """Return the marker declared directly on *cls*.

    Markers are not inherited: a subclass of a component is unmarked
    until decorated itself.
    """
    if not isinstance(cls, type):
        return None
    return vars(cls).get(_COMPONENT_ATTR)


# -- Constructor markers --


def _underlying(func: Any) -> Any:
    if isinstance(func, (classmethod, staticmethod)):
        return func.__func__
    return func


def inject(func: Any) -> Any:
    """Mark ``__init__`` or an alternative constructor as the injection target."""
    setattr(_underlying(func), _INJECT_ATTR, True)
    return func


def constructor(func: Any) -> classmethod:
    """Declare an alternative constructor.

    The function becomes a classmethod; its parameters are resolved from
    the container when it is selected::

        @injectable
        class Mailer:
            def __init__(self, host: str, port: int) -> None: ...

            @constructor
            def from_settings(cls, settings: Settings) -> "Mailer":
                return cls(settings.host, settings.port)
    """
    setattr(_underlying(func), _CONSTRUCTOR_ATTR, True)
    if isinstance(func, classmethod):
        return func
    return classmethod(func)


def is_inject_marked(func: Any) -> bool:
    return bool(getattr(_underlying(func), _INJECT_ATTR, False))


def is_constructor_marked(func: Any) -> bool:
    return bool(getattr(_underlying(func), _CONSTRUCTOR_ATTR, False))


# -- HTTP intent --


def route(method: str, path: str = "") -> Callable[[Any], Any]:
    """Attach an HTTP verb and path template to a handler method.

    Decorators stack: each one adds a route for the same handler.
    """
    spec = RouteSpec(method=method.upper(), path=path)

    def decorator(func: Any) -> Any:
        target = _underlying(func)
        existing: tuple[RouteSpec, ...] = getattr(target, _ROUTES_ATTR, ())
        setattr(target, _ROUTES_ATTR, (*existing, spec))
        return func

    return decorator


def get(path: str = "") -> Callable[[Any], Any]:
    return route("GET", path)


def post(path: str = "") -> Callable[[Any], Any]:
    return route("POST", path)


def put(path: str = "") -> Callable[[Any], Any]:
    return route("PUT", path)


def delete(path: str = "") -> Callable[[Any], Any]:
    return route("DELETE", path)


def patch(path: str = "") -> Callable[[Any], Any]:
    return route("PATCH", path)


def route_specs(func: Any) -> tuple[RouteSpec, ...]:
    """Return the HTTP intents declared on *func*, in decoration order."""
    specs: tuple[RouteSpec, ...] = getattr(_underlying(func), _ROUTES_ATTR, ())
    # Decorators apply bottom-up; report them top-down as written.
    return tuple(reversed(specs))


# -- Parameter binding hints (typing.Annotated metadata) --


class _BodyMarker:
    """Bind the parameter from the request body."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "Body"


Body = _BodyMarker()
"""``Annotated[T, Body]`` — decode the request body into ``T``."""


@dataclass(frozen=True, slots=True)
class PathParam:
    """``Annotated[T, PathParam()]`` — bind only from a path variable.

    ``name`` overrides the variable name (defaults to the parameter name).
    """

    name: str | None = None


@dataclass(frozen=True, slots=True)
class QueryParam:
    """``Annotated[T, QueryParam("page_size")]`` — bind only from the query string."""

    name: str | None = None
