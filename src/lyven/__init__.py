"""Lyven — reflective dependency injection and declarative HTTP routing.

Mark classes, declare routes on their methods, and let the container
build the object graph::

    from lyven import App, component, get, injectable

    @injectable
    class UserService:
        def find_all(self) -> list[str]:
            return ["ada", "grace"]

    @component
    class UserController:
        def __init__(self, users: UserService) -> None:
            self.users = users

        @get("/users")
        def list_users(self) -> list[str]:
            return self.users.find_all()

    app = App().register(UserController)
    app.handle("GET", "/users")   # ['ada', 'grace']
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "Body",
    "ConfigurationError",
    "Container",
    "LyvenError",
    "Multi",
    "PathParam",
    "Properties",
    "QueryParam",
    "RequestContext",
    "RouteExecutionError",
    "RouteNotFoundError",
    "Router",
    "Single",
    "component",
    "constructor",
    "delete",
    "get",
    "get_context",
    "inject",
    "injectable",
    "patch",
    "post",
    "put",
    "route",
]

_MARKERS = (
    "Body",
    "PathParam",
    "QueryParam",
    "component",
    "constructor",
    "delete",
    "get",
    "inject",
    "injectable",
    "patch",
    "post",
    "put",
    "route",
)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import lyven`` fast while providing a clean top-level API.
    """
    if name == "App":
        from lyven.app import App

        return App

    if name == "AppConfig":
        from lyven.config import AppConfig

        return AppConfig

    if name == "Properties":
        from lyven.properties import Properties

        return Properties

    if name == "Container":
        from lyven.di.container import Container

        return Container

    if name == "Router":
        from lyven.routing.router import Router

        return Router

    if name in _MARKERS:
        from lyven import markers as _markers

        return getattr(_markers, name)

    if name in ("RequestContext", "get_context"):
        from lyven import context as _ctx

        return getattr(_ctx, name)

    if name in ("Single", "Multi"):
        from lyven import reactive as _reactive

        return getattr(_reactive, name)

    if name in ("ConfigurationError", "LyvenError", "RouteExecutionError", "RouteNotFoundError"):
        from lyven import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
