"""Lyven exception hierarchy.

Shared across the container, resolver, router, and dispatcher so every
module raises and catches the same types.
"""

from typing import Any


def _type_name(obj: Any) -> str:
    """Readable name for a type or annotation in error messages."""
    if isinstance(obj, type):
        if obj.__module__ == "builtins":
            return obj.__qualname__
        return f"{obj.__module__}.{obj.__qualname__}"
    return getattr(obj, "__name__", None) or repr(obj)


class LyvenError(Exception):
    """Base for all lyven-specific errors."""


class ConfigurationError(LyvenError):
    """Raised when application setup is invalid.

    Typically raised at startup: malformed route templates, modules that
    cannot be imported during auto-configuration.
    """


# -- Dependency injection --


class DependencyResolutionError(LyvenError):
    """A constructor parameter type cannot be obtained or auto-registered."""

    def __init__(self, dependency: Any, reason: str) -> None:
        self.dependency = dependency
        self.reason = reason
        super().__init__(
            f"Cannot resolve dependency {_type_name(dependency)}: {reason}. "
            "Make sure it is registered or decorated with @component/@injectable."
        )


class CircularDependencyDetected(LyvenError):  # noqa: N818 - named for the outcome it reports
    """The constructor dependency graph of a type loops back on itself.

    ``path`` holds the types in visitation order, ending with the type
    that closed the loop.
    """

    def __init__(self, path: tuple[Any, ...]) -> None:
        self.path = path
        chain = " -> ".join(getattr(t, "__qualname__", repr(t)) for t in path)
        super().__init__(f"Circular dependency detected: {chain}")


class AmbiguousConstructorError(LyvenError):
    """Several constructors qualify and none is marked with ``@inject``.

    Only raised when strict constructor selection is enabled.
    """

    def __init__(self, cls: type, candidates: tuple[str, ...]) -> None:
        self.cls = cls
        self.candidates = candidates
        super().__init__(
            f"Ambiguous constructor for {_type_name(cls)}: "
            f"{', '.join(candidates)}. Mark one with @inject."
        )


class InstantiationError(LyvenError):
    """Selecting or invoking a constructor failed."""

    def __init__(self, cls: Any, cause: BaseException) -> None:
        self.cls = cls
        self.cause = cause
        super().__init__(f"Failed to create instance of {_type_name(cls)}: {cause}")


# -- Routing --


class RouteNotFoundError(LyvenError):
    """No route matches the request path and method."""

    def __init__(self, method: str, path: str) -> None:
        self.method = method
        self.path = path
        super().__init__(f"No route found for {method} {path}")


class RouteExecutionError(LyvenError):
    """Argument binding or handler invocation failed.

    ``description`` is the route description (``GET /users -> UserController.list``),
    ``cause`` the underlying exception.
    """

    def __init__(self, description: str, cause: BaseException) -> None:
        self.description = description
        self.cause = cause
        super().__init__(f"Failed to execute route: {description}: {cause}")


class TypeConversionError(LyvenError):
    """A path or query value cannot be coerced to the parameter type."""

    def __init__(self, value: str, target: Any, detail: str = "") -> None:
        self.value = value
        self.target = target
        msg = f"Cannot convert {value!r} to {_type_name(target)}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class BodyParseError(LyvenError):
    """The request body cannot be decoded into the declared type."""

    def __init__(self, target: Any, detail: str) -> None:
        self.target = target
        self.detail = detail
        super().__init__(f"Failed to parse body to {_type_name(target)}: {detail}")


class UnbindableParameterError(LyvenError):
    """No binding source exists for a handler parameter (strict binding only)."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Parameter {name!r} has no path variable, query parameter, "
            "body marker, or RequestContext annotation to bind from"
        )
