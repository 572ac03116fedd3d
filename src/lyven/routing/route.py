r"""Compiled route definitions.

A route pairs an HTTP verb and a path template with the handler method of
a component instance. Templates use ``{name}`` placeholders, each matching
one path segment::

    "/users"                       -> \A/users\Z
    "/users/{id}/posts/{postId}"   -> \A/users/([^/]+)/posts/([^/]+)\Z
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from lyven._internal.types import Handler
from lyven.errors import ConfigurationError

_PLACEHOLDER = re.compile(r"\{([^{}]*)\}")
_SEGMENT = "([^/]+)"


def compile_path(path: str) -> tuple[re.Pattern[str], tuple[str, ...]]:
    """Compile a path template into an anchored pattern and its variable names.

    Literal text is escaped. Raises ``ConfigurationError`` for unbalanced
    braces, empty or duplicate names, names that are not identifiers, and
    Flask-style ``<name>`` placeholders.
    """
    if "<" in path and ">" in path:
        msg = (
            f"Route path {path!r} uses <param> syntax. "
            "Lyven uses {param} for path variables."
        )
        raise ConfigurationError(msg)

    parts: list[str] = []
    names: list[str] = []
    cursor = 0
    for match in _PLACEHOLDER.finditer(path):
        literal = path[cursor : match.start()]
        _check_literal(path, literal)
        name = match.group(1)
        if not name.isidentifier():
            msg = f"Route path {path!r} has an invalid variable name {name!r}"
            raise ConfigurationError(msg)
        if name in names:
            msg = f"Route path {path!r} declares {{{name}}} more than once"
            raise ConfigurationError(msg)
        names.append(name)
        parts.append(re.escape(literal))
        parts.append(_SEGMENT)
        cursor = match.end()

    tail = path[cursor:]
    _check_literal(path, tail)
    parts.append(re.escape(tail))
    return re.compile(r"\A" + "".join(parts) + r"\Z"), tuple(names)


def _check_literal(path: str, literal: str) -> None:
    if "{" in literal or "}" in literal:
        msg = f"Route path {path!r} has unbalanced braces"
        raise ConfigurationError(msg)


def normalize_path(path: str, handler_name: str) -> str:
    """Default an empty template to ``/<handler name>`` and ensure a leading slash."""
    if not path:
        return "/" + handler_name.lower()
    if not path.startswith("/"):
        return "/" + path
    return path


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    Created while the router scans components. ``owner`` is the component
    instance the handler is invoked on; ``None`` for plain functions added
    with ``Router.add_route``.
    """

    method: str
    path: str
    handler: Handler
    owner: Any
    pattern: re.Pattern[str]
    param_names: tuple[str, ...]

    @classmethod
    def compile(
        cls,
        method: str,
        path: str,
        handler: Handler,
        owner: Any = None,
    ) -> Route:
        """Normalize and compile *path* and build the route."""
        path = normalize_path(path, handler.__name__)
        pattern, names = compile_path(path)
        return cls(
            method=method.upper(),
            path=path,
            handler=handler,
            owner=owner,
            pattern=pattern,
            param_names=names,
        )

    @property
    def has_path_parameters(self) -> bool:
        return bool(self.param_names)

    @property
    def parameter_count(self) -> int:
        return len(self.param_names)

    @property
    def handler_name(self) -> str:
        if self.owner is not None:
            return f"{type(self.owner).__name__}.{self.handler.__name__}"
        return self.handler.__qualname__

    @property
    def description(self) -> str:
        """``GET /users -> UserController.list_users``"""
        return f"{self.method} {self.path} -> {self.handler_name}"

    def matches(self, path: str, method: str) -> bool:
        return self.method == method.upper() and self.pattern.fullmatch(path) is not None

    def extract_path_variables(self, path: str) -> dict[str, str]:
        """Map the i-th captured group to the i-th template name.

        Returns an empty dict when *path* does not match.
        """
        match = self.pattern.fullmatch(path)
        if match is None:
            return {}
        return dict(zip(self.param_names, match.groups(), strict=True))

    def invoke(self, args: Sequence[Any], kwargs: Mapping[str, Any]) -> Any:
        if self.owner is not None:
            return self.handler(self.owner, *args, **kwargs)
        return self.handler(*args, **kwargs)

    def __str__(self) -> str:
        return self.description
