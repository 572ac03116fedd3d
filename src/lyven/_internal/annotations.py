"""Annotation helpers — peel ``Annotated`` and ``Optional`` wrappers.

Constructor and handler analysis both need the bare type behind an
annotation like ``Annotated[int | None, QueryParam("page")]``. The
unwrapping rules live here so the resolver and the binder agree.
"""

import types
import typing
from typing import Annotated, Any, Union

_UNION_TYPES: tuple[Any, ...] = (Union, types.UnionType)


def split_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Return ``(base, metadata)`` for an ``Annotated`` type.

    Non-annotated types come back unchanged with empty metadata.
    """
    if typing.get_origin(annotation) is Annotated:
        base, *metadata = typing.get_args(annotation)
        return base, tuple(metadata)
    return annotation, ()


def unwrap_optional(annotation: Any) -> Any:
    """Return ``X`` for ``X | None`` / ``Optional[X]``, else the annotation.

    Unions of several non-None members are returned unchanged.
    """
    if typing.get_origin(annotation) in _UNION_TYPES:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def bare_type(annotation: Any) -> Any:
    """Strip ``Annotated`` metadata, then ``Optional``."""
    base, _ = split_annotated(annotation)
    return unwrap_optional(base)
