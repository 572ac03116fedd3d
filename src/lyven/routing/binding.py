"""Handler parameter binding.

Each handler parameter is bound from the first source that applies:

1. ``Annotated[T, Body]`` → the request body (verbatim for ``str``,
   encoded for ``bytes``, decoded by the codec otherwise)
2. a path variable with the parameter name (or ``PathParam`` alias)
3. a query parameter with the parameter name (or ``QueryParam`` alias)
4. an annotation of ``RequestContext`` → the context itself

``PathParam`` and ``QueryParam`` restrict a parameter to that source.
A parameter no source applies to is ``Unbindable``; ``bind_arguments``
falls back to its default, then to ``None`` or, in strict mode, an error.
"""

import functools
import inspect
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from lyven._internal.annotations import bare_type, split_annotated
from lyven._internal.types import Handler
from lyven.context import RequestContext
from lyven.errors import UnbindableParameterError
from lyven.markers import Body, PathParam, QueryParam
from lyven.routing.codec import BodyCodec
from lyven.routing.params import convert_param

logger = logging.getLogger("lyven.routing")

Source = Literal["auto", "body", "path", "query"]

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True, slots=True)
class HandlerParam:
    """A handler parameter and where its value may come from."""

    name: str
    annotation: Any
    kind: Any
    default: Any = inspect.Parameter.empty
    source: Source = "auto"
    alias: str | None = None

    @property
    def key(self) -> str:
        """Name to look up in path variables or query parameters."""
        return self.alias or self.name

    @property
    def bare(self) -> Any:
        return bare_type(self.annotation)

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty


@dataclass(frozen=True, slots=True)
class Resolved:
    value: Any


@dataclass(frozen=True, slots=True)
class Unbindable:
    param: HandlerParam


Binding = Resolved | Unbindable


def _source_of(metadata: tuple[Any, ...]) -> tuple[Source, str | None]:
    for item in metadata:
        if item is Body:
            return "body", None
        if isinstance(item, PathParam):
            return "path", item.name
        if isinstance(item, QueryParam):
            return "query", item.name
    return "auto", None


@functools.cache
def analyze_handler(func: Handler, *, skip_first: bool = False) -> tuple[HandlerParam, ...]:
    """Describe the bindable parameters of *func*.

    ``skip_first`` drops the receiver of an unbound method. Variadic
    parameters are ignored.
    """
    sig = inspect.signature(func, eval_str=True)
    params = list(sig.parameters.values())
    if skip_first:
        params = params[1:]

    found: list[HandlerParam] = []
    for p in params:
        if p.kind in _VARIADIC:
            continue
        _, metadata = split_annotated(p.annotation)
        source, alias = _source_of(metadata)
        found.append(
            HandlerParam(
                name=p.name,
                annotation=p.annotation,
                kind=p.kind,
                default=p.default,
                source=source,
                alias=alias,
            )
        )
    return tuple(found)


def _bind_body(param: HandlerParam, context: RequestContext, codec: BodyCodec) -> Any:
    body = context.body
    if not body:
        return None
    target = param.bare
    if target is inspect.Parameter.empty or target is str:
        return body
    if target is bytes:
        return body.encode()
    return codec.decode(body, target)


def bind_parameter(
    param: HandlerParam,
    context: RequestContext,
    path_variables: Mapping[str, str],
    codec: BodyCodec,
) -> Binding:
    """Bind one parameter, or report it as ``Unbindable``.

    Raises ``TypeConversionError`` and ``BodyParseError`` for values that
    are present but cannot be converted.
    """
    if param.source == "body":
        return Resolved(_bind_body(param, context, codec))

    key = param.key
    if param.source in ("auto", "path") and key in path_variables:
        return Resolved(convert_param(path_variables[key], param.annotation))
    if param.source in ("auto", "query") and key in context.query_params:
        return Resolved(convert_param(context.query_params[key], param.annotation))

    if param.source == "auto" and param.bare is RequestContext:
        return Resolved(context)

    return Unbindable(param)


def bind_arguments(
    params: tuple[HandlerParam, ...],
    context: RequestContext,
    path_variables: Mapping[str, str],
    codec: BodyCodec,
    *,
    strict: bool = False,
) -> tuple[list[Any], dict[str, Any]]:
    """Bind every parameter and split the values into ``(args, kwargs)``.

    An unbindable parameter receives its default. Without one it
    receives ``None``, or raises ``UnbindableParameterError`` in strict
    mode.
    """
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for param in params:
        outcome = bind_parameter(param, context, path_variables, codec)
        if isinstance(outcome, Resolved):
            value = outcome.value
        elif strict and not param.has_default:
            raise UnbindableParameterError(param.name)
        else:
            value = param.default if param.has_default else None
            logger.debug("No binding source for %r; using %r", param.name, value)

        if param.kind is inspect.Parameter.POSITIONAL_ONLY:
            args.append(value)
        else:
            kwargs[param.name] = value
    return args, kwargs
