"""Request body codecs.

A codec turns the raw request body into the type a ``Body``-marked
parameter declares. The router uses ``JsonCodec`` unless given another
object implementing ``BodyCodec``.

``JsonCodec`` decoding rules by target type:

- ``Any``, ``dict``, ``list`` (or their generic forms): the parsed JSON value
- dataclass: fields populated from a JSON object; nested dataclasses
  and lists of dataclasses are decoded recursively; unknown keys are
  ignored; missing fields use their defaults
- ``int``, ``float``, ``str``, ``bool``: the parsed value, type-checked
"""

import dataclasses
import json
import typing
from typing import Any, Protocol, runtime_checkable

from lyven._internal.annotations import unwrap_optional
from lyven.errors import BodyParseError


@runtime_checkable
class BodyCodec(Protocol):
    """Decode a request body into an instance of *target*."""

    def decode(self, body: str, target: Any) -> Any: ...


class JsonCodec:
    """JSON body codec backed by the standard library ``json`` module."""

    __slots__ = ()

    def decode(self, body: str, target: Any) -> Any:
        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise BodyParseError(target, f"malformed JSON: {exc.msg}") from exc
        return _coerce(data, target, target)


def _coerce(value: Any, target: Any, root: Any) -> Any:
    target = unwrap_optional(target)
    if value is None:
        return None
    if target is Any:
        return value

    if isinstance(target, type) and dataclasses.is_dataclass(target):
        if not isinstance(value, dict):
            msg = f"expected a JSON object for {target.__name__}, got {type(value).__name__}"
            raise BodyParseError(root, msg)
        return _decode_dataclass(target, value, root)

    origin = typing.get_origin(target) or target
    if origin is list:
        if not isinstance(value, list):
            raise BodyParseError(root, f"expected a JSON array, got {type(value).__name__}")
        args = typing.get_args(target)
        item_type = args[0] if args else Any
        return [_coerce(item, item_type, root) for item in value]
    if origin is dict:
        if not isinstance(value, dict):
            raise BodyParseError(root, f"expected a JSON object, got {type(value).__name__}")
        return value

    if target is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if isinstance(target, type):
        # bool is an int subclass; keep JSON true/false out of int fields
        if target is int and isinstance(value, bool):
            raise BodyParseError(root, "expected int, got bool")
        if not isinstance(value, target):
            msg = f"expected {target.__name__}, got {type(value).__name__}"
            raise BodyParseError(root, msg)
    return value


def _decode_dataclass(cls: type, data: dict[str, Any], root: Any) -> Any:
    hints = typing.get_type_hints(cls)
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        if f.name not in data:
            if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                msg = f"missing required field {f.name!r}"
                raise BodyParseError(root, msg)
            continue
        kwargs[f.name] = _coerce(data[f.name], hints.get(f.name, Any), root)
    return cls(**kwargs)
