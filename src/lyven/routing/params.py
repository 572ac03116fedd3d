"""Path and query parameter conversion.

Built-in converters from captured strings to handler parameter types.
Anything not listed here is rejected with ``TypeConversionError``.
"""

import inspect
import re
from collections.abc import Callable
from decimal import Decimal
from typing import Any, NewType

from lyven._internal.annotations import bare_type
from lyven.errors import TypeConversionError

Char = NewType("Char", str)
"""A single character. Annotate a parameter with ``Char`` to require one."""

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})

# optional sign and ASCII digits only; int() and float() accept more
_INT = re.compile(r"[+-]?[0-9]+")
_NUMBER = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def _to_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    msg = "expected one of true/false, 1/0, yes/no, on/off"
    raise ValueError(msg)


def _to_char(value: str) -> str:
    if len(value) != 1:
        msg = f"expected a single character, got {len(value)}"
        raise ValueError(msg)
    return Char(value)


def _to_int(value: str) -> int:
    if _INT.fullmatch(value) is None:
        msg = "not an integer"
        raise ValueError(msg)
    return int(value)


def _to_float(value: str) -> float:
    if _NUMBER.fullmatch(value) is None:
        msg = "not a number"
        raise ValueError(msg)
    return float(value)


def _to_decimal(value: str) -> Decimal:
    if _NUMBER.fullmatch(value) is None:
        msg = "not a decimal number"
        raise ValueError(msg)
    return Decimal(value)


# target type -> converter; converters raise ValueError on malformed input
CONVERTERS: dict[Any, Callable[[str], Any]] = {
    str: str,
    int: _to_int,
    float: _to_float,
    Decimal: _to_decimal,
    bool: _to_bool,
    Char: _to_char,
}


def convert_param(value: str, annotation: Any) -> Any:
    """Convert a captured string to the type named by *annotation*.

    ``Annotated`` metadata and ``Optional`` are unwrapped first. Missing
    or ``Any`` annotations pass the string through.

    Raises ``TypeConversionError`` for unsupported targets and for text
    the converter rejects.
    """
    target = bare_type(annotation)
    if target is inspect.Parameter.empty or target is Any:
        return value

    converter = CONVERTERS.get(target)
    if converter is None:
        raise TypeConversionError(value, target, "type conversion not supported")

    try:
        return converter(value)
    except (ValueError, ArithmeticError) as exc:
        raise TypeConversionError(value, target, str(exc)) from exc
