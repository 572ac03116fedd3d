"""Shared type aliases used across lyven modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Handler method of a component, stored unbound; the receiver is passed at dispatch
Handler: TypeAlias = Callable[..., Any]

# Class or bound classmethod that builds an instance
Factory: TypeAlias = Callable[..., Any]
