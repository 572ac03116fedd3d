"""Constructor discovery and selection.

A class declares its constructors in two ways: ``__init__`` (always
first), and classmethods marked with ``@constructor`` or ``@inject``, in
class-body order. Selection is deterministic:

a. exactly one constructor → use it
b. else exactly one marked with ``@inject`` → use it
c. else a constructor with no required parameters → use it
d. else the first declared constructor, reported as ``Ambiguous``

Rule (d) is a fallback, not a decision: ``choose_constructor`` returns
it as a tagged outcome so callers pick strict or permissive handling.
"""

import inspect
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

from lyven._internal.types import Factory
from lyven.errors import AmbiguousConstructorError
from lyven.markers import is_constructor_marked, is_inject_marked

logger = logging.getLogger("lyven.di")

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True, slots=True)
class DependencyParam:
    """One injectable constructor parameter."""

    name: str
    annotation: Any
    kind: Any
    default: Any = inspect.Parameter.empty

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty


@dataclass(frozen=True, slots=True)
class Constructor:
    """A way to build an instance of ``owner``.

    ``factory`` is the class itself for ``__init__``, or the bound
    classmethod for alternative constructors.
    """

    owner: type
    name: str
    factory: Factory
    parameters: tuple[DependencyParam, ...]
    marked: bool = False

    @property
    def required(self) -> tuple[DependencyParam, ...]:
        return tuple(p for p in self.parameters if not p.has_default)

    @property
    def dependency_types(self) -> tuple[Any, ...]:
        return tuple(p.annotation for p in self.parameters)

    def invoke(self, values: Sequence[Any]) -> Any:
        """Call the constructor with one value per parameter, in order."""
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for param, value in zip(self.parameters, values, strict=True):
            if param.kind is inspect.Parameter.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[param.name] = value
        return self.factory(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.owner.__qualname__}.{self.name}"


@dataclass(frozen=True, slots=True)
class Selected:
    """A constructor chosen by rule a, b, or c."""

    constructor: Constructor
    rule: Literal["single", "marked", "zero-arg"]


@dataclass(frozen=True, slots=True)
class Ambiguous:
    """No rule applied; ``fallback`` is the first declared candidate."""

    candidates: tuple[Constructor, ...]

    @property
    def fallback(self) -> Constructor:
        return self.candidates[0]


ConstructorChoice = Selected | Ambiguous


def _parameters(func: Any, *, skip_first: bool) -> tuple[DependencyParam, ...]:
    sig = inspect.signature(func, eval_str=True)
    params = list(sig.parameters.values())
    if skip_first:
        params = params[1:]
    return tuple(
        DependencyParam(
            name=p.name,
            annotation=p.annotation,
            kind=p.kind,
            default=p.default,
        )
        for p in params
        if p.kind not in _VARIADIC
    )


def declared_constructors(cls: type) -> list[Constructor]:
    """Return the constructors declared by *cls*, ``__init__`` first.

    Raises ``NameError``, ``TypeError`` or ``ValueError`` when annotations cannot be
    evaluated or the class has no introspectable signature.
    """
    init = cls.__init__
    if init is object.__init__:
        init_params: tuple[DependencyParam, ...] = ()
    else:
        init_params = _parameters(init, skip_first=True)
    found = [
        Constructor(
            owner=cls,
            name="__init__",
            factory=cls,
            parameters=init_params,
            marked=is_inject_marked(init),
        )
    ]

    for name, attr in vars(cls).items():
        if not isinstance(attr, classmethod):
            continue
        if not (is_constructor_marked(attr) or is_inject_marked(attr)):
            continue
        bound = getattr(cls, name)
        found.append(
            Constructor(
                owner=cls,
                name=name,
                factory=bound,
                parameters=_parameters(bound, skip_first=False),
                marked=is_inject_marked(attr),
            )
        )
    return found


def choose_constructor(cls: type) -> ConstructorChoice:
    """Apply the selection policy and report how the choice was made."""
    candidates = declared_constructors(cls)

    if len(candidates) == 1:
        return Selected(candidates[0], "single")

    marked = [c for c in candidates if c.marked]
    if len(marked) == 1:
        return Selected(marked[0], "marked")

    for candidate in candidates:
        if not candidate.required:
            return Selected(candidate, "zero-arg")

    return Ambiguous(tuple(candidates))


def select_constructor(cls: type, *, strict: bool = False) -> Constructor:
    """Return the constructor to use for *cls*.

    In strict mode an ``Ambiguous`` outcome raises
    ``AmbiguousConstructorError``; otherwise the first declared
    constructor is used and a warning is logged.
    """
    choice = choose_constructor(cls)
    if isinstance(choice, Selected):
        return choice.constructor

    names = tuple(str(c) for c in choice.candidates)
    if strict:
        raise AmbiguousConstructorError(cls, names)
    logger.warning(
        "Ambiguous constructor for %s (%s); falling back to %s",
        cls.__qualname__,
        ", ".join(names),
        choice.fallback,
    )
    return choice.fallback
