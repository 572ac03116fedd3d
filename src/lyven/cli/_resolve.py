"""App lookup for CLI commands.

``lyven routes`` and ``lyven config`` take a ``"module:attribute"`` target.
The attribute defaults to ``app``; a callable that is not an App is
treated as a zero-argument factory.
"""

import argparse
import importlib
import sys
from typing import Any

from lyven.app import App


def _lookup(target: str) -> Any:
    module_name, sep, attribute = target.partition(":")
    module = importlib.import_module(module_name)
    return getattr(module, attribute if sep and attribute else "app")


def resolve_app(target: str) -> App:
    """Import *target* and return the App it names.

    Raises:
        ModuleNotFoundError: The module part cannot be imported.
        AttributeError: The module has no such attribute.
        TypeError: The attribute is neither an App nor a factory
            returning one, or the factory raised.
    """
    candidate = _lookup(target)
    if not isinstance(candidate, App) and callable(candidate):
        try:
            candidate = candidate()
        except Exception as exc:
            msg = f"Factory function {target!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(candidate, App):
        return candidate
    msg = f"{target!r} resolved to {type(candidate).__name__}, not a lyven.App instance"
    raise TypeError(msg)


def resolve_or_exit(args: argparse.Namespace) -> App:
    """``resolve_app(args.app)``, printing the error and exiting 1 on failure."""
    try:
        return resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
