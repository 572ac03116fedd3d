"""Invoke helpers — call sync or async callbacks uniformly.

Reactive operators accept both ``def`` and ``async def`` callbacks for
``map``, ``filter`` and ``subscribe``. The sync/async check lives here.

Usage::

    from lyven._internal.invoke import invoke

    result = await invoke(callback, value)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
