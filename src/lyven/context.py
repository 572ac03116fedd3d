"""Request context — the immutable request view handlers can bind to.

Provides:
- ``RequestContext``: path, method, body, query parameters, and headers
  for one dispatch.
- ``context_var``: the context currently being dispatched.

The router sets ``context_var`` around each handler call and resets it
afterwards. Accessing it outside a dispatch raises ``LookupError``.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    threads. No locks needed.
"""

from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from types import MappingProxyType
from urllib.parse import parse_qs, urlsplit


@dataclass(frozen=True, slots=True)
class RequestContext:
    """One incoming request, as seen by the dispatcher.

    ``query_params`` and ``headers`` are exposed as read-only mappings.
    Header lookup through ``header()`` is case-insensitive.
    """

    path: str
    method: str
    body: str | None = None
    query_params: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "query_params", MappingProxyType(dict(self.query_params)))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def from_target(
        cls,
        method: str,
        target: str,
        *,
        body: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> RequestContext:
        """Build a context from a request target such as ``/users?page=2``.

        Repeated query keys keep their first value. Blank values are kept.
        """
        split = urlsplit(target)
        parsed = parse_qs(split.query, keep_blank_values=True)
        return cls(
            path=split.path or "/",
            method=method.upper(),
            body=body,
            query_params={key: values[0] for key, values in parsed.items()},
            headers=headers or {},
        )

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return a header value, matching the name case-insensitively."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default


context_var: ContextVar[RequestContext] = ContextVar("lyven_request_context")
"""The request being dispatched. Set by the router around handler calls."""


def get_context() -> RequestContext:
    """Return the request being dispatched.

    Raises ``LookupError`` if called outside a dispatch.
    """
    return context_var.get()
