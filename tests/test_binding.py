"""Tests for lyven.routing.binding — handler parameter binding."""

from dataclasses import dataclass
from typing import Annotated

import pytest

from lyven.context import RequestContext
from lyven.errors import BodyParseError, TypeConversionError, UnbindableParameterError
from lyven.markers import Body, PathParam, QueryParam
from lyven.routing.binding import (
    Resolved,
    Unbindable,
    analyze_handler,
    bind_arguments,
    bind_parameter,
)
from lyven.routing.codec import JsonCodec


@dataclass(frozen=True, slots=True)
class Payload:
    title: str


class Handlers:
    def show(self, id: int, verbose: bool = False) -> None: ...

    def create(self, data: Annotated[Payload, Body]) -> None: ...

    def raw(self, text: Annotated[str, Body], blob: Annotated[bytes, Body]) -> None: ...

    def aliased(
        self,
        user_id: Annotated[int, PathParam("id")],
        size: Annotated[int, QueryParam("page_size")] = 10,
    ) -> None: ...

    def path_only(self, id: Annotated[str, PathParam()]) -> None: ...

    def contextual(self, ctx: RequestContext, *args: object, **kwargs: object) -> None: ...

    def orphan(self, missing: str, fallback: int = 7) -> None: ...


def _ctx(path: str = "/", body: str | None = None, **query: str) -> RequestContext:
    return RequestContext(path=path, method="GET", body=body, query_params=query)


class TestAnalyzeHandler:
    def test_skips_receiver_and_variadics(self) -> None:
        params = analyze_handler(Handlers.contextual, skip_first=True)
        assert [p.name for p in params] == ["ctx"]

    def test_sources_and_aliases(self) -> None:
        user_id, size = analyze_handler(Handlers.aliased, skip_first=True)
        assert (user_id.source, user_id.key) == ("path", "id")
        assert (size.source, size.key) == ("query", "page_size")
        assert size.default == 10

    def test_body_marker(self) -> None:
        (data,) = analyze_handler(Handlers.create, skip_first=True)
        assert data.source == "body"
        assert data.bare is Payload


class TestBindParameter:
    def test_path_variable_converted(self) -> None:
        (param, _) = analyze_handler(Handlers.show, skip_first=True)
        outcome = bind_parameter(param, _ctx(), {"id": "42"}, JsonCodec())
        assert outcome == Resolved(42)

    def test_path_beats_query(self) -> None:
        (param, _) = analyze_handler(Handlers.show, skip_first=True)
        outcome = bind_parameter(param, _ctx(id="1"), {"id": "2"}, JsonCodec())
        assert outcome == Resolved(2)

    def test_query_parameter(self) -> None:
        (_, verbose) = analyze_handler(Handlers.show, skip_first=True)
        outcome = bind_parameter(verbose, _ctx(verbose="yes"), {}, JsonCodec())
        assert outcome == Resolved(True)

    def test_path_only_ignores_query(self) -> None:
        (param,) = analyze_handler(Handlers.path_only, skip_first=True)
        outcome = bind_parameter(param, _ctx(id="1"), {}, JsonCodec())
        assert isinstance(outcome, Unbindable)

    def test_context_by_annotation(self) -> None:
        (param,) = analyze_handler(Handlers.contextual, skip_first=True)
        ctx = _ctx()
        assert bind_parameter(param, ctx, {}, JsonCodec()) == Resolved(ctx)

    def test_conversion_failure(self) -> None:
        (param, _) = analyze_handler(Handlers.show, skip_first=True)
        with pytest.raises(TypeConversionError):
            bind_parameter(param, _ctx(), {"id": "abc"}, JsonCodec())


class TestBodyBinding:
    def test_decoded(self) -> None:
        (param,) = analyze_handler(Handlers.create, skip_first=True)
        outcome = bind_parameter(param, _ctx(body='{"title": "hi"}'), {}, JsonCodec())
        assert outcome == Resolved(Payload(title="hi"))

    def test_str_and_bytes_verbatim(self) -> None:
        text, blob = analyze_handler(Handlers.raw, skip_first=True)
        ctx = _ctx(body="plain text")
        assert bind_parameter(text, ctx, {}, JsonCodec()) == Resolved("plain text")
        assert bind_parameter(blob, ctx, {}, JsonCodec()) == Resolved(b"plain text")

    @pytest.mark.parametrize("body", [None, ""])
    def test_absent_body_is_none(self, body: str | None) -> None:
        (param,) = analyze_handler(Handlers.create, skip_first=True)
        assert bind_parameter(param, _ctx(body=body), {}, JsonCodec()) == Resolved(None)

    def test_malformed(self) -> None:
        (param,) = analyze_handler(Handlers.create, skip_first=True)
        with pytest.raises(BodyParseError):
            bind_parameter(param, _ctx(body="{oops"), {}, JsonCodec())


class TestBindArguments:
    def test_permissive_uses_default_then_none(self) -> None:
        params = analyze_handler(Handlers.orphan, skip_first=True)
        args, kwargs = bind_arguments(params, _ctx(), {}, JsonCodec())
        assert args == []
        assert kwargs == {"missing": None, "fallback": 7}

    def test_strict_raises(self) -> None:
        params = analyze_handler(Handlers.orphan, skip_first=True)
        with pytest.raises(UnbindableParameterError) as exc_info:
            bind_arguments(params, _ctx(), {}, JsonCodec(), strict=True)
        assert exc_info.value.name == "missing"

    def test_aliases(self) -> None:
        params = analyze_handler(Handlers.aliased, skip_first=True)
        _, kwargs = bind_arguments(params, _ctx(page_size="50"), {"id": "3"}, JsonCodec())
        assert kwargs == {"user_id": 3, "size": 50}

    def test_positional_only(self) -> None:
        def handler(a: int, /, b: int) -> None: ...

        params = analyze_handler(handler)
        args, kwargs = bind_arguments(params, _ctx(b="2"), {"a": "1"}, JsonCodec())
        assert args == [1]
        assert kwargs == {"b": 2}
