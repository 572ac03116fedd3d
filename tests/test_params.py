"""Tests for lyven.routing.params — path and query value conversion."""

import datetime
from decimal import Decimal
from typing import Annotated, Any, Optional

import pytest

from lyven.errors import TypeConversionError
from lyven.markers import QueryParam
from lyven.routing.params import CONVERTERS, Char, convert_param


class TestConverters:
    def test_supported_targets(self) -> None:
        assert set(CONVERTERS) == {str, int, float, Decimal, bool, Char}


class TestConvertParam:
    def test_str_passthrough(self) -> None:
        assert convert_param("hello", str) == "hello"

    def test_int(self) -> None:
        assert convert_param("42", int) == 42
        assert isinstance(convert_param("42", int), int)

    def test_float(self) -> None:
        assert convert_param("3.14", float) == pytest.approx(3.14)

    def test_decimal(self) -> None:
        assert convert_param("19.99", Decimal) == Decimal("19.99")

    @pytest.mark.parametrize("text", ["true", "TRUE", "1", "yes", "on"])
    def test_bool_true(self, text: str) -> None:
        assert convert_param(text, bool) is True

    @pytest.mark.parametrize("text", ["false", "0", "no", "Off"])
    def test_bool_false(self, text: str) -> None:
        assert convert_param(text, bool) is False

    def test_char(self) -> None:
        assert convert_param("x", Char) == "x"

    def test_optional_unwrapped(self) -> None:
        assert convert_param("5", Optional[int]) == 5  # noqa: UP045
        assert convert_param("5", int | None) == 5

    def test_annotated_unwrapped(self) -> None:
        assert convert_param("5", Annotated[int, QueryParam("n")]) == 5

    def test_unannotated_is_raw_text(self) -> None:
        import inspect

        assert convert_param("abc", inspect.Parameter.empty) == "abc"
        assert convert_param("abc", Any) == "abc"


class TestConversionErrors:
    def test_int_names_value_and_target(self) -> None:
        with pytest.raises(TypeConversionError) as exc_info:
            convert_param("abc", int)
        assert exc_info.value.value == "abc"
        assert exc_info.value.target is int
        assert "'abc'" in str(exc_info.value)
        assert "int" in str(exc_info.value)

    @pytest.mark.parametrize("text", ["1_000", " 42 ", "42 ", "\t7", "4 2", "", "+", "0x1f", "٤٢"])
    def test_int_rejects_lenient_forms(self, text: str) -> None:
        with pytest.raises(TypeConversionError, match="not an integer") as exc_info:
            convert_param(text, int)
        assert exc_info.value.value == text

    @pytest.mark.parametrize(
        "text", ["1_000.5", " 3.14 ", "3.14\n", "", ".", "inf", "nan", "1e", "1.2.3"]
    )
    def test_float_rejects_lenient_forms(self, text: str) -> None:
        with pytest.raises(TypeConversionError, match="not a number"):
            convert_param(text, float)

    @pytest.mark.parametrize("text", ["1_0.5", " 2.5", "Infinity", "NaN"])
    def test_decimal_rejects_lenient_forms(self, text: str) -> None:
        with pytest.raises(TypeConversionError, match="not a decimal number"):
            convert_param(text, Decimal)

    @pytest.mark.parametrize(
        ("text", "target", "expected"),
        [
            ("-7", int, -7),
            ("+7", int, 7),
            ("007", int, 7),
            ("-0.5", float, -0.5),
            (".5", float, 0.5),
            ("1e3", float, 1000.0),
            ("2.", float, 2.0),
            ("-1.25E2", Decimal, Decimal("-125")),
        ],
    )
    def test_signed_and_exponent_forms_accepted(
        self, text: str, target: type, expected: object
    ) -> None:
        assert convert_param(text, target) == expected

    def test_malformed_float(self) -> None:
        with pytest.raises(TypeConversionError):
            convert_param("1.2.3", float)

    def test_malformed_decimal(self) -> None:
        with pytest.raises(TypeConversionError):
            convert_param("ten", Decimal)

    def test_malformed_bool(self) -> None:
        with pytest.raises(TypeConversionError, match="true/false"):
            convert_param("maybe", bool)

    def test_char_too_long(self) -> None:
        with pytest.raises(TypeConversionError, match="single character"):
            convert_param("xy", Char)

    def test_unsupported_target(self) -> None:
        with pytest.raises(TypeConversionError, match="not supported"):
            convert_param("2024-01-01", datetime.date)
