from __future__ import annotations

import math

import pytest

from jswalk.eval.common import compile_regexp
from jswalk.utils import (
    debug_py_trace_enabled,
    format_value,
    is_truthy,
    js_type,
    log_level_from_env,
    loose_equals,
    number_to_string,
    strict_equals,
    to_int32,
    to_number,
    to_string,
)
from tests.support.harness import UNDEFINED, evaluate


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        pytest.param("  42 ", 42, id="padded-int"),
        pytest.param("0x1f", 31, id="hex-string"),
        pytest.param("1e3", 1000.0, id="exponent-string"),
        pytest.param("", 0, id="empty-string"),
        pytest.param("Infinity", math.inf, id="infinity-string"),
        pytest.param(None, 0, id="null"),
        pytest.param(True, 1, id="true"),
        pytest.param([], 0, id="empty-array"),
        pytest.param([5], 5, id="single-element-array"),
    ],
)
def test_to_number(value: object, expected: object) -> None:
    assert to_number(value) == expected


@pytest.mark.parametrize("value", ["abc", "1.2.3", UNDEFINED, {}, [1, 2]])
def test_to_number_nan(value: object) -> None:
    assert math.isnan(to_number(value))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        pytest.param(1.0, "1", id="integral-float"),
        pytest.param(2.5, "2.5", id="fraction"),
        pytest.param(0.1 + 0.2, "0.30000000000000004", id="shortest-repr"),
        pytest.param(1e21, "1e+21", id="large-exponent"),
        pytest.param(1e-7, "1e-7", id="small-exponent"),
        pytest.param(math.nan, "NaN", id="nan"),
        pytest.param(-math.inf, "-Infinity", id="negative-infinity"),
    ],
)
def test_number_to_string(value: float, expected: str) -> None:
    assert number_to_string(value) == expected


def test_to_string_of_nested_arrays_and_nullish_items() -> None:
    assert to_string([1, [2, 3], None, UNDEFINED]) == "1,2,3,,"
    assert to_string({"a": 1}) == "[object Object]"


@pytest.mark.parametrize(
    ("a", "b", "expected"),
    [
        pytest.param(0, "", True, id="zero-empty-string"),
        pytest.param(None, 0, False, id="null-zero"),
        pytest.param([1], "1", True, id="array-string"),
        pytest.param(True, 1, True, id="bool-number"),
        pytest.param("1", 1.0, True, id="string-float"),
    ],
)
def test_loose_equals(a: object, b: object, expected: bool) -> None:
    assert loose_equals(a, b) is expected


def test_strict_equals_compares_objects_by_identity() -> None:
    xs = [1]
    assert strict_equals(xs, xs) is True
    assert strict_equals([1], [1]) is False
    assert strict_equals(1, 1.0) is True


def test_js_type_categories() -> None:
    assert js_type(UNDEFINED) == "undefined"
    assert js_type(None) == "null"
    assert js_type(False) == "boolean"
    assert js_type(3) == "number"
    assert js_type({}) == "object"
    assert js_type(len) == "function"


def test_to_int32_wraps() -> None:
    assert to_int32(2 ** 32 + 5) == 5
    assert to_int32(-1.9) == -1
    assert to_int32(math.nan) == 0


@pytest.mark.parametrize("value", [0, -0.0, "", None, UNDEFINED, math.nan, False])
def test_falsy_values(value: object) -> None:
    assert is_truthy(value) is False


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        pytest.param("a", "'a'", id="string"),
        pytest.param([1, "b", None], "[ 1, 'b', null ]", id="array"),
        pytest.param([], "[]", id="empty-array"),
        pytest.param({}, "{}", id="empty-object"),
        pytest.param({"a": 1, "b c": [2]}, "{ a: 1, 'b c': [ 2 ] }", id="object"),
        pytest.param(UNDEFINED, "undefined", id="undefined"),
        pytest.param(True, "true", id="bool"),
        pytest.param(1.5, "1.5", id="float"),
    ],
)
def test_format_value(value: object, expected: str) -> None:
    assert format_value(value) == expected


def test_format_value_marks_cycles() -> None:
    xs: list = [1]
    xs.append(xs)
    assert format_value(xs) == "[ 1, [Circular] ]"


def test_format_value_functions_and_regexes() -> None:
    assert format_value(evaluate("function f() {}\nf")) == "[Function: f]"
    assert format_value(evaluate("() => 1")) == "[Function (anonymous)]"
    assert format_value(compile_regexp("a+", "gi")) == "/a+/gi"


def test_log_level_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("JSWALK_LOG_LEVEL", raising=False)
    assert log_level_from_env() == "WARNING"

    monkeypatch.setenv("JSWALK_LOG_LEVEL", "debug")
    assert log_level_from_env() == "DEBUG"


def test_debug_py_trace_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("JSWALK_DEBUG_PY_TRACE", raising=False)
    assert debug_py_trace_enabled() is False

    monkeypatch.setenv("JSWALK_DEBUG_PY_TRACE", "yes")
    assert debug_py_trace_enabled() is True
