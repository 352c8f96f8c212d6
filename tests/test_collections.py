from __future__ import annotations

import math

import pytest

from tests.support.harness import (
    UNDEFINED,
    JsTypeError,
    evaluate,
    run_runtime_case,
)

CTX = {"a": 12, "b": 2}

SCENARIOS = [
    pytest.param("[a, b, a+b, a-b]", ("array", [12, 2, 14, 10]), None, id="array-elements"),
    pytest.param("[a, b, a+b, a-b, c]", ("array", [12, 2, 14, 10, UNDEFINED]), None, id="array-unresolved-element"),
    pytest.param("[1, , 3]", ("array", [1, UNDEFINED, 3]), None, id="array-hole"),
    pytest.param("[...[1, 2], 3]", ("array", [1, 2, 3]), None, id="array-spread"),
    pytest.param("[...'ab']", ("array", ["a", "b"]), None, id="array-spread-string"),
    pytest.param("[...a, 1]", ("array", [1]), None, id="array-spread-non-iterable"),
    pytest.param("d = { a: a, b: b, c: a + b}", ("object", {"a": 12, "b": 2, "c": 14}), None, id="object-literal"),
    pytest.param("d = { a: a, b: b, c: c}", ("object", {"a": 12, "b": 2, "c": UNDEFINED}), None, id="object-unresolved-member"),
    pytest.param("d = {a, b}", ("object", {"a": 12, "b": 2}), None, id="object-shorthand"),
    pytest.param("d = {['k' + a]: 1}", ("object", {"k12": 1}), None, id="object-computed-key"),
    pytest.param("d = {[missing.x]: 1, ok: 2}", ("object", {"ok": 2}), None, id="object-unresolved-key-dropped"),
    pytest.param("d = {1: 'one', 'two words': 2}", ("object", {"1": "one", "two words": 2}), None, id="object-literal-keys"),
    pytest.param("c = [a, b]; d = c[0] + c[1];", ("number", 14), None, id="member-index"),
    pytest.param("c = [a, b]; d = e[0] + e[1];", ("undefined", None), None, id="member-of-undefined"),
    pytest.param("c = [a, b, d]; e = c[0] + c[1] + c[2];", ("number", math.nan), None, id="member-undefined-in-sum"),
    pytest.param("[1, 2][5]", ("undefined", None), None, id="member-out-of-range"),
    pytest.param("[1, 2][-1]", ("undefined", None), None, id="member-negative-index"),
    pytest.param("[1, 2, 3].length", ("number", 3), None, id="array-length"),
    pytest.param("'abc'.length", ("number", 3), None, id="string-length"),
    pytest.param("'abc'[1]", ("string", "b"), None, id="string-index"),
    pytest.param("o = {x: 1}; o.y", ("undefined", None), None, id="object-missing-key"),
    pytest.param("o = {1: 'a'}; o[1]", ("string", "a"), None, id="object-numeric-key"),
    pytest.param("o = {1: 'a'}; o['1']", ("string", "a"), None, id="object-string-numeric-key"),
    pytest.param("true.x", ("undefined", None), None, id="member-of-bool"),
    pytest.param("null.x", ("undefined", None), None, id="member-of-null"),
]


@pytest.mark.parametrize("source,expectation,expected_exc", SCENARIOS)
def test_collection_scenarios(source, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc, context=dict(CTX))


def test_computed_member_on_context_object() -> None:
    ctx = {"obj": {"x": {"y": 555}}}
    assert evaluate('obj[""+"x"].y', ctx) == 555


def test_host_dict_with_integer_keys() -> None:
    assert evaluate("m[1]", {"m": {1: "one"}}) == "one"


def test_host_object_attributes() -> None:
    class Point:
        def __init__(self) -> None:
            self.x = 3

        def norm(self) -> int:
            return self.x * 2

    ctx = {"p": Point()}
    assert evaluate("p.x + p.norm()", ctx) == 9


def test_host_object_dunder_attributes_are_hidden() -> None:
    class Thing:
        pass

    assert evaluate("t.__class__", {"t": Thing()}) is UNDEFINED


ARRAY_METHOD_CASES = [
    pytest.param("xs = [1, 2]; xs.push(3, 4)", 4, id="push-returns-length"),
    pytest.param("[1, 2, 3].pop()", 3, id="pop"),
    pytest.param("[].pop()", UNDEFINED, id="pop-empty"),
    pytest.param("[1, 2, 3].shift()", 1, id="shift"),
    pytest.param("xs = [3]; xs.unshift(1, 2); xs", [1, 2, 3], id="unshift"),
    pytest.param("[1, 2, 3, 4].slice(1, -1)", [2, 3], id="slice"),
    pytest.param("[1, 2, 3].slice()", [1, 2, 3], id="slice-copy"),
    pytest.param("xs = [1, 2, 3]; xs.splice(1, 1, 'x', 'y')", [2], id="splice-removed"),
    pytest.param("xs = [1, 2, 3]; xs.splice(1, 1, 'x', 'y'); xs", [1, "x", "y", 3], id="splice-result"),
    pytest.param("[1].concat([2, 3], 4)", [1, 2, 3, 4], id="concat"),
    pytest.param("[1, null, 'a'].join('-')", "1--a", id="join"),
    pytest.param("[1, 2].join()", "1,2", id="join-default"),
    pytest.param("[1, 2, 3].indexOf(2)", 1, id="index-of"),
    pytest.param("[1, 2, 3].indexOf('2')", -1, id="index-of-strict"),
    pytest.param("[1, 2].includes(2)", True, id="includes"),
    pytest.param("[0 / 0].includes(0 / 0)", True, id="includes-nan"),
    pytest.param("[1, 2, 3].reverse()", [3, 2, 1], id="reverse"),
    pytest.param("[1, 2, 3].map(function(n) { return n * 2 })", [2, 4, 6], id="map-function"),
    pytest.param("[1, 2, 3].map((n, i) => n * i)", [0, 2, 6], id="map-arrow-index"),
    pytest.param("[1, 2, 3, 4].filter(n => n % 2 === 0)", [2, 4], id="filter"),
    pytest.param("t = 0; [1, 2, 3].forEach(n => t += n); t", 6, id="for-each"),
    pytest.param("[1, 2, 3].reduce((acc, n) => acc + n, 10)", 16, id="reduce-initial"),
    pytest.param("[1, 2, 3].reduce((acc, n) => acc + n)", 6, id="reduce-no-initial"),
    pytest.param("[5, 8, 9].find(n => n > 6)", 8, id="find"),
    pytest.param("[5, 8].find(n => n > 10)", UNDEFINED, id="find-missing"),
    pytest.param("[5, 8, 9].findIndex(n => n > 6)", 1, id="find-index"),
    pytest.param("[1, 2].some(n => n > 1)", True, id="some"),
    pytest.param("[1, 2].every(n => n > 1)", False, id="every"),
    pytest.param("[10, 9, 1].sort()", [1, 10, 9], id="sort-default-is-lexical"),
    pytest.param("[10, 9, 1].sort((x, y) => x - y)", [1, 9, 10], id="sort-comparator"),
    pytest.param("f = [1].push; f(2)", 2, id="detached-builtin"),
]


@pytest.mark.parametrize(("source", "expected"), ARRAY_METHOD_CASES)
def test_array_methods(source: str, expected: object) -> None:
    assert evaluate(source, {}) == expected


def test_push_mutates_context_list() -> None:
    items = [1]
    evaluate("xs.push(2)", {"xs": items})
    assert items == [1, 2]


def test_map_with_native_callable() -> None:
    assert evaluate("[1, 2].map(double)", {"double": lambda x: x * 2}) == [2, 4]


def test_reduce_of_empty_array_raises() -> None:
    with pytest.raises(JsTypeError, match="Reduce of empty array"):
        evaluate("[].reduce((a, b) => a + b)")


def test_callback_must_be_callable() -> None:
    with pytest.raises(JsTypeError, match="is not a function"):
        evaluate("[1].map(5)")


def test_unknown_method_is_undefined() -> None:
    assert evaluate("[1].nope()") is UNDEFINED


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        pytest.param("(3.14159).toFixed(2)", "3.14", id="to-fixed"),
        pytest.param("(255).toString(16)", "ff", id="to-string-hex"),
        pytest.param("(-5).toString(2)", "-101", id="to-string-binary"),
        pytest.param("(1.5).toString()", "1.5", id="to-string-default"),
        pytest.param("({a: 1}).hasOwnProperty('a')", True, id="has-own-property"),
        pytest.param("({a: 1}).hasOwnProperty('b')", False, id="has-own-property-missing"),
    ],
)
def test_number_and_object_methods(source: str, expected: object) -> None:
    assert evaluate(source) == expected


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        pytest.param("/a(b)/.exec('xab')", ["ab", "b"], id="exec-match"),
        pytest.param("/z/.exec('abc')", None, id="exec-no-match"),
        pytest.param("/^h/i.test('Hello')", True, id="test-ignore-case"),
        pytest.param("/x/g.global", True, id="global-flag"),
        pytest.param("/x+/g.source", "x+", id="source"),
        pytest.param("/(?<year>\\d{4})/.exec('in 2024')[1]", "2024", id="named-group"),
    ],
)
def test_regex_members(source: str, expected: object) -> None:
    assert evaluate(source) == expected
