from __future__ import annotations

import pytest

from tests.support.harness import UNDEFINED, evaluate, evaluate_all


@pytest.mark.parametrize(
    ("source", "start", "expected"),
    [
        pytest.param("a = 7", 1, 7, id="assign"),
        pytest.param("a += 7", 1, 8, id="add-assign"),
        pytest.param("a -= 7", 1, -6, id="sub-assign"),
        pytest.param("a *= 7", 3, 21, id="mul-assign"),
        pytest.param("a /= 2", 3, 1.5, id="div-assign"),
        pytest.param("a %= 2", 3, 1, id="mod-assign"),
        pytest.param("a |= 9", 3, 11, id="or-assign"),
        pytest.param("a &= 5", 12, 4, id="and-assign"),
        pytest.param("a ^= 5", 12, 9, id="xor-assign"),
    ],
)
def test_assignment_operators_update_context(source: str, start: int, expected: object) -> None:
    ctx = {"a": start, "b": 2}
    result = evaluate(source, ctx)

    assert ctx["a"] == expected
    assert result == expected


def test_string_concat_assignment() -> None:
    ctx = {"s": "a"}
    evaluate("s += 'b'; s += 1", ctx)
    assert ctx["s"] == "ab1"


def test_compound_assignment_on_unbound_name_uses_nan() -> None:
    ctx: dict = {}
    evaluate("missing += 1", ctx)
    assert ctx["missing"] != ctx["missing"]


def test_compound_assignment_on_missing_member_gives_nan() -> None:
    ctx = {"obj": {}}
    evaluate("obj.count += 5", ctx)
    assert ctx["obj"]["count"] != ctx["obj"]["count"]


def test_assignment_returns_assigned_value() -> None:
    assert evaluate_all("a = a; b;", {"a": 1, "b": 2}) == [1, 2]


def test_chained_assignment() -> None:
    ctx: dict = {}
    assert evaluate("x = y = 4", ctx) == 4
    assert ctx == {"x": 4, "y": 4}


def test_update_expressions_return_new_value() -> None:
    ctx = {"a": 1, "b": 2}
    assert evaluate_all("a = 7; b++;", ctx) == [7, 3]
    assert ctx == {"a": 7, "b": 3}


def test_prefix_and_postfix_forms_agree() -> None:
    ctx = {"n": 5}
    assert evaluate_all("n++; ++n; n--; --n", ctx) == [6, 7, 6, 5]


def test_increment_coerces_strings() -> None:
    ctx = {"s": "41"}
    assert evaluate("s++", ctx) == 42


def test_increment_through_this_binding() -> None:
    ctx = {"this": {"a": 17}}
    assert evaluate("this.a++", ctx) == 18
    assert ctx["this"]["a"] == 18


def test_set_array_element_in_place() -> None:
    items = [1, 2]
    ctx = {"a": 12, "b": 2, "c": items}

    assert evaluate("c[0] = 3", ctx) == 3
    assert ctx["c"] is items
    assert items == [3, 2]


def test_set_member_of_missing_variable_is_skipped() -> None:
    ctx = {"a": 12, "b": 2}

    assert evaluate("c[0] = 3", ctx) is UNDEFINED
    assert "c" not in ctx


def test_write_past_end_pads_with_undefined() -> None:
    ctx = {"xs": [1]}
    evaluate("xs[3] = 4", ctx)
    assert ctx["xs"] == [1, UNDEFINED, UNDEFINED, 4]


def test_setting_length_truncates_array() -> None:
    ctx = {"xs": [1, 2, 3]}
    evaluate("xs.length = 1", ctx)
    assert ctx["xs"] == [1]


def test_nested_object_assignment() -> None:
    ctx = {"obj": {"inner": {}}}
    evaluate("obj.inner['k' + 1] = true", ctx)
    assert ctx["obj"] == {"inner": {"k1": True}}


def test_assignment_to_primitive_member_fails_quietly() -> None:
    ctx = {"s": "abc"}
    assert evaluate("s.foo = 1", ctx) is UNDEFINED
    assert ctx["s"] == "abc"


def test_host_object_attribute_assignment() -> None:
    class Box:
        value = 0

    box = Box()
    evaluate("box.value = box.value + 2", {"box": box})
    assert box.value == 2


def test_declarations_bind_in_context() -> None:
    ctx: dict = {}
    results = evaluate_all("var a = 1; let b; const c = a + 1", ctx)

    assert results == [UNDEFINED, UNDEFINED, UNDEFINED]
    assert ctx == {"a": 1, "b": UNDEFINED, "c": 2}
