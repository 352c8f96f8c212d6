from __future__ import annotations

import datetime
import math
from decimal import Decimal

import pytest

from tests.support.harness import (
    UNDEFINED,
    JsFunction,
    JsTypeError,
    evaluate,
    evaluate_all,
    run_runtime_case,
)

CTX = {"a": 12, "b": 2}

SCENARIOS = [
    pytest.param("function add(x, y) { return x + y }\nadd(a, b)", ("number", 14), None, id="declared-function"),
    pytest.param("add(1, 2); function add(x, y) { return x + y }", None, None, id="hoisted-declaration"),
    pytest.param("sq = function(n) { return n * n }; sq(a)", ("number", 144), None, id="function-expression"),
    pytest.param("(x => x + 1)(a)", ("number", 13), None, id="arrow-expression-body"),
    pytest.param("((x, y) => { return x * y })(a, b)", ("number", 24), None, id="arrow-block-body"),
    pytest.param("(() => {})()", ("undefined", None), None, id="arrow-empty-body"),
    pytest.param("function f() { a; b }\nf()", ("number", 2), None, id="implicit-last-value"),
    pytest.param("function f() { return; }\nf()", ("undefined", None), None, id="bare-return"),
    pytest.param("function f(x, y) { return y }\nf(1)", ("null", None), None, id="missing-argument"),
    pytest.param("function f() { return 1; 2 }\nf()", ("number", 1), None, id="return-stops-body"),
    pytest.param("function f() { if (a > 10) { return 'big' } return 'small' }\nf()", ("string", "big"), None, id="return-from-nested-block"),
    pytest.param("zum(a, b)", ("undefined", None), None, id="missing-function"),
    pytest.param("a(1)", ("undefined", None), None, id="call-non-function"),
    pytest.param("function f(x) { return x.y.z }\nf({})", ("undefined", None), None, id="failing-body"),
    pytest.param("return 5", ("number", 5), None, id="top-level-return"),
]


@pytest.mark.parametrize("source,expectation,expected_exc", SCENARIOS)
def test_function_scenarios(source, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc, context=dict(CTX))


def test_hoisted_function_result() -> None:
    assert evaluate_all("add(1, 2); function add(x, y) { return x + y }") == [3, UNDEFINED]


def test_native_callable_from_context() -> None:
    ctx = {"a": 12, "b": 2, "sum": lambda x, y: x + y}
    assert evaluate("sum(a, b)", ctx) == 14


def test_native_callable_with_undefined_argument_gives_nan() -> None:
    ctx = {"a": 12, "b": 2, "sum": lambda x, y: x + y}
    result = evaluate("sum(a, c)", ctx)
    assert math.isnan(result)


def test_context_functions_in_expressions() -> None:
    ctx = {"n": 6, "foo": lambda x: x * 100, "obj": {"x": {"y": 555}}}
    answer = evaluate_all('1; 2; 3+4*10+n; foo(3+5); obj[""+"x"].y;', ctx)
    assert answer == [1, 2, 49, 800, 555]


def test_define_and_run_functions() -> None:
    script = r"""
    function splitString(str) {
      return str.split(/\r?\n/);
    }
    const input = 'hola\nadios';
    const output = splitString(input);
    output;
    """

    result = evaluate_all(script)
    assert result[3] == ["hola", "adios"]


def test_closures_capture_defining_frame() -> None:
    script = """
    function counter() {
      let n = 0;
      return () => ++n;
    }
    const next = counter();
    next(); next(); next()
    """
    assert evaluate(script) == 3


def test_closures_are_independent() -> None:
    script = """
    function counter() { let n = 0; return () => ++n }
    const one = counter();
    const two = counter();
    one(); one();
    two()
    """
    assert evaluate(script) == 1


def test_parameters_shadow_outer_bindings() -> None:
    ctx = {"x": 1}
    assert evaluate("function f(x) { x = 5; return x }\nf(2)", ctx) == 5
    assert ctx["x"] == 1


def test_unbound_assignment_in_function_lands_in_root() -> None:
    ctx: dict = {}
    evaluate("function f() { created = 1 }\nf()", ctx)
    assert ctx["created"] == 1


def test_recursion_through_named_function_expression() -> None:
    script = "fact = function me(n) { return n <= 1 ? 1 : n * me(n - 1) }; fact(5)"
    assert evaluate(script) == 120


def test_recursive_declaration() -> None:
    script = "function fib(n) { return n < 2 ? n : fib(n - 1) + fib(n - 2) }\nfib(10)"
    assert evaluate(script) == 55


def test_method_call_binds_this() -> None:
    script = "o = {n: 2, get() { return this.n * 10 }}; o.get()"
    assert evaluate(script) == 20


def test_arrow_does_not_rebind_this() -> None:
    ctx = {"this": {"tag": "outer"}}
    script = "o = {tag: 'inner', f: () => this.tag}; o.f()"
    assert evaluate(script, ctx) == "outer"


def test_this_from_context() -> None:
    assert evaluate("this.a", {"this": {"a": 17}}) == 17
    assert evaluate("this") is UNDEFINED


def test_native_member_call_receives_only_arguments() -> None:
    ctx = {"obj": {"f": lambda *args: list(args)}}

    assert evaluate("obj.f(1, 'x')", ctx) == [1, "x"]
    assert evaluate("obj.f()", ctx) == []


def test_object_literal_names_anonymous_functions() -> None:
    fn = evaluate("o = {greet: function() {}}; o.greet")
    assert isinstance(fn, JsFunction)
    assert fn.name == "greet"


def test_interpreted_function_is_callable_from_python() -> None:
    fn = evaluate("(x, y) => x * y")
    assert fn(6, 7) == 42


def test_new_with_interpreted_constructor() -> None:
    script = """
    function Point(x, y) { this.x = x; this.y = y }
    p = new Point(1, 2);
    p.x + p.y
    """
    assert evaluate(script) == 3


def test_new_returns_explicit_object() -> None:
    assert evaluate("function F() { return {k: 1} }\nnew F()") == {"k": 1}


def test_new_with_host_class() -> None:
    result = evaluate_all("new date(2020, 1, 1);", {"date": datetime.date})
    assert result[0] == datetime.date(2020, 1, 1)


def test_new_with_host_class_and_string_argument() -> None:
    assert evaluate("new Decimal('1.5')", {"Decimal": Decimal}) == Decimal("1.5")


def test_new_on_arrow_raises() -> None:
    with pytest.raises(JsTypeError, match="is not a constructor"):
        evaluate("f = () => 1; new f()")


def test_new_on_plain_value_raises() -> None:
    with pytest.raises(JsTypeError, match="is not a constructor"):
        evaluate("new a()", {"a": 1})


def test_new_on_missing_constructor_raises() -> None:
    with pytest.raises(JsTypeError, match="undefined is not a constructor"):
        evaluate("new Missing()")


def test_spread_arguments() -> None:
    script = "function add(x, y, z) { return x + y + z }\nadd(...[1, 2], 3)"
    assert evaluate(script) == 6


def test_spread_of_non_iterable_fails_call() -> None:
    script = "function f(x) { return x }\nf(...5)"
    assert evaluate(script) is UNDEFINED


def test_host_exceptions_propagate() -> None:
    def boom() -> None:
        raise ValueError("host failure")

    with pytest.raises(ValueError, match="host failure"):
        evaluate("boom()", {"boom": boom})
