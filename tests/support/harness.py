from __future__ import annotations

import math
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from jswalk.lexer_rd import LexError, Lexer
from jswalk.parser_rd import ParseError, parse_source
from jswalk.runner import evaluate, evaluate_all
from jswalk.runtime import (
    FAIL,
    UNDEFINED,
    Frame,
    JsFunction,
    JsMethodNotFound,
    JsRegExp,
    JsRuntimeError,
    JsTypeError,
)

RuntimeExpectation = Optional[Tuple[str, object]]

KEYWORDS = Lexer.KEYWORDS

__all__ = [
    "FAIL",
    "UNDEFINED",
    "Frame",
    "JsFunction",
    "JsMethodNotFound",
    "JsRegExp",
    "JsRuntimeError",
    "JsTypeError",
    "KEYWORDS",
    "LexError",
    "ParseError",
    "RuntimeExpectation",
    "evaluate",
    "evaluate_all",
    "parse_source",
    "run_runtime_case",
    "verify_result",
]


def verify_result(value: object, kind: str, expected: object) -> None:
    """Assert a runtime value has the expected JS type and value."""
    match kind:
        case "string":
            assert isinstance(value, str), f"expected str, got {type(value).__name__}"
            assert value == expected, f"expected {expected!r}, got {value!r}"
            return
        case "number":
            assert isinstance(value, (int, float)) and not isinstance(
                value, bool
            ), f"expected number, got {type(value).__name__}"
            if isinstance(expected, float) and math.isnan(expected):
                assert math.isnan(value), f"expected NaN, got {value}"
                return
            assert (
                abs(value - float(expected)) <= 1e-9
            ), f"expected {expected}, got {value}"
            return
        case "bool":
            assert isinstance(value, bool), f"expected bool, got {type(value).__name__}"
            assert value is bool(expected), f"expected {expected}, got {value}"
            return
        case "null":
            assert value is None, f"expected null, got {value!r}"
            return
        case "undefined":
            assert value is UNDEFINED, f"expected undefined, got {value!r}"
            return
        case "array":
            assert isinstance(value, list), f"expected list, got {type(value).__name__}"
            assert value == expected, f"expected {expected!r}, got {value!r}"
            return
        case "object":
            assert isinstance(value, dict), f"expected dict, got {type(value).__name__}"
            assert value == expected, f"expected {expected!r}, got {value!r}"
            return

    raise AssertionError(f"unknown expectation kind {kind!r}")


def run_runtime_case(
    source: str,
    expectation: RuntimeExpectation,
    expected_exc: Optional[type],
    context: Optional[Dict[str, Any]] = None,
) -> None:
    """Execute one runtime scenario with optional expected exception."""
    if expected_exc is not None:
        with pytest.raises(expected_exc):
            evaluate(source, context)
        return

    result = evaluate(source, context)
    if expectation is not None:
        verify_result(result, expectation[0], expectation[1])
