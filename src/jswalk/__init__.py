"""Tree-walking evaluator for a small JavaScript-like language."""

from .lexer_rd import LexError
from .parser_rd import ParseError, parse_source
from .runner import evaluate, evaluate_all, run_program
from .types import (
    FAIL,
    UNDEFINED,
    Frame,
    JsFunction,
    JsMethodNotFound,
    JsRegExp,
    JsRuntimeError,
    JsTypeError,
    JsUndefined,
)

__all__ = [
    "FAIL",
    "UNDEFINED",
    "Frame",
    "JsFunction",
    "JsMethodNotFound",
    "JsRegExp",
    "JsRuntimeError",
    "JsTypeError",
    "JsUndefined",
    "LexError",
    "ParseError",
    "evaluate",
    "evaluate_all",
    "parse_source",
    "run_program",
]
