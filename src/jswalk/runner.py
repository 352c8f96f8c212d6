from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from lark import Tree

from .evaluator import eval_node
from .eval.fn import hoist_declarations
from .lexer_rd import LexError
from .parser_rd import ParseError, parse_source
from .runtime import FAIL, UNDEFINED, Frame, JsRuntimeError, JsValue, init_stdlib
from .tree import tree_children, tree_label
from .utils import format_value, log_level_from_env

logger = logging.getLogger(__name__)

# Statements whose value the REPL does not echo.
_QUIET_STATEMENTS = {'var_decl', 'function_decl', 'empty'}

def run_program(program: Tree, frame: Frame) -> List[JsValue]:
    """Evaluate each top-level statement against `frame`; one result per statement, failures as undefined."""
    init_stdlib()

    statements = tree_children(program)
    hoist_declarations(statements, frame)
    logger.debug("running %d top-level statements", len(statements))

    results: List[JsValue] = []
    for stmt in statements:
        value = eval_node(stmt, frame)
        results.append(UNDEFINED if value is FAIL else value)

    return results

def evaluate_all(source: str, context: Optional[Dict[str, Any]]=None) -> List[JsValue]:
    """
    Run `source` against `context` and return every top-level statement's value.
    The context dict is the root environment and is mutated in place.
    """
    program = parse_source(source)
    frame = Frame(vars=context if context is not None else {}, source=source)
    return run_program(program, frame)

def evaluate(source: str, context: Optional[Dict[str, Any]]=None) -> JsValue:
    results = evaluate_all(source, context)
    return results[-1] if results else UNDEFINED

def repl_eval(source: str, frame: Frame) -> Tuple[JsValue, bool]:
    """Evaluate one REPL entry; the flag is True when the last statement is a declaration."""
    frame.source = source
    program = parse_source(source)
    results = run_program(program, frame)
    statements = tree_children(program)

    if not statements:
        return UNDEFINED, True

    return results[-1], tree_label(statements[-1]) in _QUIET_STATEMENTS

def _error_position(exc: Exception) -> Tuple[Optional[int], Optional[int]]:
    if isinstance(exc, JsRuntimeError):
        meta = exc.js_meta
        return getattr(meta, "line", None), getattr(meta, "column", None)
    return getattr(exc, "line", None), getattr(exc, "column", None)

def render_error(exc: Exception, source: Optional[str]) -> str:
    """`Error: ...` followed by the offending source line and a caret when the position is known."""
    text = f"Error: {exc}"
    line, col = _error_position(exc)
    if source is None or line is None:
        return text

    lines = source.splitlines()
    if not 1 <= line <= len(lines):
        return text

    out = [text, f"  {lines[line - 1]}"]
    if col is not None:
        out.append("  " + " " * (col - 1) + "^")
    return "\n".join(out)

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.is_file():
        return candidate.read_text(encoding="utf-8")

    return arg

def _parse_context(text: str) -> Dict[str, Any]:
    try:
        context = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid --context JSON: {exc}") from None

    if not isinstance(context, dict):
        raise SystemExit("--context must be a JSON object")

    return context

def configure_logging(level_name: Optional[str]=None) -> None:
    name = (level_name or log_level_from_env()).upper()
    level = logging.getLevelName(name)

    if not isinstance(level, int):
        raise SystemExit(f"Unknown log level: {level_name}")

    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

def main(argv: Optional[List[str]]=None) -> None:
    context: Dict[str, Any] = {}
    show_all = False
    show_ast = False
    log_level: Optional[str] = None
    arg = None
    it = iter(sys.argv[1:] if argv is None else argv)

    for token in it:
        if token == "--all":
            show_all = True
            continue

        if token == "--ast":
            show_ast = True
            continue

        if token.startswith("--context="):
            context = _parse_context(token.split("=", 1)[1])
            continue

        if token == "--context":
            try:
                context = _parse_context(next(it))
            except StopIteration:
                raise SystemExit("--context flag requires a JSON object") from None
            continue

        if token.startswith("--log-level="):
            log_level = token.split("=", 1)[1]
            continue

        if token == "--log-level":
            try:
                log_level = next(it)
            except StopIteration:
                raise SystemExit("--log-level flag requires a level name") from None
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    configure_logging(log_level)
    source = _load_source(arg or "-")
    frame = Frame(vars=context, source=source)

    try:
        if show_ast:
            print(parse_source(source).pretty(), end="")
            return

        results = run_program(parse_source(source), frame)
    except (LexError, ParseError, JsRuntimeError) as exc:
        print(render_error(exc, frame.source), file=sys.stderr)
        sys.exit(1)

    if show_all:
        for value in results:
            print(format_value(value))
        return

    print(format_value(results[-1] if results else UNDEFINED))

if __name__ == "__main__":
    main()
