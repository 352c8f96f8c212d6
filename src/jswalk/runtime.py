from __future__ import annotations

import importlib
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional

from .tree import tree_children, tree_label
from .types import (
    UNDEFINED, FAIL,
    JsFunction, JsRegExp, BuiltinMethod, JsValue, Frame,
    JsRuntimeError, JsTypeError, JsMethodNotFound, JsReturnSignal,
    Method, MethodRegistry, Builtins,
)
from .utils import format_value, is_number

logger = logging.getLogger(__name__)

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load the builtin method module (idempotent) so register_* hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("jswalk.stdlib")
    _STDLIB_INITIALIZED = True

def register_method(registry: MethodRegistry, name: str):
    def dec(fn: Method):
        registry[name] = fn
        return fn

    return dec

def register_array(name: str):
    return register_method(Builtins.array_methods, name)

def register_string(name: str):
    return register_method(Builtins.string_methods, name)

def register_number(name: str):
    return register_method(Builtins.number_methods, name)

def register_object(name: str):
    return register_method(Builtins.object_methods, name)

def register_regex(name: str):
    return register_method(Builtins.regex_methods, name)

def method_registry(recv: JsValue) -> Optional[MethodRegistry]:
    if isinstance(recv, list):
        return Builtins.array_methods
    if isinstance(recv, str):
        return Builtins.string_methods
    if isinstance(recv, dict):
        return Builtins.object_methods
    if isinstance(recv, JsRegExp):
        return Builtins.regex_methods
    if is_number(recv):
        return Builtins.number_methods
    return None

def has_builtin_method(recv: JsValue, name: str) -> bool:
    registry = method_registry(recv)
    return registry is not None and name in registry

def call_builtin_method(recv: JsValue, name: str, args: List[JsValue]) -> JsValue:
    registry = method_registry(recv)
    if registry:
        handler = registry.get(name)
        if handler is not None:
            return handler(recv, args)

    raise JsMethodNotFound(recv, name)

# ---------- function invocation ----------

def call_function(fn: JsFunction, args: List[JsValue], this: Any = None, construct: bool = False) -> JsValue:
    """
    Run an interpreted function:
    - the call frame's parent is the defining frame (lexical closure)
    - params bind positionally; missing ones bind to null
    - non-arrow functions bind `this` when a receiver is given
    - a FAIL from any body statement aborts the call with FAIL
    - result is the first `return` value, else the last statement's value
      (construct mode only honours an explicit return)
    """
    from .evaluator import eval_node  # local import to avoid cycle
    from .eval.fn import hoist_declarations

    callee_frame = Frame(parent=fn.frame)
    callee_frame.mark_function_frame()

    for idx, name in enumerate(fn.params):
        callee_frame.define(name, args[idx] if idx < len(args) else None)

    if this is not None and fn.kind != "arrow":
        callee_frame.define("this", this)

    logger.debug("call %r with %d args", fn, len(args))

    if tree_label(fn.body) != "block":
        return eval_node(fn.body, callee_frame)

    statements = tree_children(fn.body)
    hoist_declarations(statements, callee_frame)
    result: JsValue = UNDEFINED

    try:
        for stmt in statements:
            result = eval_node(stmt, callee_frame)
            if result is FAIL:
                return FAIL
    except JsReturnSignal as signal:
        return signal.value

    return UNDEFINED if construct else result

def construct(ctor: JsValue, args: List[JsValue]) -> JsValue:
    if isinstance(ctor, JsFunction):
        if ctor.kind == "arrow":
            raise JsTypeError(f"{ctor.name or 'anonymous'} is not a constructor")

        instance: Dict[str, JsValue] = {}
        result = call_function(ctor, args, this=instance, construct=True)

        if isinstance(result, (dict, list)):
            return result

        return instance

    if callable(ctor) and not isinstance(ctor, BuiltinMethod):
        return ctor(*args)

    raise JsTypeError(f"{_describe(ctor)} is not a constructor")

def invoke_callable(fn: JsValue, args: List[JsValue]) -> JsValue:
    """Call a callback from builtin code; natives only see as many args as they take."""
    if isinstance(fn, JsFunction):
        result = call_function(fn, args)
        return UNDEFINED if result is FAIL else result

    if isinstance(fn, BuiltinMethod):
        return fn(*args)

    if not callable(fn):
        raise JsTypeError(f"{_describe(fn)} is not a function")

    return fn(*args[:_positional_arity(fn, len(args))])

def _positional_arity(fn: Callable[..., Any], available: int) -> int:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return available

    count = 0
    for param in sig.parameters.values():
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            return available
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            count += 1

    return min(count, available)

def _describe(value: JsValue) -> str:
    return format_value(value)

__all__ = [
    "Builtins",
    "BuiltinMethod",
    "Frame",
    "JsFunction",
    "JsRegExp",
    "JsReturnSignal",
    "JsRuntimeError",
    "JsTypeError",
    "JsMethodNotFound",
    "UNDEFINED",
    "FAIL",
    "call_builtin_method",
    "call_function",
    "construct",
    "has_builtin_method",
    "init_stdlib",
    "invoke_callable",
    "register_array",
    "register_number",
    "register_object",
    "register_regex",
    "register_string",
]
