from __future__ import annotations

import logging
from typing import Any, Callable

from lark import Tree

from ..runtime import FAIL, Frame, JsValue
from ..tree import Node, tree_label
from ..utils import js_add, js_sub, to_number
from .chains import member_key
from .common import EvalFunc, expect_ident_token
from .expr import apply_binary_operator
from .mutation import get_property, set_property

logger = logging.getLogger(__name__)

__all__ = [
    "LValue",
    "COMPOUND_OPS",
    "resolve_lvalue",
    "eval_assign",
    "eval_update",
]

COMPOUND_OPS = {
    '+=': '+',
    '-=': '-',
    '*=': '*',
    '/=': '/',
    '%=': '%',
    '|=': '|',
    '&=': '&',
    '^=': '^',
}

class LValue:
    """An assignable slot (identifier binding or container member), resolved once so reads and writes hit the same storage."""
    __slots__ = ("getter", "setter")

    def __init__(self, getter: Callable[[], JsValue], setter: Callable[[JsValue], JsValue]) -> None:
        self.getter = getter
        self.setter = setter

    def read(self) -> JsValue:
        return self.getter()

    def write(self, value: JsValue) -> JsValue:
        return self.setter(value)

def make_ident_lvalue(name: str, frame: Frame) -> LValue:
    def setter(value: JsValue) -> JsValue:
        frame.assign(name, value)
        return value

    return LValue(lambda: frame.get(name), setter)

def resolve_lvalue(target: Node, frame: Frame, eval_func: EvalFunc) -> LValue | Any:
    label = tree_label(target)

    if label == 'identifier':
        name = expect_ident_token(target.children[0], "Assignment target")
        return make_ident_lvalue(name, frame)

    if label == 'member':
        obj_node, prop_node = target.children

        obj = eval_func(obj_node, frame)
        if obj is FAIL:
            return FAIL

        key = member_key(obj, prop_node, frame, eval_func)
        if key is FAIL:
            return FAIL

        return LValue(lambda: get_property(obj, key), lambda value: set_property(obj, key, value))

    logger.warning("Invalid assignment target: %s", label)
    return FAIL

def eval_assign(n: Tree, frame: Frame, eval_func: EvalFunc) -> JsValue:
    target, op_tok, value_node = n.children
    op = str(op_tok)

    value = eval_func(value_node, frame)
    if value is FAIL:
        return FAIL

    if op != '=' and op not in COMPOUND_OPS:
        logger.warning("Unknown assignment operator: %s", op)
        return FAIL

    ref = resolve_lvalue(target, frame, eval_func)
    if ref is FAIL:
        return FAIL

    if op == '=':
        return ref.write(value)

    current = ref.read()
    if current is FAIL:
        current = 0

    result = apply_binary_operator(COMPOUND_OPS[op], current, value)
    if result is FAIL:
        return FAIL

    return ref.write(result)

def eval_update(n: Tree, frame: Frame, eval_func: EvalFunc) -> JsValue:
    """`++x`, `x++`, `--x`, `x--`: all forms return the updated value."""
    op_tok, target = n.children
    op = str(op_tok)

    ref = resolve_lvalue(target, frame, eval_func)
    if ref is FAIL:
        return FAIL

    current = ref.read()
    if current is FAIL:
        return FAIL

    match op:
        case '++':
            updated = js_add(to_number(current), 1)
        case '--':
            updated = js_sub(current, 1)
        case _:
            logger.warning("Unknown update operator: %s", op)
            return FAIL

    return ref.write(updated)
