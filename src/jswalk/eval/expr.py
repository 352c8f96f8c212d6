from __future__ import annotations

import logging

from lark import Tree

from ..runtime import FAIL, UNDEFINED, Frame, JsValue
from ..tree import tree_children
from ..utils import (
    is_truthy,
    js_add,
    js_compare,
    js_div,
    js_mod,
    js_mul,
    js_pow,
    js_sub,
    loose_equals,
    strict_equals,
    to_int32,
    to_number,
)
from .common import EvalFunc

logger = logging.getLogger(__name__)

UNARY_OPS = frozenset({'+', '-', '~', '!'})

def eval_unary(n: Tree, frame: Frame, eval_func: EvalFunc) -> JsValue:
    op_tok, operand = n.children
    op = str(op_tok)

    # typeof/void/delete parse but are not evaluated; the operand stays untouched
    if op not in UNARY_OPS:
        logger.warning("Unknown unary operator: %s", op)
        return FAIL

    value = eval_func(operand, frame)
    if value is FAIL:
        return FAIL

    match op:
        case '+':
            return to_number(value)
        case '-':
            num = to_number(value)
            if num == 0 and isinstance(num, int):
                return -0.0
            return -num
        case '~':
            return ~to_int32(value)
        case _:
            return not is_truthy(value)

def eval_binary(n: Tree, frame: Frame, eval_func: EvalFunc) -> JsValue:
    """Binary and logical operators. `&&`/`||` short-circuit on the left operand."""
    left_node, op_tok, right_node = n.children
    op = str(op_tok)

    left = eval_func(left_node, frame)
    if left is FAIL:
        return FAIL

    if op == '&&' and not is_truthy(left):
        return False
    if op == '||' and is_truthy(left):
        return left

    right = eval_func(right_node, frame)
    if right is FAIL:
        return FAIL

    return apply_binary_operator(op, left, right)

def apply_binary_operator(op: str, left: JsValue, right: JsValue) -> JsValue:
    match op:
        case '==':
            return loose_equals(left, right)
        case '!=':
            return not loose_equals(left, right)
        case '===':
            return strict_equals(left, right)
        case '!==':
            return not strict_equals(left, right)
        case '+':
            return js_add(left, right)
        case '-':
            return js_sub(left, right)
        case '*':
            return js_mul(left, right)
        case '/':
            return js_div(left, right)
        case '%':
            return js_mod(left, right)
        case '**':
            return js_pow(left, right)
        case '<' | '<=' | '>' | '>=':
            return js_compare(op, left, right)
        case '|':
            return to_int32(left) | to_int32(right)
        case '&':
            return to_int32(left) & to_int32(right)
        case '^':
            return to_int32(left) ^ to_int32(right)
        case '&&' | '||':
            return right

    logger.warning("Unknown binary operator: %s", op)
    return FAIL

def eval_conditional(n: Tree, frame: Frame, eval_func: EvalFunc) -> JsValue:
    """Ternary `a ? b : c` and `if` statements. A missing alternate yields undefined."""
    children = tree_children(n)

    test = eval_func(children[0], frame)
    if test is FAIL:
        return FAIL

    if is_truthy(test):
        return eval_func(children[1], frame)

    if len(children) > 2:
        return eval_func(children[2], frame)

    return UNDEFINED
