from __future__ import annotations

from lark import Tree

from ..runtime import FAIL, UNDEFINED, Frame, JsReturnSignal, JsValue
from ..tree import tree_children
from .common import EvalFunc

def eval_return_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> JsValue:
    children = tree_children(n)
    value = eval_func(children[0], frame) if children else UNDEFINED

    # a failed return value fails the statement, and with it the enclosing call
    if value is FAIL:
        return FAIL

    if frame.function_frame() is None:
        return value

    raise JsReturnSignal(value)
