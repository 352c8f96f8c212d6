from __future__ import annotations

from typing import Any, List

from lark import Tree

from ..runtime import FAIL, UNDEFINED, Frame, JsValue
from ..tree import tree_children
from .common import EvalFunc, expect_ident_token
from .fn import hoist_declarations

def eval_program(children: List[Any], frame: Frame, eval_func: EvalFunc) -> JsValue:
    """Run a statement list against one frame, returning the last statement's value."""
    hoist_declarations(children, frame)
    result: JsValue = UNDEFINED

    for child in children:
        result = eval_func(child, frame)

    return result

def eval_block(n: Tree, frame: Frame, eval_func: EvalFunc) -> JsValue:
    # blocks do not open a scope; let/const are function scoped
    return eval_program(tree_children(n), frame, eval_func)

def eval_expr_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> JsValue:
    return eval_func(n.children[0], frame)

def eval_var_decl(n: Tree, frame: Frame, eval_func: EvalFunc) -> JsValue:
    for declarator in n.children[1:]:
        eval_func(declarator, frame)

    return UNDEFINED

def eval_declarator(n: Tree, frame: Frame, eval_func: EvalFunc) -> JsValue:
    children = tree_children(n)
    name = expect_ident_token(children[0], "Variable name")

    value = eval_func(children[1], frame) if len(children) > 1 else UNDEFINED
    if value is FAIL:
        value = UNDEFINED

    frame.define(name, value)
    return value
