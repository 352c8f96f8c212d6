from __future__ import annotations

import logging
from typing import Any, Iterable, List

from lark import Tree

from ..runtime import UNDEFINED, Frame, JsFunction, JsRuntimeError, JsValue
from ..tree import is_token, tree_children, tree_label
from .common import expect_ident_token, ident_token_value

logger = logging.getLogger(__name__)

def extract_param_names(params_node: Any) -> List[str]:
    names: List[str] = []

    for p in tree_children(params_node):
        name = ident_token_value(p)
        if name is None:
            raise JsRuntimeError(f"Unsupported parameter node: {p}")
        names.append(name)

    return names

def eval_function(n: Tree, frame: Frame) -> JsFunction:
    """Function expression. A named one can refer to itself through its own name."""
    children = tree_children(n)
    params_node, body = children[0], children[1]
    name = ident_token_value(children[2]) if len(children) > 2 else None

    fn = JsFunction(params=extract_param_names(params_node), body=body, frame=frame, name=name)

    if name is not None:
        own = Frame(parent=frame)
        own.define(name, fn)
        fn.frame = own

    return fn

def eval_arrow(n: Tree, frame: Frame) -> JsFunction:
    params_node, body = n.children
    return JsFunction(params=extract_param_names(params_node), body=body, frame=frame, kind="arrow")

def eval_function_decl(n: Tree, frame: Frame) -> JsValue:
    name_tok, params_node, body = n.children
    name = expect_ident_token(name_tok, "Function name")

    # already bound by hoisting: keep that value so earlier aliases stay identical
    existing = frame.vars.get(name)
    if isinstance(existing, JsFunction) and existing.body is body and existing.frame is frame:
        return UNDEFINED

    frame.define(name, JsFunction(params=extract_param_names(params_node), body=body, frame=frame, name=name))
    return UNDEFINED

def hoist_declarations(statements: Iterable[Any], frame: Frame) -> None:
    """Bind every function declaration of a statement list before the list runs."""
    for stmt in statements:
        if is_token(stmt) or tree_label(stmt) != 'function_decl':
            continue

        eval_function_decl(stmt, frame)
        logger.debug("hoisted function %s", stmt.children[0])
