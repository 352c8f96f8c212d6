from __future__ import annotations

import logging
from typing import Callable, Optional

from .runtime import FAIL, UNDEFINED, Frame, JsRuntimeError, JsValue, init_stdlib
from .tree import Node, Tree, is_tree, node_meta, tree_label

from .eval.bind import eval_assign, eval_update
from .eval.blocks import eval_block, eval_declarator, eval_expr_stmt, eval_program, eval_var_decl
from .eval.chains import eval_call, eval_member, eval_new
from .eval.control import eval_return_stmt
from .eval.expr import eval_binary, eval_conditional, eval_unary
from .eval.fn import eval_arrow, eval_function, eval_function_decl
from .eval.literals import eval_literal, eval_tagged_template, eval_template, eval_template_chunk
from .eval.objects import eval_array, eval_object

logger = logging.getLogger(__name__)

EvalFunc = Callable[[Node, Frame], JsValue]

def _maybe_attach_location(exc: JsRuntimeError, node: Node) -> None:
    # the innermost node that carries a position wins
    if exc.js_meta is not None:
        return

    meta = node_meta(node)
    if meta is not None and getattr(meta, "line", None) is not None:
        exc.js_meta = meta

# ---------------- Public API ----------------

def eval_expr(ast: Node, frame: Optional[Frame]=None, source: Optional[str]=None) -> JsValue:
    init_stdlib()

    if frame is None:
        frame = Frame(source=source)
    elif source is not None:
        frame.source = source

    try:
        return eval_node(ast, frame)
    except JsRuntimeError as e:
        _maybe_attach_location(e, ast)
        raise

# ---------------- Core evaluator ----------------

def eval_node(n: Node, frame: Frame) -> JsValue:
    try:
        return _eval_node_inner(n, frame)
    except JsRuntimeError as e:
        _maybe_attach_location(e, n)
        raise

def _eval_node_inner(n: Node, frame: Frame) -> JsValue:
    if not is_tree(n):
        logger.warning("Failed to walk node, got %r", n)
        return FAIL

    handler = _NODE_DISPATCH.get(n.data)
    if handler is not None:
        return handler(n, frame)

    logger.warning("Failed to walk node, kind is %s", tree_label(n))
    return FAIL

# ---------------- Dispatch ----------------

def _eval_identifier(n: Tree, frame: Frame) -> JsValue:
    return frame.get(str(n.children[0].value))

def _eval_this(n: Tree, frame: Frame) -> JsValue:
    return frame.get("this")

_NODE_DISPATCH: dict[str, Callable[[Tree, Frame], JsValue]] = {
    'program': lambda n, frame: eval_program(n.children, frame, eval_node),
    'block': lambda n, frame: eval_block(n, frame, eval_node),
    'expr_stmt': lambda n, frame: eval_expr_stmt(n, frame, eval_node),
    'empty': lambda _, __: UNDEFINED,
    'var_decl': lambda n, frame: eval_var_decl(n, frame, eval_node),
    'declarator': lambda n, frame: eval_declarator(n, frame, eval_node),
    'function_decl': eval_function_decl,
    'function': eval_function,
    'arrow': eval_arrow,
    'if': lambda n, frame: eval_conditional(n, frame, eval_node),
    'conditional': lambda n, frame: eval_conditional(n, frame, eval_node),
    'return': lambda n, frame: eval_return_stmt(n, frame, eval_node),
    'literal': eval_literal,
    'identifier': _eval_identifier,
    'this': _eval_this,
    'unary': lambda n, frame: eval_unary(n, frame, eval_node),
    'binary': lambda n, frame: eval_binary(n, frame, eval_node),
    'logical': lambda n, frame: eval_binary(n, frame, eval_node),
    'array': lambda n, frame: eval_array(n, frame, eval_node),
    'object': lambda n, frame: eval_object(n, frame, eval_node),
    'member': lambda n, frame: eval_member(n, frame, eval_node),
    'assign': lambda n, frame: eval_assign(n, frame, eval_node),
    'update': lambda n, frame: eval_update(n, frame, eval_node),
    'call': lambda n, frame: eval_call(n, frame, eval_node),
    'new': lambda n, frame: eval_new(n, frame, eval_node),
    'template': lambda n, frame: eval_template(n, frame, eval_node),
    'template_chunk': eval_template_chunk,
    'tagged_template': lambda n, frame: eval_tagged_template(n, frame, eval_node),
}
