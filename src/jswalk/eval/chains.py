from __future__ import annotations

import logging
from typing import Any, List

from lark import Tree

from ..runtime import FAIL, UNDEFINED, Frame, JsFunction, JsValue, call_function, construct
from ..tree import Node, is_token, tree_children, tree_label
from ..utils import format_value, is_nullish, is_truthy
from .common import EvalFunc, spread_items
from .mutation import get_property

logger = logging.getLogger(__name__)

def member_key(obj: JsValue, prop_node: Node, frame: Frame, eval_func: EvalFunc) -> JsValue:
    """Resolve the property of `obj.prop` / `obj[expr]`, or FAIL when the access is not allowed."""
    if callable(obj):
        logger.warning("Member access on a function value is not supported")
        return FAIL

    if is_token(prop_node):
        name = str(prop_node.value)
        if is_nullish(obj):
            logger.warning("Cannot read property '%s' of %s", name, format_value(obj))
            return FAIL
        return name

    key = eval_func(prop_node, frame)
    if key is FAIL:
        return FAIL

    if not is_truthy(obj):
        logger.warning("Cannot read computed property of %s", format_value(obj))
        return FAIL

    return key

def eval_member(n: Tree, frame: Frame, eval_func: EvalFunc) -> JsValue:
    obj_node, prop_node = n.children

    obj = eval_func(obj_node, frame)
    if obj is FAIL:
        return FAIL

    key = member_key(obj, prop_node, frame, eval_func)
    if key is FAIL:
        return FAIL

    return get_property(obj, key)

def eval_args_node(args_node: Any, frame: Frame, eval_func: EvalFunc, *, strict: bool = True) -> List[JsValue] | Any:
    """
    Evaluate call arguments left to right, expanding `...spread`.
    strict: any failing argument fails the whole list (calls)
    otherwise: failures degrade to undefined, bad spreads are dropped (new)
    """
    args: List[JsValue] = []

    for arg in tree_children(args_node):
        if tree_label(arg) == 'spread':
            value = eval_func(arg.children[0], frame)
            items = None if value is FAIL else spread_items(value)

            if items is None:
                logger.warning("Spread argument is not iterable: %s", format_value(value))
                if strict:
                    return FAIL
                continue

            args.extend(items)
            continue

        value = eval_func(arg, frame)
        if value is FAIL:
            if strict:
                return FAIL
            value = UNDEFINED

        args.append(value)

    return args

def call_value(callee: Any, args: List[JsValue], this: Any = None) -> JsValue:
    """
    Invoke `callee` with `args`. Only interpreted functions see `this`.

    Python callables are called with the arguments alone, even when reached
    through a member such as `obj.f()`: a lambda stored in a context dict never
    receives `obj`. Bound methods and `BuiltinMethod` already hold their receiver.
    """
    match callee:
        case JsFunction():
            return call_function(callee, args, this=this)
        case _:
            # host callables and bound builtins carry their own receiver
            return callee(*args)

def eval_call(n: Tree, frame: Frame, eval_func: EvalFunc) -> JsValue:
    callee_node, args_node = n.children
    this: Any = None

    if tree_label(callee_node) == 'member':
        obj_node, prop_node = callee_node.children
        obj = eval_func(obj_node, frame)
        if obj is FAIL:
            return FAIL

        key = member_key(obj, prop_node, frame, eval_func)
        if key is FAIL:
            return FAIL

        callee = get_property(obj, key)
        this = obj
    else:
        callee = eval_func(callee_node, frame)

    if callee is FAIL:
        logger.warning("Failed to resolve call callee")
        return FAIL

    if not callable(callee):
        logger.warning("%s is not a function", format_value(callee))
        return FAIL

    args = eval_args_node(args_node, frame, eval_func)
    if args is FAIL:
        return FAIL

    return call_value(callee, args, this)

def eval_new(n: Tree, frame: Frame, eval_func: EvalFunc) -> JsValue:
    ctor_node, args_node = n.children

    ctor = eval_func(ctor_node, frame)
    if ctor is FAIL:
        return FAIL

    args = eval_args_node(args_node, frame, eval_func, strict=False)
    return construct(ctor, args)
