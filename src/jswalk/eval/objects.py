from __future__ import annotations

import logging
from typing import Dict, List

from lark import Tree

from ..runtime import FAIL, UNDEFINED, Frame, JsFunction, JsValue
from ..tree import Node, is_token, tree_children, tree_label
from ..utils import format_value, to_property_key
from .common import EvalFunc, spread_items, token_number, token_string

logger = logging.getLogger(__name__)

def eval_array(n: Tree, frame: Frame, eval_func: EvalFunc) -> List[JsValue]:
    """
    Array literal. The literal itself never fails:
    - a failed element becomes an undefined slot
    - holes (`[1, , 3]`) are undefined
    - `...x` expands lists and strings; anything else is dropped with a warning
    """
    result: List[JsValue] = []

    for element in tree_children(n):
        label = tree_label(element)

        if label == 'hole':
            result.append(UNDEFINED)
            continue

        if label == 'spread':
            value = eval_func(element.children[0], frame)
            items = None if value is FAIL else spread_items(value)

            if items is None:
                logger.warning("Cannot spread %s into an array", format_value(value))
                continue

            result.extend(items)
            continue

        value = eval_func(element, frame)
        result.append(UNDEFINED if value is FAIL else value)

    return result

def eval_key(key_node: Node, frame: Frame, eval_func: EvalFunc) -> JsValue:
    if is_token(key_node):
        match key_node.type:
            case 'STRING':
                return token_string(key_node)
            case 'NUMBER':
                return to_property_key(token_number(key_node))
            case _:
                return str(key_node.value)

    value = eval_func(key_node.children[0], frame)
    if value is FAIL:
        return FAIL

    return to_property_key(value)

def eval_object(n: Tree, frame: Frame, eval_func: EvalFunc) -> Dict[str, JsValue]:
    result: Dict[str, JsValue] = {}

    for prop in tree_children(n):
        key_node, value_node = prop.children

        key = eval_key(key_node, frame, eval_func)
        if key is FAIL:
            logger.warning("Dropping object property with an unresolved computed key")
            continue

        value = eval_func(value_node, frame)

        if value is FAIL:
            value = UNDEFINED
        elif isinstance(value, JsFunction) and value.name is None and tree_label(value_node) in ('function', 'arrow'):
            value.name = key

        result[key] = value

    return result
