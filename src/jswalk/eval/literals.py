from __future__ import annotations

import logging
from typing import List

from lark import Tree

from ..runtime import FAIL, UNDEFINED, Frame, JsValue
from ..tree import tree_children, tree_label
from ..utils import format_value, to_string
from .chains import call_value
from .common import EvalFunc, token_number, token_regex, token_string

logger = logging.getLogger(__name__)

def eval_literal(n: Tree, frame: Frame) -> JsValue:
    tok = n.children[0]

    match tok.type:
        case 'NUMBER':
            return token_number(tok)
        case 'STRING':
            return token_string(tok)
        case 'REGEX':
            return token_regex(tok)
        case 'TRUE':
            return True
        case 'FALSE':
            return False
        case 'NULL':
            return None

    logger.warning("Unknown literal token %s", tok.type)
    return FAIL

def eval_template_chunk(n: Tree, frame: Frame) -> str:
    return str(n.children[0].value)

def eval_template(n: Tree, frame: Frame, eval_func: EvalFunc) -> str:
    parts: List[str] = []

    for part in tree_children(n):
        value = eval_func(part, frame)
        # a failed interpolation renders as "undefined" instead of failing the literal
        parts.append("undefined" if value is FAIL else to_string(value))

    return "".join(parts)

def eval_tagged_template(n: Tree, frame: Frame, eval_func: EvalFunc) -> JsValue:
    tag_node, template = n.children

    tag = eval_func(tag_node, frame)
    if tag is FAIL:
        return FAIL

    if not callable(tag):
        logger.warning("Template tag %s is not a function", format_value(tag))
        return FAIL

    chunks: List[str] = []
    values: List[JsValue] = []

    for part in tree_children(template):
        if tree_label(part) == 'template_chunk':
            chunks.append(eval_template_chunk(part, frame))
            continue

        value = eval_func(part, frame)
        values.append(UNDEFINED if value is FAIL else value)

    return call_value(tag, [chunks, *values])
