from __future__ import annotations

import re
from typing import Any, Callable, List, Optional

from lark import Token

from ..lexer_rd import cook_escapes
from ..runtime import Frame, JsRegExp, JsRuntimeError, JsValue
from ..tree import Node, is_token
from ..utils import to_number

EvalFunc = Callable[[Node, Frame], JsValue]

_NAMED_GROUP_RE = re.compile(r'(?<!\\)\(\?<(?![=!])')
_NAMED_BACKREF_RE = re.compile(r'\\k<([A-Za-z_$][\w$]*)>')
_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}
_RECORDED_FLAGS = "dguy"

def ident_token_value(node: Any) -> Optional[str]:
    if is_token(node) and node.type == 'IDENT':
        return str(node.value)

    return None

def expect_ident_token(node: Any, context: str) -> str:
    name = ident_token_value(node)
    if name is None:
        raise JsRuntimeError(f"{context} must be an identifier")

    return name

def token_number(token: Token) -> int | float:
    return to_number(str(token.value))

def token_string(token: Token) -> str:
    raw = str(token.value)

    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in ('"', "'"):
        raw = raw[1:-1]

    return cook_escapes(raw)

def token_regex(token: Token) -> JsRegExp:
    raw = str(token.value)
    end = raw.rindex('/')
    return compile_regexp(raw[1:end], raw[end + 1:])

def compile_regexp(source: str, flags: str) -> JsRegExp:
    """Build a JsRegExp, translating the few pattern spellings `re` writes differently."""
    py_flags = 0

    for ch in flags:
        if ch in _REGEX_FLAGS:
            py_flags |= _REGEX_FLAGS[ch]
        elif ch not in _RECORDED_FLAGS:
            raise JsRuntimeError(f"Invalid regular expression flags '{flags}'")

    translated = _NAMED_GROUP_RE.sub('(?P<', source)
    translated = _NAMED_BACKREF_RE.sub(r'(?P=\1)', translated)

    try:
        pattern = re.compile(translated, py_flags)
    except re.error as exc:
        raise JsRuntimeError(f"Invalid regular expression: /{source}/: {exc}") from None

    return JsRegExp(source, flags, pattern)

def spread_items(value: JsValue) -> Optional[List[JsValue]]:
    """Items produced by `...value`, or None when the value is not iterable."""
    if isinstance(value, (list, tuple, str)):
        return list(value)

    return None
