"""Builtin methods for arrays, strings, numbers, objects and regexes."""

from __future__ import annotations

import functools
import math
import re
from typing import Any, Dict, List, Optional

from .runtime import (
    register_array,
    register_number,
    register_object,
    register_regex,
    register_string,
    invoke_callable,
)
from .types import JsRegExp, JsTypeError, JsValue, UNDEFINED
from .utils import (
    is_nullish,
    is_truthy,
    number_to_string,
    strict_equals,
    to_number,
    to_property_key,
    to_string,
    value_in_list,
)

_REPLACEMENT_RE = re.compile(r"\$(\$|&|`|'|\d{1,2})")

def _arg(args: List[JsValue], idx: int) -> JsValue:
    return args[idx] if idx < len(args) else UNDEFINED

def _to_integer(value: JsValue) -> int | float:
    n = to_number(value)
    if isinstance(n, float):
        if math.isnan(n):
            return 0
        if math.isinf(n):
            return n
        return int(n)
    return n

def _relative_index(value: JsValue, length: int, default: int) -> int:
    """slice()-style index: negatives count from the end, result clamped to [0, length]."""
    if value is UNDEFINED:
        return default

    n = _to_integer(value)
    if n < 0:
        return int(max(length + n, 0))
    return int(min(n, length))

def _clamped_index(value: JsValue, length: int, default: int) -> int:
    if value is UNDEFINED:
        return default
    return int(min(max(_to_integer(value), 0), length))

def _callback(method: str, args: List[JsValue]) -> JsValue:
    fn = _arg(args, 0)
    if not callable(fn):
        raise JsTypeError(f"{to_string(fn)} is not a function (in {method})")
    return fn

# ---------- arrays ----------

@register_array("push")
def _array_push(recv: list, args: List[JsValue]) -> int:
    recv.extend(args)
    return len(recv)

@register_array("pop")
def _array_pop(recv: list, args: List[JsValue]) -> JsValue:
    return recv.pop() if recv else UNDEFINED

@register_array("shift")
def _array_shift(recv: list, args: List[JsValue]) -> JsValue:
    return recv.pop(0) if recv else UNDEFINED

@register_array("unshift")
def _array_unshift(recv: list, args: List[JsValue]) -> int:
    recv[0:0] = args
    return len(recv)

@register_array("slice")
def _array_slice(recv: list, args: List[JsValue]) -> list:
    start = _relative_index(_arg(args, 0), len(recv), 0)
    end = _relative_index(_arg(args, 1), len(recv), len(recv))
    return recv[start:end]

@register_array("splice")
def _array_splice(recv: list, args: List[JsValue]) -> list:
    start = _relative_index(_arg(args, 0), len(recv), 0)
    if len(args) < 2:
        count = len(recv) - start
    else:
        count = _clamped_index(args[1], len(recv) - start, 0)

    removed = recv[start:start + count]
    recv[start:start + count] = args[2:]
    return removed

@register_array("concat")
def _array_concat(recv: list, args: List[JsValue]) -> list:
    result = list(recv)
    for arg in args:
        if isinstance(arg, list):
            result.extend(arg)
        else:
            result.append(arg)
    return result

@register_array("join")
def _array_join(recv: list, args: List[JsValue]) -> str:
    sep = _arg(args, 0)
    sep_text = "," if sep is UNDEFINED else to_string(sep)
    return sep_text.join("" if is_nullish(item) else to_string(item) for item in recv)

@register_array("indexOf")
def _array_index_of(recv: list, args: List[JsValue]) -> int:
    needle = _arg(args, 0)
    start = _relative_index(_arg(args, 1), len(recv), 0)

    for idx in range(start, len(recv)):
        if strict_equals(recv[idx], needle):
            return idx
    return -1

@register_array("includes")
def _array_includes(recv: list, args: List[JsValue]) -> bool:
    return value_in_list(recv, _arg(args, 0))

@register_array("reverse")
def _array_reverse(recv: list, args: List[JsValue]) -> list:
    recv.reverse()
    return recv

@register_array("map")
def _array_map(recv: list, args: List[JsValue]) -> list:
    fn = _callback("map", args)
    return [invoke_callable(fn, [item, idx, recv]) for idx, item in enumerate(list(recv))]

@register_array("filter")
def _array_filter(recv: list, args: List[JsValue]) -> list:
    fn = _callback("filter", args)
    return [item for idx, item in enumerate(list(recv)) if is_truthy(invoke_callable(fn, [item, idx, recv]))]

@register_array("forEach")
def _array_for_each(recv: list, args: List[JsValue]) -> JsValue:
    fn = _callback("forEach", args)
    for idx, item in enumerate(list(recv)):
        invoke_callable(fn, [item, idx, recv])
    return UNDEFINED

@register_array("reduce")
def _array_reduce(recv: list, args: List[JsValue]) -> JsValue:
    fn = _callback("reduce", args)
    items = list(recv)

    if len(args) >= 2:
        acc, start = args[1], 0
    elif items:
        acc, start = items[0], 1
    else:
        raise JsTypeError("Reduce of empty array with no initial value")

    for idx in range(start, len(items)):
        acc = invoke_callable(fn, [acc, items[idx], idx, recv])
    return acc

@register_array("find")
def _array_find(recv: list, args: List[JsValue]) -> JsValue:
    fn = _callback("find", args)
    for idx, item in enumerate(list(recv)):
        if is_truthy(invoke_callable(fn, [item, idx, recv])):
            return item
    return UNDEFINED

@register_array("findIndex")
def _array_find_index(recv: list, args: List[JsValue]) -> int:
    fn = _callback("findIndex", args)
    for idx, item in enumerate(list(recv)):
        if is_truthy(invoke_callable(fn, [item, idx, recv])):
            return idx
    return -1

@register_array("some")
def _array_some(recv: list, args: List[JsValue]) -> bool:
    fn = _callback("some", args)
    return any(is_truthy(invoke_callable(fn, [item, idx, recv])) for idx, item in enumerate(list(recv)))

@register_array("every")
def _array_every(recv: list, args: List[JsValue]) -> bool:
    fn = _callback("every", args)
    return all(is_truthy(invoke_callable(fn, [item, idx, recv])) for idx, item in enumerate(list(recv)))

@register_array("sort")
def _array_sort(recv: list, args: List[JsValue]) -> list:
    cmp = _arg(args, 0)
    present = [item for item in recv if item is not UNDEFINED]
    missing = len(recv) - len(present)

    if cmp is UNDEFINED:
        present.sort(key=to_string)
    else:
        def _compare(a: JsValue, b: JsValue) -> int:
            n = to_number(invoke_callable(cmp, [a, b]))
            if math.isnan(n) or n == 0:
                return 0
            return -1 if n < 0 else 1

        present.sort(key=functools.cmp_to_key(_compare))

    recv[:] = present + [UNDEFINED] * missing
    return recv

# ---------- strings ----------

@register_string("split")
def _string_split(recv: str, args: List[JsValue]) -> list:
    sep = _arg(args, 0)
    limit = _arg(args, 1)

    if sep is UNDEFINED:
        parts: List[Any] = [recv]
    elif isinstance(sep, JsRegExp):
        parts = [UNDEFINED if part is None else part for part in sep.pattern.split(recv)]
    else:
        sep_text = to_string(sep)
        parts = list(recv) if sep_text == "" else recv.split(sep_text)

    if limit is not UNDEFINED:
        parts = parts[:max(int(_to_integer(limit)), 0)]

    return parts

@register_string("toUpperCase")
def _string_upper(recv: str, args: List[JsValue]) -> str:
    return recv.upper()

@register_string("toLowerCase")
def _string_lower(recv: str, args: List[JsValue]) -> str:
    return recv.lower()

@register_string("trim")
def _string_trim(recv: str, args: List[JsValue]) -> str:
    return recv.strip()

@register_string("trimStart")
def _string_trim_start(recv: str, args: List[JsValue]) -> str:
    return recv.lstrip()

@register_string("trimEnd")
def _string_trim_end(recv: str, args: List[JsValue]) -> str:
    return recv.rstrip()

@register_string("includes")
def _string_includes(recv: str, args: List[JsValue]) -> bool:
    start = _clamped_index(_arg(args, 1), len(recv), 0)
    return to_string(_arg(args, 0)) in recv[start:]

@register_string("indexOf")
def _string_index_of(recv: str, args: List[JsValue]) -> int:
    start = _clamped_index(_arg(args, 1), len(recv), 0)
    return recv.find(to_string(_arg(args, 0)), start)

@register_string("startsWith")
def _string_starts_with(recv: str, args: List[JsValue]) -> bool:
    start = _clamped_index(_arg(args, 1), len(recv), 0)
    return recv.startswith(to_string(_arg(args, 0)), start)

@register_string("endsWith")
def _string_ends_with(recv: str, args: List[JsValue]) -> bool:
    end = _clamped_index(_arg(args, 1), len(recv), len(recv))
    return recv[:end].endswith(to_string(_arg(args, 0)))

@register_string("slice")
def _string_slice(recv: str, args: List[JsValue]) -> str:
    start = _relative_index(_arg(args, 0), len(recv), 0)
    end = _relative_index(_arg(args, 1), len(recv), len(recv))
    return recv[start:end]

@register_string("substring")
def _string_substring(recv: str, args: List[JsValue]) -> str:
    start = _clamped_index(_arg(args, 0), len(recv), 0)
    end = _clamped_index(_arg(args, 1), len(recv), len(recv))
    if start > end:
        start, end = end, start
    return recv[start:end]

@register_string("charAt")
def _string_char_at(recv: str, args: List[JsValue]) -> str:
    idx = _to_integer(_arg(args, 0))
    return recv[int(idx)] if 0 <= idx < len(recv) else ""

@register_string("charCodeAt")
def _string_char_code_at(recv: str, args: List[JsValue]) -> int | float:
    idx = _to_integer(_arg(args, 0))
    return ord(recv[int(idx)]) if 0 <= idx < len(recv) else math.nan

def _expand_replacement(template: str, match: 're.Match[str]') -> str:
    def _sub(m: 're.Match[str]') -> str:
        tok = m.group(1)
        if tok == "$":
            return "$"
        if tok == "&":
            return match.group(0)
        if tok == "`":
            return match.string[:match.start()]
        if tok == "'":
            return match.string[match.end():]

        idx = int(tok)
        if 1 <= idx <= match.re.groups:
            return match.group(idx) or ""
        return m.group(0)

    return _REPLACEMENT_RE.sub(_sub, template)

def _replace(recv: str, args: List[JsValue], replace_all: bool) -> str:
    pattern = _arg(args, 0)
    replacement = _arg(args, 1)

    if isinstance(pattern, JsRegExp):
        if replace_all and not pattern.is_global:
            raise JsTypeError("replaceAll must be called with a global RegExp")
        regex = pattern.pattern
        count = 0 if pattern.is_global else 1
    else:
        regex = re.compile(re.escape(to_string(pattern)))
        count = 0 if replace_all else 1

    def _render(m: 're.Match[str]') -> str:
        if callable(replacement):
            groups = [UNDEFINED if g is None else g for g in m.groups()]
            return to_string(invoke_callable(replacement, [m.group(0), *groups, m.start(), recv]))
        return _expand_replacement(to_string(replacement), m)

    return regex.sub(_render, recv, count=count)

@register_string("replace")
def _string_replace(recv: str, args: List[JsValue]) -> str:
    return _replace(recv, args, replace_all=False)

@register_string("replaceAll")
def _string_replace_all(recv: str, args: List[JsValue]) -> str:
    return _replace(recv, args, replace_all=True)

@register_string("repeat")
def _string_repeat(recv: str, args: List[JsValue]) -> str:
    count = _to_integer(_arg(args, 0))
    if count < 0 or math.isinf(count):
        raise JsTypeError(f"Invalid count value: {to_string(count)}")
    return recv * int(count)

def _padding(recv: str, args: List[JsValue]) -> str:
    target = _to_integer(_arg(args, 0))
    fill = _arg(args, 1)
    fill_text = " " if fill is UNDEFINED else to_string(fill)
    missing = int(target) - len(recv) if not math.isinf(target) else 0

    if missing <= 0 or not fill_text:
        return ""

    repeats = missing // len(fill_text) + 1
    return (fill_text * repeats)[:missing]

@register_string("padStart")
def _string_pad_start(recv: str, args: List[JsValue]) -> str:
    return _padding(recv, args) + recv

@register_string("padEnd")
def _string_pad_end(recv: str, args: List[JsValue]) -> str:
    return recv + _padding(recv, args)

@register_string("concat")
def _string_concat(recv: str, args: List[JsValue]) -> str:
    return recv + "".join(to_string(arg) for arg in args)

# ---------- numbers ----------

@register_number("toFixed")
def _number_to_fixed(recv: int | float, args: List[JsValue]) -> str:
    digits = int(_to_integer(_arg(args, 0)))
    if not 0 <= digits <= 100:
        raise JsTypeError("toFixed() digits argument must be between 0 and 100")
    if isinstance(recv, float) and (math.isnan(recv) or math.isinf(recv)):
        return number_to_string(recv)
    return f"{recv:.{digits}f}"

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

@register_number("toString")
def _number_to_string(recv: int | float, args: List[JsValue]) -> str:
    radix_arg = _arg(args, 0)
    radix = 10 if radix_arg is UNDEFINED else int(_to_integer(radix_arg))

    if not 2 <= radix <= 36:
        raise JsTypeError("toString() radix must be between 2 and 36")

    if radix == 10 or not float(recv).is_integer():
        return number_to_string(recv)

    n = int(recv)
    if n == 0:
        return "0"

    digits = []
    value = abs(n)
    while value:
        value, rem = divmod(value, radix)
        digits.append(_DIGITS[rem])

    return ("-" if n < 0 else "") + "".join(reversed(digits))

# ---------- objects ----------

@register_object("hasOwnProperty")
def _object_has_own_property(recv: Dict[str, JsValue], args: List[JsValue]) -> bool:
    return to_property_key(_arg(args, 0)) in recv

# ---------- regexes ----------

@register_regex("test")
def _regex_test(recv: JsRegExp, args: List[JsValue]) -> bool:
    return recv.pattern.search(to_string(_arg(args, 0))) is not None

@register_regex("exec")
def _regex_exec(recv: JsRegExp, args: List[JsValue]) -> Optional[list]:
    m = recv.pattern.search(to_string(_arg(args, 0)))
    if m is None:
        return None
    return [m.group(0), *(UNDEFINED if g is None else g for g in m.groups())]
