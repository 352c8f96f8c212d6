from __future__ import annotations

import math
import os
import re
from typing import Any, List, Optional, Set

from .types import JsFunction, JsRegExp, UNDEFINED

MAX_SAFE_INTEGER = 2 ** 53 - 1

_NUMERIC_LITERAL_RE = re.compile(r'[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)')
_RADIX_LITERAL_RE = re.compile(r'0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+')
_EXPONENT_RE = re.compile(r'e([+-])0*(\d)')

# ---------- configuration ----------

def debug_py_trace_enabled() -> bool:
    return os.getenv("JSWALK_DEBUG_PY_TRACE", "").strip().lower() in ("1", "true", "yes", "on")

def log_level_from_env(default: str = "WARNING") -> str:
    return os.getenv("JSWALK_LOG_LEVEL", default).strip().upper() or default

# ---------- type predicates ----------

def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)

def is_nullish(value: Any) -> bool:
    return value is None or value is UNDEFINED

def js_type(value: Any) -> str:
    """Type category used by the equality rules."""
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, dict, JsRegExp)):
        return "object"
    if callable(value):
        return "function"
    return "object"

# ---------- coercions ----------

def to_number(value: Any) -> int | float:
    if value is UNDEFINED:
        return math.nan
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if is_number(value):
        return value
    if isinstance(value, str):
        return _string_to_number(value)
    if isinstance(value, list):
        return to_number(to_string(value))
    return math.nan

def _string_to_number(text: str) -> int | float:
    s = text.strip()

    if not s:
        return 0

    if _RADIX_LITERAL_RE.fullmatch(s):
        return int(s, 0)

    if s in ("Infinity", "+Infinity"):
        return math.inf
    if s == "-Infinity":
        return -math.inf

    if not _NUMERIC_LITERAL_RE.fullmatch(s):
        return math.nan

    if s.lstrip("+-").isdigit():
        return _normalize(int(s))

    return float(s)

def to_int32(value: Any) -> int:
    n = to_number(value)

    if isinstance(n, float):
        if math.isnan(n) or math.isinf(n):
            return 0
        n = int(n)

    n &= 0xFFFFFFFF
    return n - 0x100000000 if n >= 0x80000000 else n

def number_to_string(n: int | float) -> str:
    if isinstance(n, int):
        return str(n)

    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "Infinity" if n > 0 else "-Infinity"
    if n.is_integer() and abs(n) < 1e21:
        return str(int(n))

    return _EXPONENT_RE.sub(r'e\1\2', repr(n))

def to_string(value: Any, _seen: Optional[Set[int]] = None) -> str:
    if isinstance(value, str):
        return value
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return number_to_string(value)

    if isinstance(value, list):
        seen = _seen if _seen is not None else set()
        if id(value) in seen:
            return ""
        seen.add(id(value))
        try:
            return ",".join("" if is_nullish(item) else to_string(item, seen) for item in value)
        finally:
            seen.discard(id(value))

    if isinstance(value, dict):
        return "[object Object]"
    if isinstance(value, JsRegExp):
        return repr(value)
    if isinstance(value, JsFunction):
        return f"function {value.name or ''}({', '.join(value.params)}) {{ [interpreted code] }}"
    if callable(value):
        name = getattr(value, "__name__", "")
        return f"function {name}() {{ [native code] }}"

    return str(value)

def to_primitive(value: Any) -> Any:
    if value is UNDEFINED or value is None or isinstance(value, (bool, int, float, str)):
        return value
    return to_string(value)

def to_property_key(value: Any) -> str:
    """Object keys are strings: 1 -> "1", 1.0 -> "1", true -> "true"."""
    return to_string(value)

def array_index(key: Any) -> Optional[int]:
    """Non-negative integer index for a list, or None when `key` is not one."""
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key if key >= 0 else None
    if isinstance(key, float):
        return int(key) if key.is_integer() and key >= 0 else None
    if isinstance(key, str) and key.isdigit() and (key == "0" or not key.startswith("0")):
        return int(key)
    return None

def is_truthy(value: Any) -> bool:
    if value is UNDEFINED or value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value != ""
    return True

# ---------- equality & ordering ----------

def strict_equals(a: Any, b: Any) -> bool:
    ta, tb = js_type(a), js_type(b)

    if ta != tb:
        return False
    if ta in ("undefined", "null"):
        return True
    if ta in ("boolean", "number", "string"):
        return a == b

    return a is b

def loose_equals(a: Any, b: Any) -> bool:
    ta, tb = js_type(a), js_type(b)

    if ta == tb:
        return strict_equals(a, b)
    if is_nullish(a) and is_nullish(b):
        return True
    if is_nullish(a) or is_nullish(b):
        return False
    if ta == "boolean":
        return loose_equals(int(a), b)
    if tb == "boolean":
        return loose_equals(a, int(b))
    if ta == "number" and tb == "string":
        return a == to_number(b)
    if ta == "string" and tb == "number":
        return to_number(a) == b
    if ta in ("object", "function") and tb in ("number", "string"):
        return loose_equals(to_primitive(a), b)
    if tb in ("object", "function") and ta in ("number", "string"):
        return loose_equals(a, to_primitive(b))

    return False

def js_compare(op: str, a: Any, b: Any) -> bool:
    pa, pb = to_primitive(a), to_primitive(b)

    if isinstance(pa, str) and isinstance(pb, str):
        x: Any = pa
        y: Any = pb
    else:
        x, y = to_number(pa), to_number(pb)
        if math.isnan(x) or math.isnan(y):
            return False

    match op:
        case '<':
            return x < y
        case '<=':
            return x <= y
        case '>':
            return x > y
        case '>=':
            return x >= y

    raise ValueError(f"not an ordering operator: {op}")

def value_in_list(seq: List[Any], value: Any) -> bool:
    """SameValueZero membership (NaN finds NaN)."""
    if is_number(value) and math.isnan(value):
        return any(is_number(item) and math.isnan(item) for item in seq)

    return any(strict_equals(item, value) for item in seq)

# ---------- arithmetic ----------

def _normalize(n: int | float) -> int | float:
    """Ints beyond the exactly representable range become floats."""
    if isinstance(n, int) and abs(n) > MAX_SAFE_INTEGER:
        try:
            return float(n)
        except OverflowError:
            return math.inf if n > 0 else -math.inf
    return n

def js_add(a: Any, b: Any) -> Any:
    pa, pb = to_primitive(a), to_primitive(b)

    if isinstance(pa, str) or isinstance(pb, str):
        return to_string(pa) + to_string(pb)

    return _normalize(to_number(pa) + to_number(pb))

def js_sub(a: Any, b: Any) -> int | float:
    return _normalize(to_number(a) - to_number(b))

def js_mul(a: Any, b: Any) -> int | float:
    x, y = to_number(a), to_number(b)

    if isinstance(x, int) and isinstance(y, int):
        return _normalize(x * y)

    return float(x) * float(y)

def js_div(a: Any, b: Any) -> int | float:
    x, y = to_number(a), to_number(b)

    if y == 0:
        if x == 0 or math.isnan(x):
            return math.nan
        sign = math.copysign(1.0, x) * math.copysign(1.0, y)
        return math.copysign(math.inf, sign)

    result = x / y

    if isinstance(x, int) and isinstance(y, int) and result.is_integer():
        return _normalize(x // y)

    return result

def js_mod(a: Any, b: Any) -> int | float:
    x, y = to_number(a), to_number(b)

    if math.isnan(x) or math.isnan(y) or math.isinf(x) or y == 0:
        return math.nan
    if math.isinf(y):
        return x

    if isinstance(x, int) and isinstance(y, int):
        r = abs(x) % abs(y)
        return -r if x < 0 else r

    return math.fmod(x, y)

def js_pow(a: Any, b: Any) -> int | float:
    x, y = to_number(a), to_number(b)

    if math.isnan(y):
        return math.nan
    if abs(x) == 1 and math.isinf(y):
        return math.nan

    if isinstance(x, int) and isinstance(y, int) and 0 <= y <= 64:
        result = x ** y
        if abs(result) <= MAX_SAFE_INTEGER:
            return result

    if x == 0 and y < 0:
        odd = float(y).is_integer() and int(y) % 2 == 1
        return -math.inf if odd and math.copysign(1.0, x) < 0 else math.inf

    try:
        return math.pow(x, y)
    except OverflowError:
        odd = float(y).is_integer() and int(y) % 2 == 1
        return -math.inf if x < 0 and odd else math.inf
    except ValueError:
        return math.nan

# ---------- display ----------

_PLAIN_KEY_RE = re.compile(r'[A-Za-z_$][A-Za-z0-9_$]*')

def format_value(value: Any, _seen: Optional[Set[int]] = None) -> str:
    """Render a value the way an interactive JS console would."""
    if isinstance(value, str):
        return repr(value)
    if isinstance(value, bool) or is_number(value) or is_nullish(value):
        return to_string(value)
    if isinstance(value, JsFunction):
        return f"[Function: {value.name}]" if value.name else "[Function (anonymous)]"
    if isinstance(value, JsRegExp):
        return repr(value)

    seen = _seen if _seen is not None else set()

    if isinstance(value, (list, dict)):
        if id(value) in seen:
            return "[Circular]"
        seen.add(id(value))

        try:
            if isinstance(value, list):
                if not value:
                    return "[]"
                return "[ " + ", ".join(format_value(item, seen) for item in value) + " ]"

            if not value:
                return "{}"

            pairs = []
            for key, item in value.items():
                key_text = str(key)
                shown = key_text if _PLAIN_KEY_RE.fullmatch(key_text) else repr(key_text)
                pairs.append(f"{shown}: {format_value(item, seen)}")
            return "{ " + ", ".join(pairs) + " }"
        finally:
            seen.discard(id(value))

    if callable(value):
        name = getattr(value, "__name__", None)
        return f"[Function: {name}]" if name else "[Function (anonymous)]"

    return repr(value)
