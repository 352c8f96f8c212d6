from __future__ import annotations

import logging
from typing import Any, Dict

from ..runtime import (
    FAIL,
    UNDEFINED,
    BuiltinMethod,
    JsRegExp,
    JsRuntimeError,
    JsValue,
    has_builtin_method,
)
from ..utils import array_index, format_value, is_nullish, is_number, to_number, to_property_key

logger = logging.getLogger(__name__)

def _dict_key(recv: Dict[Any, JsValue], key: JsValue) -> Any:
    """String form of `key`, unless a host dict holds the raw numeric key instead."""
    prop = to_property_key(key)

    if prop not in recv and is_number(key) and key in recv:
        return key

    return prop

def _host_attr_allowed(name: str) -> bool:
    return not name.startswith("__")

def get_property(recv: JsValue, key: JsValue) -> JsValue:
    if is_nullish(recv):
        logger.warning("Cannot read property %r of %s", key, format_value(recv))
        return FAIL

    if isinstance(recv, dict):
        slot = _dict_key(recv, key)
        if slot in recv:
            return recv[slot]

        prop = to_property_key(key)
        if has_builtin_method(recv, prop):
            return BuiltinMethod(prop, recv)
        return UNDEFINED

    if isinstance(recv, (list, str)):
        idx = array_index(key)
        if idx is not None:
            return recv[idx] if idx < len(recv) else UNDEFINED

        prop = to_property_key(key)
        if prop == "length":
            return len(recv)
        if has_builtin_method(recv, prop):
            return BuiltinMethod(prop, recv)
        return UNDEFINED

    if isinstance(recv, JsRegExp):
        prop = to_property_key(key)
        match prop:
            case "source":
                return recv.source
            case "flags":
                return recv.flags
            case "global":
                return recv.is_global
        if has_builtin_method(recv, prop):
            return BuiltinMethod(prop, recv)
        return UNDEFINED

    if isinstance(recv, bool):
        return UNDEFINED

    if is_number(recv):
        prop = to_property_key(key)
        return BuiltinMethod(prop, recv) if has_builtin_method(recv, prop) else UNDEFINED

    prop = to_property_key(key)
    if not _host_attr_allowed(prop):
        return UNDEFINED

    return getattr(recv, prop, UNDEFINED)

def set_property(recv: JsValue, key: JsValue, value: JsValue) -> JsValue:
    """Write `recv[key] = value` in place; FAIL when the receiver holds no writable slots."""
    if isinstance(recv, dict):
        recv[_dict_key(recv, key)] = value
        return value

    if isinstance(recv, list):
        idx = array_index(key)
        if idx is not None:
            if idx >= len(recv):
                recv.extend([UNDEFINED] * (idx - len(recv) + 1))
            recv[idx] = value
            return value

        if to_property_key(key) == "length":
            _set_array_length(recv, value)
            return value

        logger.warning("Cannot set property %r on an array", key)
        return FAIL

    if is_nullish(recv) or isinstance(recv, (bool, int, float, str, JsRegExp)) or callable(recv):
        logger.warning("Cannot set property %r on %s", key, format_value(recv))
        return FAIL

    prop = to_property_key(key)
    if not _host_attr_allowed(prop):
        logger.warning("Cannot set property %r on a host object", prop)
        return FAIL

    setattr(recv, prop, value)
    return value

def _set_array_length(recv: list, value: JsValue) -> None:
    length = to_number(value)

    if not (is_number(length) and float(length).is_integer() and length >= 0):
        raise JsRuntimeError("Invalid array length")

    length = int(length)
    if length < len(recv):
        del recv[length:]
    else:
        recv.extend([UNDEFINED] * (length - len(recv)))
