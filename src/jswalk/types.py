from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from typing_extensions import TypeAlias

from .tree import Node

# ---------- Value Model ----------
#
# Runtime values are plain Python objects: int/float numbers, str, bool,
# None (null), list (array), dict (object), callables and arbitrary host
# objects. The classes below cover what Python has no native spelling for.

class JsUndefined:
    """The `undefined` value. Falsy; arithmetic with it yields NaN."""

    _instance: Optional['JsUndefined'] = None

    def __new__(cls) -> 'JsUndefined':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __str__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False

    # Native callables handed `undefined` behave like JS host code:
    # `undefined + 1` is NaN, `"x" + undefined` is "xundefined".
    def __add__(self, other: Any) -> Any:
        if isinstance(other, str):
            return "undefined" + other
        return math.nan

    def __radd__(self, other: Any) -> Any:
        if isinstance(other, str):
            return other + "undefined"
        return math.nan

    def _nan(self, other: Any = None) -> float:
        return math.nan

    __sub__ = __rsub__ = __mul__ = __rmul__ = _nan
    __truediv__ = __rtruediv__ = __mod__ = __rmod__ = _nan
    __pow__ = __rpow__ = _nan
    __neg__ = __pos__ = _nan

    def _false(self, other: Any) -> bool:
        return False

    __lt__ = __le__ = __gt__ = __ge__ = _false

    def __eq__(self, other: object) -> bool:
        return other is self

    def __hash__(self) -> int:
        return hash("undefined")

UNDEFINED = JsUndefined()

class _Fail:
    """Evaluation could not produce a value; never a runtime value itself."""

    def __repr__(self) -> str:
        return "<fail>"

FAIL = _Fail()

@dataclass(eq=False)
class JsFunction:
    params: List[str]
    body: Node                   # block, or an expression for `x => expr`
    frame: 'Frame'               # Closure frame
    name: Optional[str] = None
    kind: str = "function"       # "function" | "arrow"

    def __call__(self, *args: Any) -> Any:
        from .runtime import call_function  # local import to avoid cycle

        result = call_function(self, list(args))
        return UNDEFINED if result is FAIL else result

    def __repr__(self) -> str:
        label = self.name or "anonymous"
        return f"<{self.kind} {label}({', '.join(self.params)})>"

@dataclass(eq=False)
class JsRegExp:
    source: str
    flags: str
    pattern: 're.Pattern[str]'

    @property
    def is_global(self) -> bool:
        return "g" in self.flags

    def __repr__(self) -> str:
        return f"/{self.source}/{self.flags}"

@dataclass
class BuiltinMethod:
    name: str
    subject: Any

    def __call__(self, *args: Any) -> Any:
        from .runtime import call_builtin_method

        return call_builtin_method(self.subject, self.name, list(args))

JsValue: TypeAlias = Any

# ---------- Builtin method registries ----------

Method = Callable[[Any, List[Any]], Any]
MethodRegistry = Dict[str, Method]

class Builtins:
    array_methods: MethodRegistry = {}
    string_methods: MethodRegistry = {}
    number_methods: MethodRegistry = {}
    object_methods: MethodRegistry = {}
    regex_methods: MethodRegistry = {}

# ---------- Environment ----------

class Frame:
    def __init__(self, vars: Optional[Dict[str, Any]] = None, parent: Optional['Frame'] = None, source: Optional[str] = None):
        self.parent = parent
        # The root frame wraps the caller's context dict itself, so bindings
        # made by the program are visible to the caller afterwards.
        self.vars: Dict[str, Any] = vars if vars is not None else {}
        self._is_function_frame = False
        self.source: Optional[str]

        if source is not None:
            self.source = source
        elif parent is not None:
            self.source = parent.source
        else:
            self.source = None

    def define(self, name: str, val: Any) -> None:
        self.vars[name] = val

    def get(self, name: str) -> Any:
        frame: Optional[Frame] = self

        while frame is not None:
            if name in frame.vars:
                return frame.vars[name]
            frame = frame.parent

        return UNDEFINED

    def assign(self, name: str, val: Any) -> None:
        """Write to the nearest frame binding `name`; unbound names land in the root."""
        frame: Frame = self

        while True:
            if name in frame.vars or frame.parent is None:
                frame.vars[name] = val
                return
            frame = frame.parent

    def mark_function_frame(self) -> None:
        self._is_function_frame = True

    def is_function_frame(self) -> bool:
        return self._is_function_frame

    def function_frame(self) -> Optional['Frame']:
        frame: Optional[Frame] = self

        while frame is not None:
            if frame.is_function_frame():
                return frame
            frame = frame.parent

        return None

# ---------- Exceptions ----------

class JsRuntimeError(Exception):
    js_meta: Optional[object]

    def __init__(self, message: str):
        super().__init__(message)
        self.js_meta = None

    def __str__(self) -> str:
        msg = super().__str__()

        meta = getattr(self, "js_meta", None)
        if meta is None:
            return msg

        line = getattr(meta, "line", None)
        col = getattr(meta, "column", None)

        if line is None:
            return msg

        if col is None:
            return f"{msg} (line {line})"

        return f"{msg} (line {line}, col {col})"

class JsTypeError(JsRuntimeError):
    pass

class JsMethodNotFound(JsRuntimeError):
    def __init__(self, recv: Any, name: str):
        super().__init__(f"{type(recv).__name__} has no builtin method '{name}'")
        self.receiver = recv
        self.name = name

class JsReturnSignal(Exception):
    """Internal control-flow exception used to implement `return`."""
    def __init__(self, value: Any):
        self.value = value
