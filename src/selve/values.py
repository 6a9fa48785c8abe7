"""
Runtime Value Model

Defines the values a Selve program can produce at run time:
    - null
    - booleans
    - integers
    - objects (ordered, mutable property maps)
    - user functions (closures)
    - native functions (implemented in Python)

ARCHITECTURAL RULE:
    Values carry data only. Arithmetic and calls live in interpreter.py.
    The one presentation concern kept here is `display`, because both
    `print` and the REPL need the same rendering.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List, Tuple

from selve.ast_nodes import Node

if TYPE_CHECKING:
    from selve.environment import Environment


class RuntimeValue:
    """Base class for all runtime values."""

    type_name = "value"


@dataclass(frozen=True)
class NullValue(RuntimeValue):
    type_name = "null"


@dataclass(frozen=True)
class BooleanValue(RuntimeValue):
    type_name = "boolean"

    value: bool


@dataclass(frozen=True)
class NumberValue(RuntimeValue):
    """
    An integer.

    Selve numbers are arbitrary precision integers. Division truncates
    toward zero (see interpreter.py).
    """

    type_name = "number"

    value: int


@dataclass
class ObjectValue(RuntimeValue):
    """
    A property map built from an object literal.

    Properties keep the order they were written in. The map is mutable
    so that `point.x = 5` can update it, but member assignment never adds
    new keys.
    """

    type_name = "object"

    properties: Dict[str, RuntimeValue] = field(default_factory=dict)


@dataclass(eq=False)
class FunctionValue(RuntimeValue):
    """
    A user-defined function.

    Properties:
        name: Declared name
        parameters: Parameter names
        body: Statements evaluated on each call
        closure: Environment the function was declared in

    IMPORTANT:
        `closure` is a live reference, not a copy. The function sees
        later changes to its enclosing scope, including its own binding,
        which is what makes recursion work.
    """

    type_name = "function"

    name: str
    parameters: Tuple[str, ...]
    body: Tuple[Node, ...]
    closure: "Environment" = field(repr=False)


NativeCallable = Callable[[List[RuntimeValue], "Environment"], RuntimeValue]


@dataclass(eq=False)
class NativeFunctionValue(RuntimeValue):
    """A builtin function implemented in Python, called as fn(args, env)."""

    type_name = "native function"

    name: str
    function: NativeCallable = field(repr=False)


NULL = NullValue()
TRUE = BooleanValue(True)
FALSE = BooleanValue(False)


def display(value: RuntimeValue, _seen: Tuple[int, ...] = ()) -> str:
    """
    Render a value the way `print` shows it.

    Examples:
        null, true, 42, { x: 1, y: { z: true } }, {}, <fn add>, <native fn print>

    An object that contains itself renders the inner occurrence as `{...}`.
    """
    if isinstance(value, NullValue):
        return "null"
    if isinstance(value, BooleanValue):
        return "true" if value.value else "false"
    if isinstance(value, NumberValue):
        return str(value.value)
    if isinstance(value, ObjectValue):
        if id(value) in _seen:
            return "{...}"
        if not value.properties:
            return "{}"
        seen = _seen + (id(value),)
        inner = ", ".join(f"{key}: {display(item, seen)}" for key, item in value.properties.items())
        return f"{{ {inner} }}"
    if isinstance(value, FunctionValue):
        return f"<fn {value.name}>"
    if isinstance(value, NativeFunctionValue):
        return f"<native fn {value.name}>"
    raise TypeError(f"Unsupported value type: {type(value)}")
