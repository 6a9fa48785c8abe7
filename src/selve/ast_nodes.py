"""
Abstract Syntax Tree for Selve

Every program is parsed into a tree of immutable nodes before anything
is evaluated or analysed. Nodes hold structure only.

ARCHITECTURAL RULE:
    Nodes do not evaluate themselves, print themselves or resolve names.
    Evaluation lives in interpreter.py, analysis in analyzer.py and
    serialization in serialization.py.

Sequences are stored as tuples so that whole trees compare and hash
structurally.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Optional, Tuple


class Node(ABC):
    """
    Base class for all AST nodes.

    This class is structure only. It exists to give the node hierarchy
    a common type.
    """
    pass


@dataclass(frozen=True)
class Program(Node):
    """
    Root of a parsed source text.

    Properties:
        body: Top-level statements in source order
    """

    body: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class Comment(Node):
    """
    A `//` line comment kept in the tree.

    Properties:
        text: Everything after `//` up to the end of the line
    """

    text: str


@dataclass(frozen=True)
class NumericLiteral(Node):
    """
    An integer literal.

    The source text is kept as-is. Conversion to a number happens
    at evaluation time.
    """

    value: str


@dataclass(frozen=True)
class Identifier(Node):
    """A reference to a name. Existence is checked by the interpreter."""

    name: str


@dataclass(frozen=True)
class Property(Node):
    """
    One entry of an object literal.

    Examples:
        { x: 100 }   -> Property("x", NumericLiteral("100"))
        { foo }      -> Property("foo", None)

    A value of None is the shorthand form: the value is whatever `key`
    names in the enclosing scope.
    """

    key: str
    value: Optional[Node] = None


@dataclass(frozen=True)
class ObjectLiteral(Node):
    """`{ key: value, other }`"""

    properties: Tuple[Property, ...] = ()


@dataclass(frozen=True)
class VarDeclaration(Node):
    """
    `let name = value` or `const name = value`.

    Properties:
        constant: True for `const`
        identifier: Declared name
        value: Initializer, or None for `let name;`

    IMPORTANT:
        A const declaration always has a value. The parser enforces it.
    """

    constant: bool
    identifier: str
    value: Optional[Node] = None


@dataclass(frozen=True)
class FnDeclaration(Node):
    """
    `fn name(a, b) { ... }`

    The value of the last statement in `body` is the call result.
    """

    name: str
    parameters: Tuple[str, ...] = ()
    body: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class AssignmentExpr(Node):
    """
    `assignee = value`

    The parser accepts any expression on the left. Only identifiers and
    member expressions are valid targets; the interpreter rejects the rest.
    """

    assignee: Node
    value: Node


@dataclass(frozen=True)
class MemberExpr(Node):
    """
    Property access.

    Examples:
        point.x       -> MemberExpr(Identifier("point"), Identifier("x"), computed=False)
        point[key]    -> MemberExpr(Identifier("point"), Identifier("key"), computed=True)
    """

    object: Node
    property: Node
    computed: bool = False


@dataclass(frozen=True)
class CallExpr(Node):
    """`caller(args...)`. The caller can itself be a call: `f()()`."""

    caller: Node
    args: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class BinaryExpr(Node):
    """
    Arithmetic on two operands.

    Example:
        45 + (foo + 4) % bar

    Becomes:
        BinaryExpr(
            operator="+",
            left=NumericLiteral("45"),
            right=BinaryExpr(
                operator="%",
                left=BinaryExpr("+", Identifier("foo"), NumericLiteral("4")),
                right=Identifier("bar"),
            ),
        )
    """

    operator: str
    left: Node
    right: Node


@dataclass(frozen=True)
class UnaryExpr(Node):
    """Prefix operator. Only `-` exists."""

    operator: str
    operand: Node


__all__ = [
    "Node",
    "Program",
    "Comment",
    "NumericLiteral",
    "Identifier",
    "Property",
    "ObjectLiteral",
    "VarDeclaration",
    "FnDeclaration",
    "AssignmentExpr",
    "MemberExpr",
    "CallExpr",
    "BinaryExpr",
    "UnaryExpr",
]
