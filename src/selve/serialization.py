"""
Serialization helpers for Selve syntax trees.

Provides lossless JSON/YAML round-trip via intermediate dict representation.
Each node becomes a dict with a "type" tag; this module keeps that
structure stable and explicit so that dumps can be diffed and checked in.
"""
from __future__ import annotations

import json
from typing import Any, Dict

import yaml

from selve.ast_nodes import (
    AssignmentExpr,
    BinaryExpr,
    CallExpr,
    Comment,
    FnDeclaration,
    Identifier,
    MemberExpr,
    Node,
    NumericLiteral,
    ObjectLiteral,
    Program,
    Property,
    UnaryExpr,
    VarDeclaration,
)


def node_to_dict(node: Node | None) -> Any:
    if node is None:
        return None
    if isinstance(node, Program):
        return {"type": "program", "body": [node_to_dict(s) for s in node.body]}
    if isinstance(node, Comment):
        return {"type": "comment", "text": node.text}
    if isinstance(node, NumericLiteral):
        return {"type": "number", "value": node.value}
    if isinstance(node, Identifier):
        return {"type": "identifier", "name": node.name}
    if isinstance(node, Property):
        return {"type": "property", "key": node.key, "value": node_to_dict(node.value)}
    if isinstance(node, ObjectLiteral):
        return {"type": "object", "properties": [node_to_dict(p) for p in node.properties]}
    if isinstance(node, VarDeclaration):
        return {
            "type": "var",
            "constant": node.constant,
            "identifier": node.identifier,
            "value": node_to_dict(node.value),
        }
    if isinstance(node, FnDeclaration):
        return {
            "type": "fn",
            "name": node.name,
            "parameters": list(node.parameters),
            "body": [node_to_dict(s) for s in node.body],
        }
    if isinstance(node, AssignmentExpr):
        return {
            "type": "assign",
            "assignee": node_to_dict(node.assignee),
            "value": node_to_dict(node.value),
        }
    if isinstance(node, MemberExpr):
        return {
            "type": "member",
            "object": node_to_dict(node.object),
            "property": node_to_dict(node.property),
            "computed": node.computed,
        }
    if isinstance(node, CallExpr):
        return {
            "type": "call",
            "caller": node_to_dict(node.caller),
            "args": [node_to_dict(a) for a in node.args],
        }
    if isinstance(node, BinaryExpr):
        return {
            "type": "binary",
            "operator": node.operator,
            "left": node_to_dict(node.left),
            "right": node_to_dict(node.right),
        }
    if isinstance(node, UnaryExpr):
        return {"type": "unary", "operator": node.operator, "operand": node_to_dict(node.operand)}
    raise TypeError(f"Unsupported node type: {type(node)}")


def node_from_dict(d: Any) -> Node | None:
    if d is None:
        return None
    t = d.get("type")
    if t == "program":
        return Program(body=tuple(node_from_dict(s) for s in d.get("body", [])))
    if t == "comment":
        return Comment(text=d["text"])
    if t == "number":
        return NumericLiteral(value=str(d["value"]))
    if t == "identifier":
        return Identifier(name=d["name"])
    if t == "property":
        return Property(key=d["key"], value=node_from_dict(d.get("value")))
    if t == "object":
        return ObjectLiteral(properties=tuple(node_from_dict(p) for p in d.get("properties", [])))
    if t == "var":
        return VarDeclaration(
            constant=bool(d.get("constant", False)),
            identifier=d["identifier"],
            value=node_from_dict(d.get("value")),
        )
    if t == "fn":
        return FnDeclaration(
            name=d["name"],
            parameters=tuple(d.get("parameters", [])),
            body=tuple(node_from_dict(s) for s in d.get("body", [])),
        )
    if t == "assign":
        return AssignmentExpr(assignee=node_from_dict(d["assignee"]), value=node_from_dict(d["value"]))
    if t == "member":
        return MemberExpr(
            object=node_from_dict(d["object"]),
            property=node_from_dict(d["property"]),
            computed=bool(d.get("computed", False)),
        )
    if t == "call":
        return CallExpr(
            caller=node_from_dict(d["caller"]),
            args=tuple(node_from_dict(a) for a in d.get("args", [])),
        )
    if t == "binary":
        return BinaryExpr(
            operator=d["operator"],
            left=node_from_dict(d["left"]),
            right=node_from_dict(d["right"]),
        )
    if t == "unary":
        return UnaryExpr(operator=d["operator"], operand=node_from_dict(d["operand"]))
    raise TypeError(f"Unsupported node dict type: {t}")


def program_to_dict(p: Program) -> Dict[str, Any]:
    return node_to_dict(p)


def program_from_dict(d: Dict[str, Any]) -> Program:
    node = node_from_dict(d)
    if not isinstance(node, Program):
        raise TypeError(f"Expected a program dict, got {d.get('type')!r}")
    return node


def program_to_json(p: Program) -> str:
    return json.dumps(program_to_dict(p), sort_keys=True)


def program_from_json(s: str) -> Program:
    d = json.loads(s)
    return program_from_dict(d)


def program_to_yaml(p: Program) -> str:
    return yaml.safe_dump(program_to_dict(p), sort_keys=False)


def program_from_yaml(s: str) -> Program:
    d = yaml.safe_load(s)
    return program_from_dict(d)
