"""
Program Analyzer: static diagnostics and inventory of Selve programs.

This module provides lightweight analysis of parsed Program objects:
    - Declaration inventory (variables, constants, functions)
    - Name resolution (undefined and unused names)
    - Redeclarations and constant reassignments
    - Expression complexity metrics

IMPORTANT: Analysis never evaluates anything and never modifies the
program. It only produces read-only reports.

Scoping mirrors the interpreter: top-level names share the scope of the
builtins, and each function body gets its own scope chained to the scope
it was declared in. Function bodies are checked after the rest of their
enclosing block, because they only run when called and can therefore see
names declared later in that block.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

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
    UnaryExpr,
    VarDeclaration,
)
from selve.environment import GLOBAL_NAMES

MAX_EXPRESSION_DEPTH = 8


@dataclass
class ExpressionMetrics:
    """Metrics about a single expression tree."""
    depth: int = 0
    node_count: int = 0


def _children(node: Node) -> List[Node]:
    if isinstance(node, BinaryExpr):
        return [node.left, node.right]
    if isinstance(node, UnaryExpr):
        return [node.operand]
    if isinstance(node, AssignmentExpr):
        return [node.assignee, node.value]
    if isinstance(node, MemberExpr):
        return [node.object, node.property]
    if isinstance(node, CallExpr):
        return [node.caller, *node.args]
    if isinstance(node, ObjectLiteral):
        return [p.value for p in node.properties if p.value is not None]
    return []


def _analyze_expression(expr: Node | None) -> ExpressionMetrics:
    """Recursively analyze an expression tree."""
    if expr is None:
        return ExpressionMetrics(depth=0, node_count=0)

    metrics = ExpressionMetrics(node_count=1)
    children = [_analyze_expression(child) for child in _children(expr)]
    if children:
        metrics.depth = 1 + max(child.depth for child in children)
    for child in children:
        metrics.node_count += child.node_count

    return metrics


@dataclass
class _Binding:
    kind: str  # builtin, variable, constant, function, parameter
    reads: int = 0


class _Scope:
    def __init__(self, parent: Optional[_Scope] = None):
        self.parent = parent
        self.bindings: Dict[str, _Binding] = {}
        self.deferred: List[Tuple[FnDeclaration, _Scope]] = []

    def lookup(self, name: str) -> Optional[_Binding]:
        scope: Optional[_Scope] = self
        while scope is not None:
            if name in scope.bindings:
                return scope.bindings[name]
            scope = scope.parent
        return None


@dataclass
class ProgramReport:
    """Analysis report for a program."""

    total_statements: int = 0
    total_comments: int = 0
    total_functions: int = 0
    total_variables: int = 0
    total_constants: int = 0

    # Names
    declared_names: List[str] = field(default_factory=list)
    name_usage: Dict[str, int] = field(default_factory=dict)
    undefined_names: Set[str] = field(default_factory=set)
    unused_names: Set[str] = field(default_factory=set)
    redeclarations: List[str] = field(default_factory=list)
    constant_reassignments: List[str] = field(default_factory=list)

    # Expression complexity
    max_expression_depth: int = 0
    avg_expression_depth: float = 0.0
    total_expression_nodes: int = 0

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        """Add an error to the report."""
        if msg not in self.errors:
            self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


class _Walker:
    def __init__(self, report: ProgramReport):
        self.report = report
        self.depths: List[int] = []
        self.unused: List[str] = []

    def block(self, statements, scope: _Scope) -> None:
        for statement in statements:
            self.statement(statement, scope)

        # Bodies run only when called, after the whole block is declared.
        while scope.deferred:
            declaration, fn_scope = scope.deferred.pop(0)
            self.block(declaration.body, fn_scope)

        for name, binding in scope.bindings.items():
            if binding.kind in ("variable", "constant", "function") and binding.reads == 0:
                self.unused.append(name)

    def declare(self, name: str, kind: str, scope: _Scope) -> None:
        if name in scope.bindings:
            self.report.redeclarations.append(name)
            self.report.add_error(f"Cannot redeclare variable {name}")
            return
        scope.bindings[name] = _Binding(kind=kind)
        if scope.parent is None:
            self.report.declared_names.append(name)

    def statement(self, node: Node, scope: _Scope) -> None:
        if isinstance(node, Comment):
            self.report.total_comments += 1
            return

        self.report.total_statements += 1

        if isinstance(node, VarDeclaration):
            if node.value is not None:
                self.expression(node.value, scope)
            if node.constant:
                self.report.total_constants += 1
            else:
                self.report.total_variables += 1
            self.declare(node.identifier, "constant" if node.constant else "variable", scope)
            return

        if isinstance(node, FnDeclaration):
            self.report.total_functions += 1
            self.declare(node.name, "function", scope)
            fn_scope = _Scope(parent=scope)
            for parameter in node.parameters:
                fn_scope.bindings[parameter] = _Binding(kind="parameter")
            scope.deferred.append((node, fn_scope))
            return

        self.expression(node, scope)

    def expression(self, node: Node, scope: _Scope) -> None:
        metrics = _analyze_expression(node)
        self.depths.append(metrics.depth)
        self.report.total_expression_nodes += metrics.node_count
        self.resolve(node, scope)

    def read(self, name: str, scope: _Scope) -> None:
        binding = scope.lookup(name)
        if binding is None:
            self.report.undefined_names.add(name)
            return
        binding.reads += 1
        self.report.name_usage[name] = self.report.name_usage.get(name, 0) + 1

    def resolve(self, node: Node, scope: _Scope) -> None:
        if isinstance(node, Identifier):
            self.read(node.name, scope)
            return

        if isinstance(node, NumericLiteral):
            return

        if isinstance(node, AssignmentExpr):
            if isinstance(node.assignee, Identifier):
                name = node.assignee.name
                binding = scope.lookup(name)
                if binding is None:
                    self.report.undefined_names.add(name)
                elif binding.kind in ("builtin", "constant", "function"):
                    self.report.constant_reassignments.append(name)
                    self.report.add_error(f"Cannot reassign to constant {name}")
            else:
                self.resolve(node.assignee, scope)
            self.resolve(node.value, scope)
            return

        if isinstance(node, MemberExpr):
            self.resolve(node.object, scope)
            if node.computed:
                self.resolve(node.property, scope)
            return

        if isinstance(node, ObjectLiteral):
            for prop in node.properties:
                if prop.value is None:
                    self.read(prop.key, scope)
                else:
                    self.resolve(prop.value, scope)
            return

        for child in _children(node):
            self.resolve(child, scope)


def analyze_program(program: Program) -> ProgramReport:
    """
    Perform static analysis of a Program.

    Checks for:
    - Undefined names (errors)
    - Redeclarations in the same scope (errors)
    - Reassignment of constants, functions and builtins (errors)
    - Unused declarations (warnings)
    - Expression complexity (warnings)
    - Nesting beyond Python's recursion limit (error)

    Returns a ProgramReport with metrics, errors and warnings.
    """
    report = ProgramReport()

    # Top-level declarations share the scope of the builtins, as in the interpreter.
    top = _Scope()
    for name in GLOBAL_NAMES:
        top.bindings[name] = _Binding(kind="builtin")

    walker = _Walker(report)
    try:
        walker.block(program.body, top)
    except RecursionError:
        report.add_error("Program nested too deeply to analyze")

    if walker.depths:
        report.max_expression_depth = max(walker.depths)
        report.avg_expression_depth = sum(walker.depths) / len(walker.depths)

    report.unused_names = set(walker.unused)
    report.name_usage = {k: v for k, v in report.name_usage.items() if k not in GLOBAL_NAMES}

    if report.undefined_names:
        report.add_error(
            f"Undefined names: {', '.join(sorted(report.undefined_names))}"
        )

    if report.unused_names:
        report.add_warning(
            f"Unused declarations: {', '.join(sorted(report.unused_names))}"
        )

    if report.max_expression_depth > MAX_EXPRESSION_DEPTH:
        report.add_warning(
            f"High expression complexity: max depth {report.max_expression_depth}"
        )

    return report


__all__ = ["ProgramReport", "ExpressionMetrics", "analyze_program"]
