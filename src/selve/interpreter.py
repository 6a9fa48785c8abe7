"""
Tree-walking interpreter for Selve (Layer 3: AST -> values).

Evaluation rules:
    - A program (or function body) evaluates to its last statement's value,
      or null when it has none. Comments produce no value.
    - Numbers are integers. `/` truncates toward zero and `%` takes the sign
      of the dividend. Dividing by zero is an error.
    - Call arguments are evaluated left to right, before the callee.
    - Functions close over the scope they were declared in (by reference).

Every failure raises EvalError or ScopeError. Nothing here prints, exits
or swallows an error.
"""

import logging
from typing import List, Optional

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
from selve.environment import Environment, create_global_environment
from selve.errors import EvalError
from selve.parser import parse
from selve.values import (
    NULL,
    FunctionValue,
    NativeFunctionValue,
    NumberValue,
    ObjectValue,
    RuntimeValue,
    display,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_CALL_DEPTH = 100


def _truncating_divide(lhs: int, rhs: int) -> int:
    quotient = abs(lhs) // abs(rhs)
    return quotient if (lhs >= 0) == (rhs >= 0) else -quotient


def _apply_operator(operator: str, lhs: int, rhs: int) -> int:
    if operator == "+":
        return lhs + rhs
    if operator == "-":
        return lhs - rhs
    if operator == "*":
        return lhs * rhs
    if operator in ("/", "%"):
        if rhs == 0:
            raise EvalError("Division by zero")
        quotient = _truncating_divide(lhs, rhs)
        return quotient if operator == "/" else lhs - rhs * quotient
    raise EvalError(f"Unsupported binary operator {operator}")


class Interpreter:
    """
    Evaluates AST nodes against an Environment.

    Args:
        max_call_depth: Nested user-function calls allowed before evaluation
            fails with "Maximum call depth exceeded"
    """

    def __init__(self, max_call_depth: int = DEFAULT_MAX_CALL_DEPTH):
        self.max_call_depth = max_call_depth
        self._depth = 0

    def execute(self, node: Node, env: Environment) -> RuntimeValue:
        """
        Evaluate a whole program (or any single node) from a fresh call depth.

        Python's own recursion limit is reported the same way as
        exceeding max_call_depth.
        """
        self._depth = 0
        try:
            return self.evaluate(node, env)
        except RecursionError:
            raise EvalError("Maximum call depth exceeded") from None

    def evaluate(self, node: Node, env: Environment) -> RuntimeValue:
        if isinstance(node, Program):
            return self._eval_body(node.body, env)

        if isinstance(node, NumericLiteral):
            return NumberValue(int(node.value))

        if isinstance(node, Identifier):
            return env.lookup(node.name)

        if isinstance(node, ObjectLiteral):
            return self._eval_object(node, env)

        if isinstance(node, CallExpr):
            return self._eval_call(node, env)

        if isinstance(node, AssignmentExpr):
            return self._eval_assignment(node, env)

        if isinstance(node, MemberExpr):
            return self._eval_member(node, env)

        if isinstance(node, BinaryExpr):
            return self._eval_binary(node, env)

        if isinstance(node, UnaryExpr):
            return self._eval_unary(node, env)

        if isinstance(node, VarDeclaration):
            value = self.evaluate(node.value, env) if node.value is not None else NULL
            return env.declare(node.identifier, value, constant=node.constant)

        if isinstance(node, FnDeclaration):
            function = FunctionValue(
                name=node.name,
                parameters=node.parameters,
                body=node.body,
                closure=env,
            )
            return env.declare(node.name, function, constant=True)

        raise EvalError(f"Unexpected statement {type(node).__name__}")

    def _eval_body(self, body, env: Environment) -> RuntimeValue:
        last: RuntimeValue = NULL
        for statement in body:
            if isinstance(statement, Comment):
                continue
            last = self.evaluate(statement, env)
        return last

    def _eval_object(self, node: ObjectLiteral, env: Environment) -> ObjectValue:
        properties = {}
        for prop in node.properties:
            if prop.value is None:
                properties[prop.key] = env.lookup(prop.key)
            else:
                properties[prop.key] = self.evaluate(prop.value, env)
        return ObjectValue(properties)

    def _property_key(self, node: MemberExpr, env: Environment) -> str:
        if node.computed:
            return display(self.evaluate(node.property, env))
        if isinstance(node.property, Identifier):
            return node.property.name
        raise EvalError("Invalid property in member expression")

    def _eval_member(self, node: MemberExpr, env: Environment) -> RuntimeValue:
        target = self.evaluate(node.object, env)
        key = self._property_key(node, env)

        if not isinstance(target, ObjectValue):
            raise EvalError(f"Cannot read property '{key}' of {target.type_name}")
        if key not in target.properties:
            raise EvalError(f"Object has no property '{key}'")
        return target.properties[key]

    def _eval_assignment(self, node: AssignmentExpr, env: Environment) -> RuntimeValue:
        assignee = node.assignee

        if isinstance(assignee, Identifier):
            value = self.evaluate(node.value, env)
            return env.assign(assignee.name, value)

        if isinstance(assignee, MemberExpr):
            target = self.evaluate(assignee.object, env)
            key = self._property_key(assignee, env)
            if not isinstance(target, ObjectValue):
                raise EvalError(f"Cannot set property '{key}' of {target.type_name}")
            if key not in target.properties:
                raise EvalError(f"Cannot assign to unknown property '{key}'")
            value = self.evaluate(node.value, env)
            target.properties[key] = value
            return value

        raise EvalError("Invalid assignment target")

    def _eval_binary(self, node: BinaryExpr, env: Environment) -> NumberValue:
        lhs = self.evaluate(node.left, env)
        rhs = self.evaluate(node.right, env)

        if not isinstance(lhs, NumberValue) or not isinstance(rhs, NumberValue):
            raise EvalError(
                f"Unsupported operand types for {node.operator}: "
                f"{lhs.type_name} and {rhs.type_name}"
            )
        return NumberValue(_apply_operator(node.operator, lhs.value, rhs.value))

    def _eval_unary(self, node: UnaryExpr, env: Environment) -> NumberValue:
        operand = self.evaluate(node.operand, env)

        if node.operator != "-":
            raise EvalError(f"Unsupported unary operator {node.operator}")
        if not isinstance(operand, NumberValue):
            raise EvalError(f"Unsupported operand type for unary -: {operand.type_name}")
        return NumberValue(-operand.value)

    def _eval_call(self, node: CallExpr, env: Environment) -> RuntimeValue:
        args = [self.evaluate(arg, env) for arg in node.args]
        callee = self.evaluate(node.caller, env)

        if isinstance(callee, NativeFunctionValue):
            logger.debug("Calling native %s with %d arguments", callee.name, len(args))
            return callee.function(args, env)

        if isinstance(callee, FunctionValue):
            return self._call_function(callee, args)

        raise EvalError(f"Value is not a function: {display(callee)}")

    def _call_function(self, function: FunctionValue, args: List[RuntimeValue]) -> RuntimeValue:
        if len(args) != len(function.parameters):
            raise EvalError(
                f"Function {function.name} expects {len(function.parameters)} "
                f"arguments but got {len(args)}"
            )
        if self._depth >= self.max_call_depth:
            raise EvalError("Maximum call depth exceeded")

        scope = Environment(parent=function.closure)
        for parameter, arg in zip(function.parameters, args):
            scope.declare(parameter, arg)

        logger.debug("Calling %s with %d arguments", function.name, len(args))
        self._depth += 1
        try:
            return self._eval_body(function.body, scope)
        finally:
            self._depth -= 1


def evaluate(node: Node, env: Environment) -> RuntimeValue:
    """Evaluate a single node with a default Interpreter."""
    return Interpreter().execute(node, env)


def run(
    source: str,
    env: Optional[Environment] = None,
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
) -> RuntimeValue:
    """
    Parse and evaluate source text.

    Args:
        source: Program text
        env: Environment to run in (a fresh global environment if None)
        max_call_depth: See Interpreter

    Returns:
        Value of the last statement

    Raises:
        SelveError: Any lex, parse, scope or evaluation failure
    """
    if env is None:
        env = create_global_environment()
    return Interpreter(max_call_depth=max_call_depth).execute(parse(source), env)


__all__ = ["Interpreter", "evaluate", "run", "DEFAULT_MAX_CALL_DEPTH"]
