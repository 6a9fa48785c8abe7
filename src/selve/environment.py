"""
Lexical scopes for the Selve interpreter.

An Environment maps names to runtime values and remembers which names
are constants. Scopes chain to a parent: lookups and assignments walk
outward, declarations always land in the current scope.

    global  (true, false, null, print, time)
      +- function call scope (parameters, locals)
           +- nested call scope ...
"""

import logging
import sys
import time
from typing import Dict, List, Optional, Set, TextIO

from selve.errors import ScopeError
from selve.values import (
    FALSE,
    NULL,
    TRUE,
    NativeFunctionValue,
    NumberValue,
    RuntimeValue,
    display,
)

logger = logging.getLogger(__name__)


class Environment:
    """
    A single scope.

    Properties:
        parent: Enclosing scope, or None for the global scope
        variables: Names declared in this scope
        constants: Subset of `variables` that cannot be reassigned
    """

    def __init__(self, parent: Optional["Environment"] = None):
        self.parent = parent
        self.variables: Dict[str, RuntimeValue] = {}
        self.constants: Set[str] = set()

    def declare(self, name: str, value: RuntimeValue, constant: bool = False) -> RuntimeValue:
        """
        Declare `name` in this scope.

        Shadowing a name from an enclosing scope is allowed.

        Raises:
            ScopeError: If `name` is already declared in this scope
        """
        if name in self.variables:
            raise ScopeError(f"Cannot redeclare variable {name}")

        if constant:
            self.constants.add(name)

        self.variables[name] = value
        return value

    def assign(self, name: str, value: RuntimeValue) -> RuntimeValue:
        """
        Rebind an existing name in the scope that declared it.

        Raises:
            ScopeError: If `name` is a constant or is not declared anywhere
        """
        env = self.resolve(name)

        if name in env.constants:
            raise ScopeError(f"Cannot reassign to constant {name}")

        env.variables[name] = value
        return value

    def lookup(self, name: str) -> RuntimeValue:
        """Return the value bound to `name` in the nearest scope."""
        return self.resolve(name).variables[name]

    def resolve(self, name: str) -> "Environment":
        """
        Find the nearest scope that declares `name`.

        Raises:
            ScopeError: If no scope in the chain declares it
        """
        env: Optional[Environment] = self
        while env is not None:
            if name in env.variables:
                return env
            env = env.parent
        raise ScopeError(f"Cannot resolve {name} since it doesnt exist")

    def is_constant(self, name: str) -> bool:
        return name in self.resolve(name).constants

    def names(self) -> List[str]:
        """All names visible from this scope, innermost first, without duplicates."""
        seen: List[str] = []
        env: Optional[Environment] = self
        while env is not None:
            for name in env.variables:
                if name not in seen:
                    seen.append(name)
            env = env.parent
        return seen


def _make_print(out: Optional[TextIO]):
    def print_(args: List[RuntimeValue], env: Environment) -> RuntimeValue:
        stream = out if out is not None else sys.stdout
        for arg in args:
            stream.write(display(arg) + "\n")
        return NULL

    return print_


def _time(args: List[RuntimeValue], env: Environment) -> RuntimeValue:
    return NumberValue(time.time_ns() // 1_000_000)


GLOBAL_NAMES = ("true", "false", "null", "print", "time")


def create_global_environment(out: Optional[TextIO] = None) -> Environment:
    """
    Build the root scope every program runs in.

    Args:
        out: Stream `print` writes to (defaults to sys.stdout at call time)

    Returns:
        Environment with constants true, false, null and natives print, time
    """
    env = Environment()
    env.declare("true", TRUE, constant=True)
    env.declare("false", FALSE, constant=True)
    env.declare("null", NULL, constant=True)
    env.declare("print", NativeFunctionValue("print", _make_print(out)), constant=True)
    env.declare("time", NativeFunctionValue("time", _time), constant=True)
    logger.debug("Created global environment with %d names", len(env.variables))
    return env


__all__ = ["Environment", "create_global_environment", "GLOBAL_NAMES"]
