"""
Error hierarchy for Selve.

Every failure the toolchain reports to a user is a SelveError subclass.
Nothing in the lexer, parser or interpreter panics, exits the process or
swallows an error: the caller (CLI, REPL, tests) decides what to do.

    SelveError
        LexError      - unexpected character in source text
        ParseError    - token stream does not match the grammar
        ScopeError    - declare/assign/lookup failures in an Environment
        EvalError     - runtime failures while evaluating a program
        ConfigError   - invalid configuration values
"""

from __future__ import annotations

from typing import Optional


class SelveError(Exception):
    """Base class for all errors surfaced to users."""

    def __init__(
        self,
        message: str,
        *,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def format(self) -> str:
        if self.line is not None and self.column is not None:
            return f"{self.message} (line {self.line}, column {self.column})"
        if self.line is not None:
            return f"{self.message} (line {self.line})"
        return self.message


class LexError(SelveError):
    """Raised when the lexer meets a character it cannot tokenize."""


class ParseError(SelveError):
    """Raised when the parser encounters invalid syntax."""


class ScopeError(SelveError):
    """Raised on redeclaration, constant reassignment or unknown names."""


class EvalError(SelveError):
    """Raised when evaluation of a well-formed program fails."""


class ConfigError(SelveError):
    """Raised when configuration values are invalid."""


__all__ = [
    "SelveError",
    "LexError",
    "ParseError",
    "ScopeError",
    "EvalError",
    "ConfigError",
]
