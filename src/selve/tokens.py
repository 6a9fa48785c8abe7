"""
Token definitions for the Selve lexer.

A Token carries the exact source text it was built from. Numbers are not
converted here: conversion is an evaluation concern.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class TokenType(Enum):
    """
    Kinds of tokens produced by the lexer.

    Reserved keywords (struct, enum, return, if, else) are recognised so
    that they cannot be used as identifiers, but the parser rejects them.
    """

    # [a-zA-Z_][a-zA-Z0-9_]*
    IDENTIFIER = "identifier"
    # [0-9]+
    NUMBER = "number"
    # + - * / %
    BINARY_OPERATOR = "binary_operator"

    LEFT_BRACE = "{"
    RIGHT_BRACE = "}"
    LEFT_BRACKET = "["
    RIGHT_BRACKET = "]"
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    COLON = ":"
    SEMICOLON = ";"
    COMMA = ","
    EQUALS = "="
    DOT = "."

    # // to end of line
    COMMENT = "comment"

    # Keywords
    LET = "let"
    CONST = "const"
    FN = "fn"

    # Reserved keywords
    STRUCT = "struct"
    ENUM = "enum"
    RETURN = "return"
    IF = "if"
    ELSE = "else"

    EOF = "eof"


KEYWORDS: Dict[str, TokenType] = {
    "let": TokenType.LET,
    "const": TokenType.CONST,
    "fn": TokenType.FN,
    "struct": TokenType.STRUCT,
    "enum": TokenType.ENUM,
    "return": TokenType.RETURN,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
}

RESERVED = frozenset({
    TokenType.STRUCT,
    TokenType.ENUM,
    TokenType.RETURN,
    TokenType.IF,
    TokenType.ELSE,
})

SINGLE_CHAR_TOKENS: Dict[str, TokenType] = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    "[": TokenType.LEFT_BRACKET,
    "]": TokenType.RIGHT_BRACKET,
    "+": TokenType.BINARY_OPERATOR,
    "-": TokenType.BINARY_OPERATOR,
    "*": TokenType.BINARY_OPERATOR,
    "/": TokenType.BINARY_OPERATOR,
    "%": TokenType.BINARY_OPERATOR,
    "=": TokenType.EQUALS,
    ".": TokenType.DOT,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
    ";": TokenType.SEMICOLON,
}


def keyword_type(word: str) -> Optional[TokenType]:
    """Return the keyword TokenType for `word`, or None for identifiers."""
    return KEYWORDS.get(word)


@dataclass(frozen=True)
class Token:
    """
    A single lexical token.

    Properties:
        type: TokenType
        value: Exact source text ("" for EOF, text after // for comments)
        line: 1-based line of the first character
        column: 1-based column of the first character
    """

    type: TokenType
    value: str
    line: int = 0
    column: int = 0

    def describe(self) -> str:
        """Human-readable form used in error messages."""
        if self.type is TokenType.EOF:
            return "end of input"
        return f"'{self.value}'"
