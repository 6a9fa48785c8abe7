"""
Lexer for Selve (Layer 1: source text -> tokens).

Single pass over the source. Whitespace is skipped, `//` comments become
COMMENT tokens so the parser can keep them in the tree, and the stream
always ends with exactly one EOF token.
"""

import logging
from typing import List

from selve.errors import LexError
from selve.tokens import SINGLE_CHAR_TOKENS, Token, TokenType, keyword_type

logger = logging.getLogger(__name__)


def _is_skippable(c: str) -> bool:
    return c in " \t\r\n"


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _is_identifier_start(c: str) -> bool:
    return c.isalpha() or c == "_"


def _is_identifier_part(c: str) -> bool:
    return c.isalnum() or c == "_"


class Lexer:
    """Turns source text into a list of tokens, tracking line and column."""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        return self.source[idx] if idx < len(self.source) else ""

    def _advance(self) -> str:
        c = self.source[self.pos]
        self.pos += 1
        if c == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return c

    def _read_while(self, predicate) -> str:
        start = self.pos
        while self._peek() and predicate(self._peek()):
            self._advance()
        return self.source[start:self.pos]

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []

        while self._peek():
            c = self._peek()

            if _is_skippable(c):
                self._advance()
                continue

            line, column = self.line, self.column

            if c == "/" and self._peek(1) == "/":
                self._advance()
                self._advance()
                text = self._read_while(lambda ch: ch != "\n")
                tokens.append(Token(TokenType.COMMENT, text, line, column))
                continue

            if c in SINGLE_CHAR_TOKENS:
                self._advance()
                tokens.append(Token(SINGLE_CHAR_TOKENS[c], c, line, column))
                continue

            if _is_digit(c):
                number = self._read_while(_is_digit)
                tokens.append(Token(TokenType.NUMBER, number, line, column))
                continue

            if _is_identifier_start(c):
                word = self._read_while(_is_identifier_part)
                token_type = keyword_type(word) or TokenType.IDENTIFIER
                tokens.append(Token(token_type, word, line, column))
                continue

            raise LexError(f"Unexpected character '{c}'", line=line, column=column)

        tokens.append(Token(TokenType.EOF, "", self.line, self.column))
        logger.debug("Tokenized %d characters into %d tokens", len(self.source), len(tokens))
        return tokens


def tokenize(source: str) -> List[Token]:
    """
    Tokenize Selve source text.

    Args:
        source: Program text

    Returns:
        List of tokens ending with a single EOF token

    Raises:
        LexError: On a character that starts no token
    """
    return Lexer(source).tokenize()


__all__ = ["Lexer", "tokenize"]
