"""
Recursive-descent parser for Selve (Layer 2: tokens -> AST).

Precedence, lowest first:
    assignment      a = b = c            (right associative)
    object literal  { key: value, key }
    additive        + -
    multiplicative  * / %
    unary           -x
    call / member   f(x)  obj.key  obj[expr]  f()()
    primary         identifier, number, ( expression )

Statements are variable declarations, function declarations, comments
and bare expressions. Semicolons are optional terminators, but two
statements on the same line must be separated by one.

Comment tokens are only meaningful at statement positions, where they
become Comment nodes. Anywhere else (inside an argument list spread over
several lines, for instance) they are skipped.
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
    Property,
    UnaryExpr,
    VarDeclaration,
)
from selve.errors import ParseError
from selve.lexer import tokenize
from selve.tokens import RESERVED, Token, TokenType

logger = logging.getLogger(__name__)

ADDITIVE_OPERATORS = ("+", "-")
MULTIPLICATIVE_OPERATORS = ("*", "/", "%")


def _error(message: str, token: Token) -> ParseError:
    return ParseError(message, line=token.line, column=token.column)


class Parser:
    """
    Produces a Program from source text.

    A Parser can be reused: every call to produce_ast starts from a
    fresh token stream.
    """

    def __init__(self):
        self.tokens: List[Token] = []
        self.pos = 0
        self._previous: Optional[Token] = None

    def produce_ast(self, source: str) -> Program:
        """
        Parse source text into a Program.

        Raises:
            LexError: If the source cannot be tokenized
            ParseError: If the tokens do not form a valid program, or nest
                deeper than Python's recursion limit allows
        """
        self.tokens = tokenize(source)
        self.pos = 0
        self._previous = None

        body: List[Node] = []
        try:
            while self._peek(keep_comments=True).type is not TokenType.EOF:
                body.append(self._parse_statement())
        except RecursionError:
            raise _error("Expression nested too deeply", self._peek(keep_comments=True)) from None

        logger.debug("Parsed %d top-level statements", len(body))
        return Program(body=tuple(body))

    # ------------------------------------------------------------------
    # Token stream helpers
    # ------------------------------------------------------------------

    def _next_index(self, keep_comments: bool) -> int:
        index = self.pos
        if not keep_comments:
            while self.tokens[index].type is TokenType.COMMENT:
                index += 1
        return index

    def _peek(self, keep_comments: bool = False) -> Token:
        return self.tokens[self._next_index(keep_comments)]

    def _eat(self) -> Token:
        index = self._next_index(keep_comments=False)
        token = self.tokens[index]
        self.pos = index if token.type is TokenType.EOF else index + 1
        self._previous = token
        return token

    def _expect(self, token_type: TokenType, message: str) -> Token:
        token = self._eat()
        if token.type is not token_type:
            raise _error(
                f"{message}: expected '{token_type.value}', found {token.describe()}",
                token,
            )
        return token

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statement(self) -> Node:
        token = self._peek(keep_comments=True)

        if token.type is TokenType.COMMENT:
            self.pos += 1
            return Comment(text=token.value)

        if token.type in RESERVED:
            raise _error(f"'{token.value}' is reserved but not supported yet", token)

        if token.type is TokenType.FN:
            declaration = self._parse_function_declaration()
            if self._peek(keep_comments=True).type is TokenType.SEMICOLON:
                self.pos += 1
            return declaration

        if token.type in (TokenType.LET, TokenType.CONST):
            statement = self._parse_variable_declaration()
        else:
            statement = self._parse_expression()

        self._end_statement()
        return statement

    def _end_statement(self) -> None:
        token = self._peek(keep_comments=True)

        if token.type is TokenType.SEMICOLON:
            self.pos += 1
            return

        if token.type in (TokenType.RIGHT_BRACE, TokenType.EOF, TokenType.COMMENT):
            return

        if self._previous is not None and token.line > self._previous.line:
            return

        raise _error(f"Expected ';' after statement, found {token.describe()}", token)

    def _parse_variable_declaration(self) -> VarDeclaration:
        keyword = self._eat()
        constant = keyword.type is TokenType.CONST
        identifier = self._expect(
            TokenType.IDENTIFIER,
            "Expected identifier name after let or const keyword",
        ).value

        if self._peek().type is not TokenType.EQUALS:
            if constant:
                raise _error("A value is required for const assignment", keyword)
            return VarDeclaration(constant=False, identifier=identifier, value=None)

        self._eat()
        return VarDeclaration(
            constant=constant,
            identifier=identifier,
            value=self._parse_expression(),
        )

    def _parse_function_declaration(self) -> FnDeclaration:
        self._eat()
        name = self._expect(
            TokenType.IDENTIFIER,
            "Expected function name following fn keyword",
        ).value

        self._expect(TokenType.LEFT_PAREN, "Expected parameter list after function name")
        parameters: List[str] = []
        if self._peek().type is not TokenType.RIGHT_PAREN:
            while True:
                token = self._eat()
                if token.type is not TokenType.IDENTIFIER:
                    raise _error(f"Expected parameter name, found {token.describe()}", token)
                if token.value in parameters:
                    raise _error(f"Duplicate parameter name '{token.value}'", token)
                parameters.append(token.value)
                if self._peek().type is not TokenType.COMMA:
                    break
                self._eat()
        self._expect(TokenType.RIGHT_PAREN, "Missing closing parenthesis in parameter list")

        self._expect(TokenType.LEFT_BRACE, "Expected function body following declaration")
        body: List[Node] = []
        while self._peek(keep_comments=True).type not in (TokenType.RIGHT_BRACE, TokenType.EOF):
            body.append(self._parse_statement())
        self._expect(TokenType.RIGHT_BRACE, "Closing brace expected after function body")

        return FnDeclaration(name=name, parameters=tuple(parameters), body=tuple(body))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _parse_expression(self) -> Node:
        return self._parse_assignment_expr()

    def _parse_assignment_expr(self) -> Node:
        left = self._parse_object_expr()

        if self._peek().type is TokenType.EQUALS:
            self._eat()
            value = self._parse_assignment_expr()
            return AssignmentExpr(assignee=left, value=value)

        return left

    def _parse_object_expr(self) -> Node:
        """{ foo: foo, bar, baz: { z: true } }"""
        if self._peek().type is not TokenType.LEFT_BRACE:
            return self._parse_additive_expr()

        self._eat()
        properties: List[Property] = []

        while self._peek().type not in (TokenType.RIGHT_BRACE, TokenType.EOF):
            key = self._expect(TokenType.IDENTIFIER, "Object literal identifier expected").value

            following = self._peek().type
            if following is TokenType.COMMA:
                # { key, }
                self._eat()
                properties.append(Property(key=key))
                continue
            if following is TokenType.RIGHT_BRACE:
                # { key }
                properties.append(Property(key=key))
                continue

            self._expect(TokenType.COLON, "Missing colon after identifier in object expression")
            properties.append(Property(key=key, value=self._parse_expression()))

            if self._peek().type not in (TokenType.RIGHT_BRACE, TokenType.EOF):
                self._expect(TokenType.COMMA, "Expected comma or closing brace after property")

        self._expect(TokenType.RIGHT_BRACE, "Object literal is missing a closing brace")
        return ObjectLiteral(properties=tuple(properties))

    def _parse_additive_expr(self) -> Node:
        left = self._parse_multiplicative_expr()

        while self._is_operator(ADDITIVE_OPERATORS):
            operator = self._eat().value
            right = self._parse_multiplicative_expr()
            left = BinaryExpr(operator=operator, left=left, right=right)

        return left

    def _parse_multiplicative_expr(self) -> Node:
        left = self._parse_unary_expr()

        while self._is_operator(MULTIPLICATIVE_OPERATORS):
            operator = self._eat().value
            right = self._parse_unary_expr()
            left = BinaryExpr(operator=operator, left=left, right=right)

        return left

    def _is_operator(self, operators) -> bool:
        token = self._peek()
        return token.type is TokenType.BINARY_OPERATOR and token.value in operators

    def _parse_unary_expr(self) -> Node:
        if self._is_operator(("-",)):
            operator = self._eat().value
            return UnaryExpr(operator=operator, operand=self._parse_unary_expr())
        return self._parse_call_member_expr()

    def _parse_call_member_expr(self) -> Node:
        expr = self._parse_primary_expr()

        while True:
            token_type = self._peek().type

            if token_type is TokenType.DOT:
                self._eat()
                token = self._eat()
                if token.type is not TokenType.IDENTIFIER:
                    raise _error("Dot operator requires an identifier on the right", token)
                expr = MemberExpr(object=expr, property=Identifier(token.value), computed=False)

            elif token_type is TokenType.LEFT_BRACKET:
                self._eat()
                prop = self._parse_expression()
                self._expect(
                    TokenType.RIGHT_BRACKET,
                    "Missing closing bracket in computed member expression",
                )
                expr = MemberExpr(object=expr, property=prop, computed=True)

            elif token_type is TokenType.LEFT_PAREN:
                expr = CallExpr(caller=expr, args=tuple(self._parse_arguments()))

            else:
                return expr

    def _parse_arguments(self) -> List[Node]:
        """foo(a, b + 1, bar())"""
        self._expect(TokenType.LEFT_PAREN, "Expected open parenthesis")

        args: List[Node] = []
        if self._peek().type is not TokenType.RIGHT_PAREN:
            args.append(self._parse_assignment_expr())
            while self._peek().type is TokenType.COMMA:
                self._eat()
                args.append(self._parse_assignment_expr())

        self._expect(TokenType.RIGHT_PAREN, "Missing closing parenthesis in argument list")
        return args

    def _parse_primary_expr(self) -> Node:
        token = self._eat()

        if token.type is TokenType.IDENTIFIER:
            return Identifier(name=token.value)

        if token.type is TokenType.NUMBER:
            return NumericLiteral(value=token.value)

        if token.type is TokenType.LEFT_PAREN:
            value = self._parse_expression()
            self._expect(TokenType.RIGHT_PAREN, "Missing closing parenthesis in expression")
            return value

        if token.type in RESERVED:
            raise _error(f"'{token.value}' is reserved but not supported yet", token)

        if token.type is TokenType.EOF:
            raise _error("Unexpected end of input", token)

        raise _error(f"Unexpected token {token.describe()}", token)


def parse(source: str) -> Program:
    """Parse source text into a Program."""
    return Parser().produce_ast(source)


__all__ = ["Parser", "parse"]
