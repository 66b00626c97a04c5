"""Token checks used by the parser.

Each check takes the token the parser just consumed (or `None` at end of
input) and either returns the validated text or raises `ParseError` naming
the expected class of token and the offending one.
"""

from __future__ import annotations
from typing import Optional

from ast_nodes import BINARY_OPERATORS, PRIMITIVE_TYPES, UNARY_OPERATORS
from errors import ParseError
from tokens import Token, TokenType


def describe(token: Optional[Token]) -> str:
    if token is None:
        return "end of input"
    return f"{token.type.value} '{token.value}'"


def syntax_error(expected: str, token: Optional[Token]) -> ParseError:
    line = token.line if token is not None else None
    return ParseError(f"expected {expected}, got {describe(token)}", line)


def expect_keyword(token: Optional[Token], *values: str) -> str:
    if token is None or not token.is_keyword(*values):
        expected = " or ".join(f"'{v}'" for v in values) if values else "keyword"
        raise syntax_error(f"keyword {expected}", token)
    return token.value


def expect_symbol(token: Optional[Token], *values: str) -> str:
    if token is None or not token.is_symbol(*values):
        expected = " or ".join(f"'{v}'" for v in values) if values else "symbol"
        raise syntax_error(f"symbol {expected}", token)
    return token.value


def expect_identifier(token: Optional[Token], role: str = "identifier") -> str:
    if token is None or token.type != TokenType.IDENTIFIER:
        raise syntax_error(role, token)
    return token.value


def expect_type(token: Optional[Token], allow_void: bool = False) -> str:
    """`int`, `char`, `boolean`, a class name, and `void` when allowed."""
    if token is not None:
        if token.is_keyword(*PRIMITIVE_TYPES):
            return token.value
        if allow_void and token.is_keyword("void"):
            return token.value
        if token.type == TokenType.IDENTIFIER:
            return token.value
    expected = "type or 'void'" if allow_void else "type"
    raise syntax_error(expected, token)


def expect_int_constant(token: Optional[Token]) -> int:
    if token is None or token.type != TokenType.INT_CONST:
        raise syntax_error("integer constant", token)
    return int(token.value)


def is_binary_operator(token: Optional[Token]) -> bool:
    return token is not None and token.is_symbol(*BINARY_OPERATORS)


def is_unary_operator(token: Optional[Token]) -> bool:
    return token is not None and token.is_symbol(*UNARY_OPERATORS)
