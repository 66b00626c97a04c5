"""Token definitions for the Jack lexer.

This module defines the `TokenType` enum for the five token kinds of the
Jack language and a small `Token` dataclass that holds a token kind, its
lexeme and the source line it came from. Tokens are the atomic units
produced by the lexer and consumed by the parser.

It also carries the fixed keyword and symbol tables and the diagnostic XML
form of a token stream:

    <tokens>
    <keyword> class </keyword>
    <identifier> Main </identifier>
    <symbol> &lt; </symbol>
    ...
    </tokens>

`tokens_from_xml()` reads that form back, so lexing, rendering, re-reading
and rendering again yields identical text.
"""

from __future__ import annotations
from enum import Enum
from dataclasses import dataclass, field
from typing import Iterable, List


class TokenType(Enum):
    KEYWORD = "keyword"
    SYMBOL = "symbol"
    IDENTIFIER = "identifier"
    INT_CONST = "integerConstant"
    STRING_CONST = "stringConstant"

    def __str__(self) -> str:
        return self.name


KEYWORDS = frozenset(
    {
        "class",
        "constructor",
        "function",
        "method",
        "field",
        "static",
        "var",
        "int",
        "char",
        "boolean",
        "void",
        "true",
        "false",
        "null",
        "this",
        "let",
        "do",
        "if",
        "else",
        "while",
        "return",
    }
)

# Order matters only for readability; every entry is a single character.
SYMBOLS = "{}()[].,;+-*/&|<>=~"

XML_ESCAPES = {"<": "&lt;", ">": "&gt;", "&": "&amp;"}
XML_UNESCAPES = {v: k for k, v in XML_ESCAPES.items()}

MAX_INT_CONST = 32767


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int = field(default=0, compare=False)

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r})"

    @property
    def lexeme(self) -> str:
        return self.value

    def is_keyword(self, *values: str) -> bool:
        return self.type == TokenType.KEYWORD and (not values or self.value in values)

    def is_symbol(self, *values: str) -> bool:
        return self.type == TokenType.SYMBOL and (not values or self.value in values)

    def to_xml(self) -> str:
        value = self.value
        if self.type == TokenType.SYMBOL:
            value = XML_ESCAPES.get(value, value)
        tag = self.type.value
        return f"<{tag}> {value} </{tag}>"


def tokens_to_xml(tokens: Iterable[Token]) -> List[str]:
    """Render a token sequence as the `<tokens>` XML listing."""
    lines = ["<tokens>"]
    lines.extend(token.to_xml() for token in tokens)
    lines.append("</tokens>")
    return lines


def tokens_from_xml(lines: Iterable[str]) -> List[Token]:
    """Parse the `<tokens>` listing produced by `tokens_to_xml` back into tokens."""
    by_tag = {t.value: t for t in TokenType}
    result: List[Token] = []
    for raw in lines:
        line = raw.strip()
        if not line or line in ("<tokens>", "</tokens>"):
            continue
        tag = line[1 : line.index(">")]
        if tag not in by_tag:
            raise ValueError(f"Unknown token tag in XML: {line!r}")
        open_tag = f"<{tag}> "
        close_tag = f" </{tag}>"
        if not (line.startswith(open_tag) and line.endswith(close_tag)):
            raise ValueError(f"Malformed token XML line: {line!r}")
        value = line[len(open_tag) : -len(close_tag)]
        token_type = by_tag[tag]
        if token_type == TokenType.SYMBOL:
            value = XML_UNESCAPES.get(value, value)
        result.append(Token(token_type, value))
    return result
