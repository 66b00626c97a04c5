"""
Lexer for the Jack language.

Overview:
- This module turns comment-free source lines (see `source.strip_comments`)
    into a stream of `Token` objects defined in `tokens.py`.
- Jack has five token kinds: keywords, symbols, identifiers, integer
    constants and string constants. Every symbol is a single character.

Approach (line at a time):
1. If the line contains `"`, it is split on `"`. Odd pieces are string
    constants; their internal whitespace must survive, so each one is tagged
    with `STRING_MARKER` (three double quotes, which cannot occur in source)
    and kept whole. Even pieces are split on whitespace.
2. Otherwise the whole line is split on whitespace.
3. Each word is cut at every symbol character, emitting the symbol as its own
    fragment and keeping the fragments in source order.
4. Each fragment is classified: keyword table, symbol table, decimal
    integer, string marker, and otherwise identifier.

Examples:
    Input:  'let s = "a b";'
    Tokens: [KEYWORD('let'), IDENTIFIER('s'), SYMBOL('='),
             STRING_CONST('a b'), SYMBOL(';')]

Errors are raised as `LexicalError` carrying the line number.
"""

from __future__ import annotations
import re
from typing import Iterator, List, Sequence, Union

from errors import LexicalError
from source import SourceLine, strip_comments
from tokens import Token, TokenType, KEYWORDS, SYMBOLS, MAX_INT_CONST

STRING_MARKER = '"""'

IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class Lexer:
    def __init__(self, lines: Sequence[Union[str, SourceLine]]):
        self.lines: List[SourceLine] = [
            line if isinstance(line, SourceLine) else SourceLine(i, line)
            for i, line in enumerate(lines, start=1)
        ]

    def error(self, message: str, line: int) -> LexicalError:
        return LexicalError(message, line)

    def split_words(self, line: SourceLine) -> List[str]:
        """Split a line on whitespace, keeping string constants whole."""
        text = line.text
        if '"' not in text:
            return text.split()

        pieces = text.split('"')
        # An even number of pieces means an odd number of quotes.
        if len(pieces) % 2 == 0:
            raise self.error(f"unterminated string constant: {text!r}", line.number)

        words: List[str] = []
        for i, piece in enumerate(pieces):
            if i % 2 == 1:
                words.append(STRING_MARKER + piece)
            else:
                words.extend(piece.split())
        return words

    @staticmethod
    def split_symbols(word: str) -> List[str]:
        """Cut a word at every symbol character, keeping the symbols."""
        if word.startswith(STRING_MARKER):
            return [word]

        fragments: List[str] = []
        current: List[str] = []
        for ch in word:
            if ch in SYMBOLS:
                if current:
                    fragments.append("".join(current))
                    current = []
                fragments.append(ch)
            else:
                current.append(ch)
        if current:
            fragments.append("".join(current))
        return fragments

    def classify(self, fragment: str, line: int) -> Token:
        """Turn one fragment into a token."""
        if fragment.startswith(STRING_MARKER):
            return Token(TokenType.STRING_CONST, fragment[len(STRING_MARKER) :], line)
        if fragment in KEYWORDS:
            return Token(TokenType.KEYWORD, fragment, line)
        if fragment in SYMBOLS:
            return Token(TokenType.SYMBOL, fragment, line)
        if fragment[0].isdigit():
            return self.integer(fragment, line)
        if IDENTIFIER_RE.fullmatch(fragment):
            return Token(TokenType.IDENTIFIER, fragment, line)

        bad = next(
            (ch for ch in fragment if not (ch.isalnum() or ch == "_")), fragment
        )
        raise self.error(f"unknown character {bad!r} in {fragment!r}", line)

    def integer(self, fragment: str, line: int) -> Token:
        """Validate a decimal integer constant."""
        if not (fragment.isascii() and fragment.isdigit()):
            raise self.error(f"malformed integer constant {fragment!r}", line)
        if int(fragment) > MAX_INT_CONST:
            raise self.error(
                f"integer constant {fragment} out of range 0..{MAX_INT_CONST}", line
            )
        return Token(TokenType.INT_CONST, fragment, line)

    def tokenize_line(self, line: SourceLine) -> Iterator[Token]:
        for word in self.split_words(line):
            for fragment in self.split_symbols(word):
                yield self.classify(fragment, line.number)

    def tokens(self) -> Iterator[Token]:
        """Lazily yield tokens in source order."""
        for line in self.lines:
            yield from self.tokenize_line(line)

    def tokenize(self) -> List[Token]:
        """Return all tokens as a list."""
        return list(self.tokens())


def tokenize_text(text: str) -> List[Token]:
    """Strip comments from raw source text and tokenize it."""
    return Lexer(strip_comments(text)).tokenize()
