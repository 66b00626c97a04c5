"""Cursor over the token list of one translation unit.

The parser never backs up: it looks at most two tokens ahead (`first()` and
`second()`) and consumes with `advance()`. Past the end of the list every
operation returns `None`.
"""

from __future__ import annotations
from typing import List, Optional

from tokens import Token


class TokenStream:
    def __init__(self, tokens: List[Token]):
        self.tokens = list(tokens)
        self.pos = 0

    def __len__(self) -> int:
        return len(self.tokens)

    def peek(self, offset: int = 0) -> Optional[Token]:
        index = self.pos + offset
        if 0 <= index < len(self.tokens):
            return self.tokens[index]
        return None

    def first(self) -> Optional[Token]:
        """Return the token under the cursor without consuming it."""
        return self.peek(0)

    def second(self) -> Optional[Token]:
        """Return the token after the cursor without consuming anything."""
        return self.peek(1)

    def advance(self) -> Optional[Token]:
        """Return the token under the cursor and move past it."""
        token = self.peek(0)
        if token is not None:
            self.pos += 1
        return token

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def reset(self) -> None:
        self.pos = 0

    def context(self, radius: int = 5) -> str:
        """Show the tokens around the cursor, marking the current one."""
        start = max(0, self.pos - radius)
        end = min(len(self.tokens), self.pos + radius + 1)
        parts = []
        for i in range(start, end):
            text = self.tokens[i].value
            parts.append(f">>{text}<<" if i == self.pos else text)
        if self.pos >= len(self.tokens):
            parts.append(">><end><<")
        return " ".join(parts)
