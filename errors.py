"""Error types shared by every stage of the toolchain.

All failures are fatal: a stage raises one of the exceptions below and the
command-line entry point catches it, prints a single diagnostic line and
exits with a nonzero status. Nothing in the toolchain tries to recover.

Each error knows its `kind` (the human readable category shown in the
diagnostic) and, when available, the 1-based source line it refers to.
"""

from __future__ import annotations
from typing import Optional


class CompileError(Exception):
    kind = "error"

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line:
            return f"{self.kind}: line {self.line}: {self.message}"
        return f"{self.kind}: {self.message}"


class LexicalError(CompileError):
    """Unknown character, unterminated string or malformed integer."""

    kind = "lexical error"


class ParseError(CompileError):
    """A token does not match what the current production expects."""

    kind = "syntax error"


class SymbolError(CompileError):
    """Redefinition in a scope or use of an undeclared variable."""

    kind = "symbol error"


class SourceError(CompileError):
    """A file could not be found, read or written."""

    kind = "io error"


class TranslationError(CompileError):
    kind = "vm error"


class AssemblyError(CompileError):
    kind = "assembly error"
