"""Symbol tables for the two Jack scopes.

This module defines the `SymbolKind` enum (the four storage kinds), a
`Symbol` dataclass and `SymbolTable`, one scope with dense per-kind
indices. `SymbolTables` combines the class scope and the current
subroutine scope and implements the lookup rule used by the parser:

- `static` and `field` symbols live in the class scope for the whole
  translation unit.
- `argument` and `var` symbols live in the subroutine scope, which is reset
  at the start of every subroutine declaration. For a `method`, argument 0
  is the implicit `this` whose type is the enclosing class.
- Lookup searches the subroutine scope first, then the class scope.

Indices start at 0 per kind and per scope and follow declaration order.
"""

from __future__ import annotations
import logging
from enum import Enum
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from errors import SymbolError

logger = logging.getLogger(__name__)


class SymbolKind(Enum):
    STATIC = "static"
    FIELD = "field"
    ARG = "argument"
    VAR = "var"

    def __str__(self) -> str:
        return self.value

    @property
    def segment(self) -> str:
        """VM memory segment holding symbols of this kind."""
        return SEGMENTS[self]


SEGMENTS: Dict[SymbolKind, str] = {
    SymbolKind.STATIC: "static",
    SymbolKind.FIELD: "this",
    SymbolKind.ARG: "argument",
    SymbolKind.VAR: "local",
}

CLASS_KINDS = (SymbolKind.STATIC, SymbolKind.FIELD)
SUBROUTINE_KINDS = (SymbolKind.ARG, SymbolKind.VAR)


@dataclass(frozen=True)
class Symbol:
    name: str
    type: str
    kind: SymbolKind
    index: int

    def __repr__(self) -> str:
        return f"Symbol({self.name}, {self.type}, {self.kind}[{self.index}])"

    @property
    def segment(self) -> str:
        return self.kind.segment


class SymbolTable:
    def __init__(self, name: str, kinds: Iterable[SymbolKind]):
        self.name = name
        self.kinds = tuple(kinds)
        self.symbols: Dict[str, Symbol] = {}
        self.counts: Dict[SymbolKind, int] = {kind: 0 for kind in self.kinds}

    def __contains__(self, name: str) -> bool:
        return name in self.symbols

    def __len__(self) -> int:
        return len(self.symbols)

    def define(self, name: str, type_: str, kind: SymbolKind) -> Symbol:
        """Declare `name` in this scope and return its symbol."""
        if kind not in self.kinds:
            raise SymbolError(f"'{kind}' symbol '{name}' not allowed in scope '{self.name}'")
        if name in self.symbols:
            raise SymbolError(f"'{name}' already declared in scope '{self.name}'")

        symbol = Symbol(name, type_, kind, self.counts[kind])
        self.counts[kind] += 1
        self.symbols[name] = symbol
        logger.debug("define %s in %s", symbol, self.name)
        return symbol

    def lookup(self, name: str) -> Optional[Symbol]:
        return self.symbols.get(name)

    def count(self, kind: SymbolKind) -> int:
        return self.counts.get(kind, 0)

    def of_kind(self, kind: SymbolKind) -> List[Symbol]:
        return [s for s in self.symbols.values() if s.kind == kind]


class SymbolTables:
    def __init__(self, class_name: str = ""):
        self.class_name = class_name
        self.class_table = SymbolTable(class_name, CLASS_KINDS)
        self.subroutine_table = SymbolTable("", SUBROUTINE_KINDS)

    def reset_class(self, class_name: str) -> None:
        self.class_name = class_name
        self.class_table = SymbolTable(class_name, CLASS_KINDS)
        self.subroutine_table = SymbolTable("", SUBROUTINE_KINDS)

    def reset_subroutine(
        self, enclosing_class: str, is_method: bool, name: str = ""
    ) -> None:
        """Start a fresh subroutine scope.

        A method gets its implicit `this` as argument 0, typed as the
        enclosing class. Constructors and functions start empty.
        """
        scope = f"{enclosing_class}.{name}" if name else enclosing_class
        self.subroutine_table = SymbolTable(scope, SUBROUTINE_KINDS)
        if is_method:
            self.subroutine_table.define("this", enclosing_class, SymbolKind.ARG)

    def define_class_symbol(self, name: str, type_: str, kind: SymbolKind) -> Symbol:
        return self.class_table.define(name, type_, kind)

    def define_subroutine_symbol(
        self, name: str, type_: str, kind: SymbolKind
    ) -> Symbol:
        return self.subroutine_table.define(name, type_, kind)

    def lookup(self, name: str) -> Optional[Symbol]:
        """Find `name`, subroutine scope first. Returns None if undeclared."""
        symbol = self.subroutine_table.lookup(name)
        if symbol is not None:
            return symbol
        return self.class_table.lookup(name)

    def field_count(self) -> int:
        return self.class_table.count(SymbolKind.FIELD)

    def var_count(self) -> int:
        return self.subroutine_table.count(SymbolKind.VAR)
