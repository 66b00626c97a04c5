"""AST node definitions for the Jack language.

This module defines the dataclasses the parser builds and the code
generator walks. There is one node class per grammar production; together
they form a sum type that the emitter takes apart with `match`. The
`NodeType` enum identifies node kinds for the pretty-printer and the XML
writer.

Conventions:
- All AST node dataclasses inherit from `ASTNode`, which records the node
    kind (`NodeType`) and the source `line` of its first token.
- Declaration and statement nodes that start with a keyword list the
    keywords that introduce them in `KEYWORDS`; the parser uses
    `starts(token)` to pick a production and `syntax.expect_keyword` to
    validate it.
- Expressions are a left-leaning tree of `BinaryOpNode`: Jack has no
    operator precedence, so `a + b * c` is `(a + b) * c`. Parentheses are
    kept as `GroupNode` so the parse tree can be rendered faithfully.
- Leaves that name a variable carry the `Symbol` resolved while parsing,
    so the code generator never consults a symbol table.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar, List, Optional, Tuple

from symbols import Symbol, SymbolKind
from tokens import Token


class NodeType(Enum):
    CLASS = auto()
    CLASS_VAR_DEC = auto()
    SUBROUTINE_DEC = auto()
    PARAMETER = auto()
    VAR_DEC = auto()
    LET_STMT = auto()
    IF_STMT = auto()
    WHILE_STMT = auto()
    DO_STMT = auto()
    RETURN_STMT = auto()
    BINARY_OP = auto()
    UNARY_OP = auto()
    INT_CONST = auto()
    STRING_CONST = auto()
    KEYWORD_CONST = auto()
    VARIABLE = auto()
    ARRAY_ACCESS = auto()
    SUBROUTINE_CALL = auto()
    GROUP = auto()

    def __str__(self) -> str:
        return self.name


class SubroutineKind(Enum):
    CONSTRUCTOR = "constructor"
    FUNCTION = "function"
    METHOD = "method"

    def __str__(self) -> str:
        return self.value


BINARY_OPERATORS = ("+", "-", "*", "/", "&", "|", "<", ">", "=")
UNARY_OPERATORS = ("-", "~")
KEYWORD_CONSTANTS = ("true", "false", "null", "this")
PRIMITIVE_TYPES = ("int", "char", "boolean")


# Base AST Node
@dataclass
class ASTNode:
    type: NodeType
    line: int = 0

    KEYWORDS: ClassVar[Tuple[str, ...]] = ()

    @classmethod
    def starts(cls, token: Optional[Token]) -> bool:
        """True when `token` is one of the keywords that open this production."""
        if not cls.KEYWORDS or token is None:
            return False
        return token.is_keyword(*cls.KEYWORDS)


# Expression Nodes
@dataclass
class IntConstantNode(ASTNode):
    type: NodeType = NodeType.INT_CONST
    value: int = 0


@dataclass
class StringConstantNode(ASTNode):
    type: NodeType = NodeType.STRING_CONST
    value: str = ""


@dataclass
class KeywordConstantNode(ASTNode):
    type: NodeType = NodeType.KEYWORD_CONST
    value: str = "null"

    KEYWORDS: ClassVar[Tuple[str, ...]] = KEYWORD_CONSTANTS


@dataclass
class VariableNode(ASTNode):
    type: NodeType = NodeType.VARIABLE
    name: str = ""
    symbol: Optional[Symbol] = None


@dataclass
class ArrayAccessNode(ASTNode):
    type: NodeType = NodeType.ARRAY_ACCESS
    name: str = ""
    symbol: Optional[Symbol] = None
    index: ASTNode = field(default_factory=lambda: IntConstantNode())


@dataclass
class SubroutineCallNode(ASTNode):
    """`name(args)` or `receiver.name(args)`.

    `receiver_symbol` is set when the receiver names a variable, which makes
    the call a method call on that object. An unset receiver with a
    `receiver` name is a call on the class of that name.
    """

    type: NodeType = NodeType.SUBROUTINE_CALL
    receiver: Optional[str] = None
    name: str = ""
    arguments: List[ASTNode] = field(default_factory=list)
    receiver_symbol: Optional[Symbol] = None


@dataclass
class GroupNode(ASTNode):
    type: NodeType = NodeType.GROUP
    expression: ASTNode = field(default_factory=lambda: IntConstantNode())


@dataclass
class UnaryOpNode(ASTNode):
    type: NodeType = NodeType.UNARY_OP
    operator: str = ""
    operand: ASTNode = field(default_factory=lambda: IntConstantNode())


@dataclass
class BinaryOpNode(ASTNode):
    type: NodeType = NodeType.BINARY_OP
    left: ASTNode = field(default_factory=lambda: IntConstantNode())
    operator: str = ""
    right: ASTNode = field(default_factory=lambda: IntConstantNode())


# Statement Nodes
@dataclass
class LetStatementNode(ASTNode):
    type: NodeType = NodeType.LET_STMT
    name: str = ""
    symbol: Optional[Symbol] = None
    index: Optional[ASTNode] = None
    value: ASTNode = field(default_factory=lambda: IntConstantNode())

    KEYWORDS: ClassVar[Tuple[str, ...]] = ("let",)


@dataclass
class IfStatementNode(ASTNode):
    type: NodeType = NodeType.IF_STMT
    condition: ASTNode = field(default_factory=lambda: KeywordConstantNode())
    then_statements: List[ASTNode] = field(default_factory=list)
    else_statements: Optional[List[ASTNode]] = None

    KEYWORDS: ClassVar[Tuple[str, ...]] = ("if",)


@dataclass
class WhileStatementNode(ASTNode):
    type: NodeType = NodeType.WHILE_STMT
    condition: ASTNode = field(default_factory=lambda: KeywordConstantNode())
    body: List[ASTNode] = field(default_factory=list)

    KEYWORDS: ClassVar[Tuple[str, ...]] = ("while",)


@dataclass
class DoStatementNode(ASTNode):
    type: NodeType = NodeType.DO_STMT
    call: SubroutineCallNode = field(default_factory=lambda: SubroutineCallNode())

    KEYWORDS: ClassVar[Tuple[str, ...]] = ("do",)


@dataclass
class ReturnStatementNode(ASTNode):
    type: NodeType = NodeType.RETURN_STMT
    expression: Optional[ASTNode] = None

    KEYWORDS: ClassVar[Tuple[str, ...]] = ("return",)


STATEMENT_NODES = (
    LetStatementNode,
    IfStatementNode,
    WhileStatementNode,
    DoStatementNode,
    ReturnStatementNode,
)
STATEMENT_KEYWORDS = tuple(k for n in STATEMENT_NODES for k in n.KEYWORDS)


# Declaration Nodes
@dataclass
class ClassVarDecNode(ASTNode):
    type: NodeType = NodeType.CLASS_VAR_DEC
    kind: SymbolKind = SymbolKind.FIELD
    var_type: str = "int"
    names: List[str] = field(default_factory=list)

    KEYWORDS: ClassVar[Tuple[str, ...]] = ("static", "field")


@dataclass
class ParameterNode(ASTNode):
    type: NodeType = NodeType.PARAMETER
    var_type: str = "int"
    name: str = ""


@dataclass
class VarDecNode(ASTNode):
    type: NodeType = NodeType.VAR_DEC
    var_type: str = "int"
    names: List[str] = field(default_factory=list)

    KEYWORDS: ClassVar[Tuple[str, ...]] = ("var",)


@dataclass
class SubroutineDecNode(ASTNode):
    type: NodeType = NodeType.SUBROUTINE_DEC
    kind: SubroutineKind = SubroutineKind.FUNCTION
    return_type: str = "void"
    name: str = ""
    parameters: List[ParameterNode] = field(default_factory=list)
    var_decs: List[VarDecNode] = field(default_factory=list)
    statements: List[ASTNode] = field(default_factory=list)

    KEYWORDS: ClassVar[Tuple[str, ...]] = ("constructor", "function", "method")

    @property
    def local_count(self) -> int:
        """Number of `var` slots, summed over every `var` declaration."""
        return sum(len(dec.names) for dec in self.var_decs)


# Class Node
@dataclass
class ClassNode(ASTNode):
    type: NodeType = NodeType.CLASS
    name: str = ""
    class_var_decs: List[ClassVarDecNode] = field(default_factory=list)
    subroutine_decs: List[SubroutineDecNode] = field(default_factory=list)

    KEYWORDS: ClassVar[Tuple[str, ...]] = ("class",)

    @property
    def field_count(self) -> int:
        return sum(
            len(dec.names)
            for dec in self.class_var_decs
            if dec.kind == SymbolKind.FIELD
        )
