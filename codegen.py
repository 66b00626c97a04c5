"""VM code generation from the Jack AST.

Overview:
- `CodeGenerator.generate(class_node)` walks a `ClassNode` and returns the
    flat list of VM instructions for the class, one instruction per string
    (`push constant 7`, `call Math.multiply 2`, `label WHILE_START_ID_1`).
- The walk is a tree-walk over the AST sum type with `match`: every node
    class has exactly one case. Context (enclosing class name) is passed
    down explicitly.
- Control-flow labels are minted from an `IdGenerator`. One generator is
    normally shared by every translation unit of a run so ids keep growing;
    creating a new generator (or calling `reset()`) before a compile makes
    the output byte-for-byte reproducible.

Conventions implemented here:
- Subroutine entry: `function C.s k` with `k` the number of locals. A
    constructor allocates `field_count` words with `Memory.alloc` and stores
    the address in `pointer 0`; a method moves its `argument 0` there.
- Expressions evaluate strictly left to right: `a op1 b op2 c` emits
    `a b op1 c op2`. `*` and `/` call `Math.multiply` and `Math.divide`.
- Calls: `f(...)` is a method call on `this`; `x.f(...)` with `x` a
    variable of type `T` is a method call `T.f` with `x` pushed first;
    otherwise `X.f(...)` is a plain call on class `X`.
- Array writes stash the value in `temp 0` before setting `pointer 1`,
    because evaluating the right-hand side may itself move `that`.
"""

from __future__ import annotations
import logging
from typing import List, Optional

from ast_nodes import *
from symbols import Symbol

logger = logging.getLogger(__name__)


BINARY_OP_CODE = {
    "+": ["add"],
    "-": ["sub"],
    "*": ["call Math.multiply 2"],
    "/": ["call Math.divide 2"],
    "&": ["and"],
    "|": ["or"],
    "<": ["lt"],
    ">": ["gt"],
    "=": ["eq"],
}

UNARY_OP_CODE = {
    "-": "neg",
    "~": "not",
}


class IdGenerator:
    """Process-wide source of fresh label ids: ID_1, ID_2, ..."""

    def __init__(self) -> None:
        self.last = 0

    def generate(self) -> str:
        self.last += 1
        return f"ID_{self.last}"

    def reset(self) -> None:
        self.last = 0


class CodeGenerator:
    def __init__(self, ids: Optional[IdGenerator] = None):
        self.ids = ids if ids is not None else IdGenerator()
        self.class_name = ""
        self.code: List[str] = []

    def emit(self, *instructions: str) -> None:
        self.code.extend(instructions)

    def push(self, segment: str, index: int) -> None:
        self.emit(f"push {segment} {index}")

    def pop(self, segment: str, index: int) -> None:
        self.emit(f"pop {segment} {index}")

    def push_symbol(self, symbol: Symbol) -> None:
        self.push(symbol.segment, symbol.index)

    def pop_symbol(self, symbol: Symbol) -> None:
        self.pop(symbol.segment, symbol.index)

    def generate(self, class_node: ClassNode) -> List[str]:
        """Return the VM instructions for a whole class."""
        self.class_name = class_node.name
        self.code = []
        for subroutine in class_node.subroutine_decs:
            self.gen_subroutine(subroutine, class_node.field_count)
        logger.debug("generated %d VM instructions for %s", len(self.code), self.class_name)
        return self.code

    def gen_subroutine(self, node: SubroutineDecNode, field_count: int) -> None:
        self.emit(f"function {self.class_name}.{node.name} {node.local_count}")

        match node.kind:
            case SubroutineKind.CONSTRUCTOR:
                self.push("constant", field_count)
                self.emit("call Memory.alloc 1")
                self.pop("pointer", 0)
            case SubroutineKind.METHOD:
                self.push("argument", 0)
                self.pop("pointer", 0)
            case SubroutineKind.FUNCTION:
                pass

        self.gen_statements(node.statements)

    def gen_statements(self, statements: List[ASTNode]) -> None:
        for statement in statements:
            self.gen_statement(statement)

    def gen_statement(self, node: ASTNode) -> None:
        match node:
            case LetStatementNode(symbol=symbol, index=None, value=value):
                self.gen_expression(value)
                self.pop_symbol(symbol)

            case LetStatementNode(symbol=symbol, index=index, value=value):
                self.push_symbol(symbol)
                self.gen_expression(index)
                self.emit("add")
                self.gen_expression(value)
                self.pop("temp", 0)
                self.pop("pointer", 1)
                self.push("temp", 0)
                self.pop("that", 0)

            case IfStatementNode(
                condition=condition,
                then_statements=then_statements,
                else_statements=else_statements,
            ):
                uid = self.ids.generate()
                else_label = f"ELSE_START_{uid}"
                end_label = f"IF_END_{uid}"

                # if-goto jumps on true, so branch to the else part on ~cond.
                self.gen_expression(condition)
                self.emit("not", f"if-goto {else_label}")
                self.gen_statements(then_statements)
                self.emit(f"goto {end_label}", f"label {else_label}")
                if else_statements:
                    self.gen_statements(else_statements)
                self.emit(f"label {end_label}")

            case WhileStatementNode(condition=condition, body=body):
                uid = self.ids.generate()
                start_label = f"WHILE_START_{uid}"
                end_label = f"WHILE_END_{uid}"

                self.emit(f"label {start_label}")
                self.gen_expression(condition)
                self.emit("not", f"if-goto {end_label}")
                self.gen_statements(body)
                self.emit(f"goto {start_label}", f"label {end_label}")

            case DoStatementNode(call=call):
                self.gen_call(call)
                # discard the return value
                self.pop("temp", 0)

            case ReturnStatementNode(expression=expression):
                if expression is None:
                    self.push("constant", 0)
                else:
                    self.gen_expression(expression)
                self.emit("return")

            case _:
                raise TypeError(f"Unexpected statement node: {node!r}")

    def gen_expression(self, node: ASTNode) -> None:
        match node:
            case IntConstantNode(value=value):
                self.push("constant", value)

            case StringConstantNode(value=value):
                self.push("constant", len(value))
                self.emit("call String.new 1")
                for ch in value:
                    self.push("constant", ord(ch))
                    self.emit("call String.appendChar 2")

            case KeywordConstantNode(value=value):
                match value:
                    case "true":
                        self.push("constant", 0)
                        self.emit("not")
                    case "this":
                        self.push("pointer", 0)
                    case _:
                        # false and null
                        self.push("constant", 0)

            case VariableNode(symbol=symbol):
                self.push_symbol(symbol)

            case ArrayAccessNode(symbol=symbol, index=index):
                self.push_symbol(symbol)
                self.gen_expression(index)
                self.emit("add")
                self.pop("pointer", 1)
                self.push("that", 0)

            case GroupNode(expression=expression):
                self.gen_expression(expression)

            case UnaryOpNode(operator=op, operand=operand):
                self.gen_expression(operand)
                self.emit(UNARY_OP_CODE[op])

            case BinaryOpNode(left=left, operator=op, right=right):
                self.gen_expression(left)
                self.gen_expression(right)
                self.emit(*BINARY_OP_CODE[op])

            case SubroutineCallNode():
                self.gen_call(node)

            case _:
                raise TypeError(f"Unexpected expression node: {node!r}")

    def gen_call(self, node: SubroutineCallNode) -> None:
        n_args = len(node.arguments)

        if node.receiver is None:
            # f(args): method on the current object
            self.push("pointer", 0)
            target = f"{self.class_name}.{node.name}"
            n_args += 1
        elif node.receiver_symbol is not None:
            # x.f(args): method on the object held by variable x
            self.push_symbol(node.receiver_symbol)
            target = f"{node.receiver_symbol.type}.{node.name}"
            n_args += 1
        else:
            # X.f(args): function or constructor of class X
            target = f"{node.receiver}.{node.name}"

        for argument in node.arguments:
            self.gen_expression(argument)
        self.emit(f"call {target} {n_args}")


def generate_code(class_node: ClassNode, ids: Optional[IdGenerator] = None) -> List[str]:
    return CodeGenerator(ids).generate(class_node)
