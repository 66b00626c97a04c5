"""Pretty-printer for the AST and symbol tables.

Provides `PrettyPrinter.print_ast(node, indent, prefix)` which renders an
AST into a readable multi-line string, and
`PrettyPrinter.print_symbol_table(class_node)` which lists the class scope
and the scope of every subroutine with kind, type and index. Both are meant
for debugging and tests, not for producing source code.

Examples:
    PrettyPrinter.print_ast(class_node)
    PrettyPrinter.print_symbol_table(class_node)
"""

from __future__ import annotations
from typing import List
from ast_nodes import *
from symbols import SymbolKind, SymbolTable, SymbolTables


def _symbol_ref(symbol) -> str:
    if symbol is None:
        return ""
    return f" [{symbol.kind} {symbol.index}]"


class PrettyPrinter:
    @staticmethod
    def print_ast(node: ASTNode, indent: int = 0, prefix: str = "") -> str:
        """Pretty print AST and return as string."""
        lines = []
        indent_str = " " * indent
        pp = PrettyPrinter.print_ast

        if not isinstance(node, ASTNode):
            lines.append(f"{indent_str}{prefix}{node}")
            return "\n".join(lines)

        match node:
            case IntConstantNode(value=v):
                lines.append(f"{indent_str}{prefix}IntConstant({v})")

            case StringConstantNode(value=v):
                lines.append(f"{indent_str}{prefix}StringConstant({v!r})")

            case KeywordConstantNode(value=v):
                lines.append(f"{indent_str}{prefix}KeywordConstant({v})")

            case VariableNode(name=n, symbol=sym):
                lines.append(f"{indent_str}{prefix}Variable({n}{_symbol_ref(sym)})")

            case ArrayAccessNode(name=n, symbol=sym, index=idx):
                lines.append(f"{indent_str}{prefix}ArrayAccess({n}{_symbol_ref(sym)})")
                lines.append(pp(idx, indent + 2, "index: "))

            case SubroutineCallNode(receiver=recv, name=n, arguments=args):
                target = f"{recv}.{n}" if recv else n
                lines.append(f"{indent_str}{prefix}SubroutineCall({target})")
                for i, arg in enumerate(args):
                    lines.append(pp(arg, indent + 4, f"arg[{i}]: "))

            case GroupNode(expression=expr):
                lines.append(f"{indent_str}{prefix}Group")
                lines.append(pp(expr, indent + 2))

            case UnaryOpNode(operator=op, operand=operand):
                lines.append(f"{indent_str}{prefix}UnaryOp({op})")
                lines.append(pp(operand, indent + 2))

            case BinaryOpNode(left=left, operator=op, right=right):
                lines.append(f"{indent_str}{prefix}BinaryOp({op})")
                lines.append(pp(left, indent + 2, "left: "))
                lines.append(pp(right, indent + 2, "right: "))

            case LetStatementNode(name=n, symbol=sym, index=idx, value=value):
                lines.append(f"{indent_str}{prefix}Let({n}{_symbol_ref(sym)})")
                if idx is not None:
                    lines.append(pp(idx, indent + 2, "index: "))
                lines.append(pp(value, indent + 2, "value: "))

            case IfStatementNode(
                condition=cond, then_statements=then_s, else_statements=else_s
            ):
                lines.append(f"{indent_str}{prefix}IfStatement")
                lines.append(pp(cond, indent + 4, "condition: "))
                for i, stmt in enumerate(then_s):
                    lines.append(pp(stmt, indent + 4, f"then[{i}]: "))
                for i, stmt in enumerate(else_s or []):
                    lines.append(pp(stmt, indent + 4, f"else[{i}]: "))

            case WhileStatementNode(condition=cond, body=body):
                lines.append(f"{indent_str}{prefix}WhileStatement")
                lines.append(pp(cond, indent + 4, "condition: "))
                for i, stmt in enumerate(body):
                    lines.append(pp(stmt, indent + 4, f"body[{i}]: "))

            case DoStatementNode(call=call):
                lines.append(f"{indent_str}{prefix}Do")
                lines.append(pp(call, indent + 2))

            case ReturnStatementNode(expression=expr):
                lines.append(f"{indent_str}{prefix}Return")
                if expr is not None:
                    lines.append(pp(expr, indent + 2, "expr: "))

            case ClassVarDecNode(kind=kind, var_type=vt, names=names):
                lines.append(f"{indent_str}{prefix}ClassVarDec({kind} {vt} {', '.join(names)})")

            case VarDecNode(var_type=vt, names=names):
                lines.append(f"{indent_str}{prefix}VarDec({vt} {', '.join(names)})")

            case ParameterNode(var_type=vt, name=n):
                lines.append(f"{indent_str}{prefix}Parameter({vt} {n})")

            case SubroutineDecNode(kind=kind, return_type=rt, name=n, parameters=params):
                args = ", ".join(f"{p.var_type} {p.name}" for p in params)
                lines.append(
                    f"{indent_str}{prefix}{str(kind).capitalize()}({n}({args}) -> {rt}, locals={node.local_count})"
                )
                for i, stmt in enumerate(node.statements):
                    lines.append(pp(stmt, indent + 4, f"stmt[{i}]: "))

            case ClassNode(name=n, class_var_decs=cvds, subroutine_decs=subs):
                lines.append(f"{indent_str}{prefix}Class({n}, fields={node.field_count})")
                for dec in cvds:
                    lines.append(pp(dec, indent + 2))
                for sub in subs:
                    lines.append(pp(sub, indent + 2))

            case _:
                lines.append(f"{indent_str}{prefix}Unknown node type: {type(node)}")

        return "\n".join(line for line in lines if line)

    @staticmethod
    def print_table(table: SymbolTable, indent: int = 0) -> List[str]:
        indent_str = " " * indent
        lines = [f"{indent_str}scope {table.name or '<anonymous>'}:"]
        for kind in table.kinds:
            for symbol in table.of_kind(kind):
                lines.append(
                    f"{indent_str}  {symbol.name}: {symbol.type} {kind} {symbol.index}"
                )
        return lines

    @staticmethod
    def print_symbol_table(class_node: ClassNode) -> str:
        """List every scope of a class, rebuilt from its declarations.

        The parser discards a subroutine scope when the next one starts, so
        the listing is reconstructed from the AST with the same rules.
        """
        tables = SymbolTables()
        tables.reset_class(class_node.name)
        for dec in class_node.class_var_decs:
            for name in dec.names:
                tables.define_class_symbol(name, dec.var_type, dec.kind)

        lines = PrettyPrinter.print_table(tables.class_table)
        for sub in class_node.subroutine_decs:
            tables.reset_subroutine(
                class_node.name, sub.kind == SubroutineKind.METHOD, sub.name
            )
            for param in sub.parameters:
                tables.define_subroutine_symbol(param.name, param.var_type, SymbolKind.ARG)
            for dec in sub.var_decs:
                for name in dec.names:
                    tables.define_subroutine_symbol(name, dec.var_type, SymbolKind.VAR)
            lines.extend(PrettyPrinter.print_table(tables.subroutine_table, indent=2))
        return "\n".join(lines)
