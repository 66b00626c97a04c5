"""Render a parsed class as the nested parse-tree XML.

This module provides `class_to_xml(class_node)` which returns the list of
lines of the parse tree in the usual nested form: one element per grammar
production (`<class>`, `<subroutineDec>`, `<letStatement>`, `<term>`, ...)
and one leaf per token, rendered exactly like `Token.to_xml()`.

The AST drops the punctuation tokens, so the writer puts them back from the
grammar. A left-leaning chain of `BinaryOpNode` is flattened into one
`<expression>` holding `term (op term)*`.
"""

from __future__ import annotations
from typing import List, Optional

from ast_nodes import *
from tokens import Token, TokenType

INDENT = "  "


def _type_token(name: str) -> Token:
    if name in PRIMITIVE_TYPES or name == "void":
        return Token(TokenType.KEYWORD, name)
    return Token(TokenType.IDENTIFIER, name)


class XmlWriter:
    def __init__(self) -> None:
        self.lines: List[str] = []
        self.depth = 0

    def leaf(self, token_type: TokenType, value: str) -> None:
        self.lines.append(INDENT * self.depth + Token(token_type, value).to_xml())

    def keyword(self, value: str) -> None:
        self.leaf(TokenType.KEYWORD, value)

    def symbol(self, value: str) -> None:
        self.leaf(TokenType.SYMBOL, value)

    def identifier(self, value: str) -> None:
        self.leaf(TokenType.IDENTIFIER, value)

    def type_name(self, name: str) -> None:
        token = _type_token(name)
        self.leaf(token.type, token.value)

    def open(self, tag: str) -> None:
        self.lines.append(f"{INDENT * self.depth}<{tag}>")
        self.depth += 1

    def close(self, tag: str) -> None:
        self.depth -= 1
        self.lines.append(f"{INDENT * self.depth}</{tag}>")

    # declarations

    def write_class(self, node: ClassNode) -> None:
        self.open("class")
        self.keyword("class")
        self.identifier(node.name)
        self.symbol("{")
        for dec in node.class_var_decs:
            self.write_class_var_dec(dec)
        for sub in node.subroutine_decs:
            self.write_subroutine_dec(sub)
        self.symbol("}")
        self.close("class")

    def write_names(self, names: List[str]) -> None:
        for i, name in enumerate(names):
            if i:
                self.symbol(",")
            self.identifier(name)
        self.symbol(";")

    def write_class_var_dec(self, node: ClassVarDecNode) -> None:
        self.open("classVarDec")
        self.keyword(node.kind.value)
        self.type_name(node.var_type)
        self.write_names(node.names)
        self.close("classVarDec")

    def write_subroutine_dec(self, node: SubroutineDecNode) -> None:
        self.open("subroutineDec")
        self.keyword(node.kind.value)
        self.type_name(node.return_type)
        self.identifier(node.name)
        self.symbol("(")
        self.open("parameterList")
        for i, param in enumerate(node.parameters):
            if i:
                self.symbol(",")
            self.type_name(param.var_type)
            self.identifier(param.name)
        self.close("parameterList")
        self.symbol(")")

        self.open("subroutineBody")
        self.symbol("{")
        for dec in node.var_decs:
            self.open("varDec")
            self.keyword("var")
            self.type_name(dec.var_type)
            self.write_names(dec.names)
            self.close("varDec")
        self.write_statements(node.statements)
        self.symbol("}")
        self.close("subroutineBody")
        self.close("subroutineDec")

    # statements

    def write_statements(self, statements: List[ASTNode]) -> None:
        self.open("statements")
        for stmt in statements:
            self.write_statement(stmt)
        self.close("statements")

    def write_block(self, statements: List[ASTNode]) -> None:
        self.symbol("{")
        self.write_statements(statements)
        self.symbol("}")

    def write_statement(self, node: ASTNode) -> None:
        match node:
            case LetStatementNode(name=name, index=index, value=value):
                self.open("letStatement")
                self.keyword("let")
                self.identifier(name)
                if index is not None:
                    self.symbol("[")
                    self.write_expression(index)
                    self.symbol("]")
                self.symbol("=")
                self.write_expression(value)
                self.symbol(";")
                self.close("letStatement")

            case IfStatementNode(
                condition=cond, then_statements=then_s, else_statements=else_s
            ):
                self.open("ifStatement")
                self.keyword("if")
                self.symbol("(")
                self.write_expression(cond)
                self.symbol(")")
                self.write_block(then_s)
                if else_s is not None:
                    self.keyword("else")
                    self.write_block(else_s)
                self.close("ifStatement")

            case WhileStatementNode(condition=cond, body=body):
                self.open("whileStatement")
                self.keyword("while")
                self.symbol("(")
                self.write_expression(cond)
                self.symbol(")")
                self.write_block(body)
                self.close("whileStatement")

            case DoStatementNode(call=call):
                self.open("doStatement")
                self.keyword("do")
                self.write_call(call)
                self.symbol(";")
                self.close("doStatement")

            case ReturnStatementNode(expression=expr):
                self.open("returnStatement")
                self.keyword("return")
                if expr is not None:
                    self.write_expression(expr)
                self.symbol(";")
                self.close("returnStatement")

            case _:
                raise TypeError(f"Unexpected statement node: {node!r}")

    # expressions

    def write_expression(self, node: ASTNode) -> None:
        # unfold the left-leaning operator chain back into term (op term)*
        operands: List[ASTNode] = []
        operators: List[str] = []
        while isinstance(node, BinaryOpNode):
            operands.append(node.right)
            operators.append(node.operator)
            node = node.left
        operands.append(node)
        operands.reverse()
        operators.reverse()

        self.open("expression")
        self.write_term(operands[0])
        for op, term in zip(operators, operands[1:]):
            self.symbol(op)
            self.write_term(term)
        self.close("expression")

    def write_term(self, node: ASTNode) -> None:
        self.open("term")
        match node:
            case IntConstantNode(value=value):
                self.leaf(TokenType.INT_CONST, str(value))
            case StringConstantNode(value=value):
                self.leaf(TokenType.STRING_CONST, value)
            case KeywordConstantNode(value=value):
                self.keyword(value)
            case VariableNode(name=name):
                self.identifier(name)
            case ArrayAccessNode(name=name, index=index):
                self.identifier(name)
                self.symbol("[")
                self.write_expression(index)
                self.symbol("]")
            case SubroutineCallNode():
                self.write_call(node)
            case GroupNode(expression=expr):
                self.symbol("(")
                self.write_expression(expr)
                self.symbol(")")
            case UnaryOpNode(operator=op, operand=operand):
                self.symbol(op)
                self.write_term(operand)
            case BinaryOpNode():
                # only reachable for hand-built trees; keep them renderable
                self.symbol("(")
                self.write_expression(node)
                self.symbol(")")
            case _:
                raise TypeError(f"Unexpected expression node: {node!r}")
        self.close("term")

    def write_call(self, node: SubroutineCallNode) -> None:
        if node.receiver is not None:
            self.identifier(node.receiver)
            self.symbol(".")
        self.identifier(node.name)
        self.symbol("(")
        self.open("expressionList")
        for i, arg in enumerate(node.arguments):
            if i:
                self.symbol(",")
            self.write_expression(arg)
        self.close("expressionList")
        self.symbol(")")


def class_to_xml(node: Optional[ClassNode]) -> List[str]:
    """Return the parse-tree XML lines for a class."""
    writer = XmlWriter()
    if node is not None:
        writer.write_class(node)
    return writer.lines
