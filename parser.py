"""
Parser for the Jack language.

Overview and approach:
- This parser is a hand-written predictive recursive-descent parser over a
    `TokenStream`. Every production decides what to do from at most two
    tokens of lookahead (`first()` and `second()`) and never backs up.
- The parser owns a `SymbolTables` instance and fills it in as declarations
    are seen: class variables go into the class scope, parameters and locals
    into a subroutine scope that is reset for every subroutine. References
    are resolved on the spot and the resulting `Symbol` is stored in the AST
    leaf, so code generation needs no tables.

Selection rules:
- `classVarDec` starts with `static`/`field`, `subroutineDec` with
    `constructor`/`function`/`method`, `varDec` with `var`.
- Statements dispatch on `let`, `if`, `while`, `do`, `return`.
- `let` uses the array form iff the second token is `[`.
- A term starting with an identifier looks at the second token: `[` is an
    array access, `(` or `.` a subroutine call, anything else a variable.
    A term starting with a symbol must be `(`, `-` or `~`.

Expressions:
- `term (op term)*` is folded to the left with no precedence, so
    `2 + 3 * 4` parses as `(2 + 3) * 4`. This is how Jack is defined.

Errors:
- Any mismatch raises `ParseError` naming the expected class of token and
    the offending token. Using an undeclared name where a variable is
    required raises `SymbolError`. There is no recovery.
"""

from __future__ import annotations
import logging
from typing import List, Optional

from ast_nodes import *
from errors import CompileError, SymbolError
from symbols import Symbol, SymbolKind, SymbolTables
from syntax import (
    expect_identifier,
    expect_int_constant,
    expect_keyword,
    expect_symbol,
    expect_type,
    is_binary_operator,
    is_unary_operator,
    syntax_error,
)
from token_stream import TokenStream
from tokens import Token, TokenType

logger = logging.getLogger(__name__)


class Parser:
    def __init__(self, tokens: List[Token]):
        self.stream = TokenStream(tokens)
        self.symbol_tables = SymbolTables()
        self.class_name = ""

    def first(self) -> Optional[Token]:
        return self.stream.first()

    def second(self) -> Optional[Token]:
        return self.stream.second()

    def advance(self) -> Optional[Token]:
        return self.stream.advance()

    def line(self) -> int:
        token = self.first()
        return token.line if token is not None else 0

    def require_variable(self, name: str, token: Optional[Token]) -> Symbol:
        symbol = self.symbol_tables.lookup(name)
        if symbol is None:
            line = token.line if token is not None else None
            raise SymbolError(f"undeclared variable '{name}'", line)
        return symbol

    def parse(self) -> ClassNode:
        """Parse one translation unit: exactly one class and nothing after it."""
        try:
            class_node = self.parse_class()
            if not self.stream.at_end():
                raise syntax_error("end of input after class", self.first())
        except CompileError:
            logger.debug("failed near: %s", self.stream.context())
            raise
        return class_node

    # 'class' className '{' classVarDec* subroutineDec* '}'
    def parse_class(self) -> ClassNode:
        line = self.line()
        expect_keyword(self.advance(), "class")
        self.class_name = expect_identifier(self.advance(), "class name")
        self.symbol_tables.reset_class(self.class_name)
        expect_symbol(self.advance(), "{")

        class_var_decs: List[ClassVarDecNode] = []
        while ClassVarDecNode.starts(self.first()):
            class_var_decs.append(self.parse_class_var_dec())

        subroutine_decs: List[SubroutineDecNode] = []
        while SubroutineDecNode.starts(self.first()):
            subroutine_decs.append(self.parse_subroutine_dec())

        expect_symbol(self.advance(), "}")
        return ClassNode(
            line=line,
            name=self.class_name,
            class_var_decs=class_var_decs,
            subroutine_decs=subroutine_decs,
        )

    # ('static' | 'field') type varName (',' varName)* ';'
    def parse_class_var_dec(self) -> ClassVarDecNode:
        line = self.line()
        keyword = expect_keyword(self.advance(), *ClassVarDecNode.KEYWORDS)
        kind = SymbolKind.STATIC if keyword == "static" else SymbolKind.FIELD
        var_type = expect_type(self.advance())
        names = self.parse_var_names()

        for name in names:
            self.symbol_tables.define_class_symbol(name, var_type, kind)
        return ClassVarDecNode(line=line, kind=kind, var_type=var_type, names=names)

    def parse_var_names(self) -> List[str]:
        """varName (',' varName)* ';'"""
        names = [expect_identifier(self.advance(), "variable name")]
        while self.first() is not None and self.first().is_symbol(","):
            self.advance()
            names.append(expect_identifier(self.advance(), "variable name"))
        expect_symbol(self.advance(), ";")
        return names

    # ('constructor' | 'function' | 'method') ('void' | type) subroutineName
    # '(' parameterList ')' subroutineBody
    def parse_subroutine_dec(self) -> SubroutineDecNode:
        line = self.line()
        kind = SubroutineKind(
            expect_keyword(self.advance(), *SubroutineDecNode.KEYWORDS)
        )
        return_type = expect_type(self.advance(), allow_void=True)
        name = expect_identifier(self.advance(), "subroutine name")

        self.symbol_tables.reset_subroutine(
            self.class_name, kind == SubroutineKind.METHOD, name
        )

        expect_symbol(self.advance(), "(")
        parameters = self.parse_parameter_list()
        expect_symbol(self.advance(), ")")

        # subroutineBody: '{' varDec* statements '}'
        expect_symbol(self.advance(), "{")
        var_decs: List[VarDecNode] = []
        while VarDecNode.starts(self.first()):
            var_decs.append(self.parse_var_dec())
        statements = self.parse_statements()
        expect_symbol(self.advance(), "}")

        logger.debug(
            "parsed %s %s.%s: %d args, %d locals",
            kind,
            self.class_name,
            name,
            self.symbol_tables.subroutine_table.count(SymbolKind.ARG),
            self.symbol_tables.var_count(),
        )
        return SubroutineDecNode(
            line=line,
            kind=kind,
            return_type=return_type,
            name=name,
            parameters=parameters,
            var_decs=var_decs,
            statements=statements,
        )

    # ((type varName) (',' type varName)*)?
    def parse_parameter_list(self) -> List[ParameterNode]:
        parameters: List[ParameterNode] = []
        if self.first() is not None and self.first().is_symbol(")"):
            return parameters

        while True:
            line = self.line()
            var_type = expect_type(self.advance())
            name = expect_identifier(self.advance(), "parameter name")
            self.symbol_tables.define_subroutine_symbol(name, var_type, SymbolKind.ARG)
            parameters.append(ParameterNode(line=line, var_type=var_type, name=name))

            if self.first() is not None and self.first().is_symbol(","):
                self.advance()
                continue
            break
        return parameters

    # 'var' type varName (',' varName)* ';'
    def parse_var_dec(self) -> VarDecNode:
        line = self.line()
        expect_keyword(self.advance(), *VarDecNode.KEYWORDS)
        var_type = expect_type(self.advance())
        names = self.parse_var_names()

        for name in names:
            self.symbol_tables.define_subroutine_symbol(name, var_type, SymbolKind.VAR)
        return VarDecNode(line=line, var_type=var_type, names=names)

    def parse_statements(self) -> List[ASTNode]:
        """statement* (stops at the first token that cannot start a statement)"""
        statements: List[ASTNode] = []
        while (
            self.first() is not None and self.first().is_keyword(*STATEMENT_KEYWORDS)
        ):
            statements.append(self.parse_statement())
        return statements

    def parse_statement(self) -> ASTNode:
        token = self.first()
        if token is None or not token.is_keyword(*STATEMENT_KEYWORDS):
            raise syntax_error("statement", token)

        match token.value:
            case "let":
                return self.parse_let_statement()
            case "if":
                return self.parse_if_statement()
            case "while":
                return self.parse_while_statement()
            case "do":
                return self.parse_do_statement()
            case _:
                return self.parse_return_statement()

    # 'let' varName ('[' expression ']')? '=' expression ';'
    def parse_let_statement(self) -> LetStatementNode:
        line = self.line()
        expect_keyword(self.advance(), "let")

        is_array = self.second() is not None and self.second().is_symbol("[")
        name_token = self.advance()
        name = expect_identifier(name_token, "variable name")
        symbol = self.require_variable(name, name_token)

        index = None
        if is_array:
            expect_symbol(self.advance(), "[")
            index = self.parse_expression()
            expect_symbol(self.advance(), "]")

        expect_symbol(self.advance(), "=")
        value = self.parse_expression()
        expect_symbol(self.advance(), ";")
        return LetStatementNode(
            line=line, name=name, symbol=symbol, index=index, value=value
        )

    def parse_block(self) -> List[ASTNode]:
        """'{' statements '}'"""
        expect_symbol(self.advance(), "{")
        statements = self.parse_statements()
        expect_symbol(self.advance(), "}")
        return statements

    def parse_condition(self) -> ASTNode:
        """'(' expression ')'"""
        expect_symbol(self.advance(), "(")
        condition = self.parse_expression()
        expect_symbol(self.advance(), ")")
        return condition

    # 'if' '(' expression ')' '{' statements '}' ('else' '{' statements '}')?
    def parse_if_statement(self) -> IfStatementNode:
        line = self.line()
        expect_keyword(self.advance(), "if")
        condition = self.parse_condition()
        then_statements = self.parse_block()

        else_statements = None
        if self.first() is not None and self.first().is_keyword("else"):
            self.advance()
            else_statements = self.parse_block()

        return IfStatementNode(
            line=line,
            condition=condition,
            then_statements=then_statements,
            else_statements=else_statements,
        )

    # 'while' '(' expression ')' '{' statements '}'
    def parse_while_statement(self) -> WhileStatementNode:
        line = self.line()
        expect_keyword(self.advance(), "while")
        condition = self.parse_condition()
        body = self.parse_block()
        return WhileStatementNode(line=line, condition=condition, body=body)

    # 'do' subroutineCall ';'
    def parse_do_statement(self) -> DoStatementNode:
        line = self.line()
        expect_keyword(self.advance(), "do")
        call = self.parse_subroutine_call()
        expect_symbol(self.advance(), ";")
        return DoStatementNode(line=line, call=call)

    # 'return' expression? ';'
    def parse_return_statement(self) -> ReturnStatementNode:
        line = self.line()
        expect_keyword(self.advance(), "return")
        expression = None
        if not (self.first() is not None and self.first().is_symbol(";")):
            expression = self.parse_expression()
        expect_symbol(self.advance(), ";")
        return ReturnStatementNode(line=line, expression=expression)

    # term (op term)*
    def parse_expression(self) -> ASTNode:
        left = self.parse_term()
        while is_binary_operator(self.first()):
            op_token = self.advance()
            right = self.parse_term()
            left = BinaryOpNode(
                line=op_token.line, left=left, operator=op_token.value, right=right
            )
        return left

    def parse_term(self) -> ASTNode:
        """Parse one term, deciding the form from the first two tokens."""
        token = self.first()
        if token is None:
            raise syntax_error("term", token)

        match token.type:
            case TokenType.INT_CONST:
                self.advance()
                return IntConstantNode(line=token.line, value=expect_int_constant(token))

            case TokenType.STRING_CONST:
                self.advance()
                return StringConstantNode(line=token.line, value=token.value)

            case TokenType.KEYWORD if KeywordConstantNode.starts(token):
                self.advance()
                return KeywordConstantNode(line=token.line, value=token.value)

            case TokenType.IDENTIFIER:
                lookahead = self.second()
                if lookahead is not None and lookahead.is_symbol("["):
                    return self.parse_array_access()
                if lookahead is not None and lookahead.is_symbol("(", "."):
                    return self.parse_subroutine_call()
                self.advance()
                symbol = self.require_variable(token.value, token)
                return VariableNode(line=token.line, name=token.value, symbol=symbol)

            case TokenType.SYMBOL if token.is_symbol("("):
                self.advance()
                expression = self.parse_expression()
                expect_symbol(self.advance(), ")")
                return GroupNode(line=token.line, expression=expression)

            case TokenType.SYMBOL if is_unary_operator(token):
                self.advance()
                operand = self.parse_term()
                return UnaryOpNode(line=token.line, operator=token.value, operand=operand)

            case _:
                raise syntax_error("term", token)

    # varName '[' expression ']'
    def parse_array_access(self) -> ArrayAccessNode:
        name_token = self.advance()
        name = expect_identifier(name_token, "array name")
        symbol = self.require_variable(name, name_token)
        expect_symbol(self.advance(), "[")
        index = self.parse_expression()
        expect_symbol(self.advance(), "]")
        return ArrayAccessNode(line=name_token.line, name=name, symbol=symbol, index=index)

    # subroutineName '(' expressionList ')'
    # | (className | varName) '.' subroutineName '(' expressionList ')'
    def parse_subroutine_call(self) -> SubroutineCallNode:
        first = self.advance()
        name = expect_identifier(first, "subroutine, class or variable name")

        receiver = None
        receiver_symbol = None
        if self.first() is not None and self.first().is_symbol("."):
            self.advance()
            receiver = name
            # Unresolved receivers are class names; calls are bound at link time.
            receiver_symbol = self.symbol_tables.lookup(receiver)
            name = expect_identifier(self.advance(), "subroutine name")

        expect_symbol(self.advance(), "(")
        arguments = self.parse_expression_list()
        expect_symbol(self.advance(), ")")
        return SubroutineCallNode(
            line=first.line,
            receiver=receiver,
            name=name,
            arguments=arguments,
            receiver_symbol=receiver_symbol,
        )

    # (expression (',' expression)*)?
    def parse_expression_list(self) -> List[ASTNode]:
        arguments: List[ASTNode] = []
        if self.first() is not None and self.first().is_symbol(")"):
            return arguments

        arguments.append(self.parse_expression())
        while self.first() is not None and self.first().is_symbol(","):
            self.advance()
            arguments.append(self.parse_expression())
        return arguments


def parse_tokens(tokens: List[Token]) -> ClassNode:
    """Parse a token list into a `ClassNode`."""
    return Parser(tokens).parse()
