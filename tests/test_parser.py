import pytest

from tests.utils import parse_text
from ast_nodes import *
from errors import ParseError, SymbolError
from symbols import SymbolKind


POINT = """
class Point {
    field int x, y;
    static int count;

    constructor Point new(int ax, int ay) {
        let x = ax;
        let y = ay;
        let count = count + 1;
        return this;
    }

    method int dist(Point other) {
        var int dx, dy;
        var boolean far;
        let dx = x - other.getX();
        let dy = y - other.getY();
        return Math.sqrt((dx * dx) + (dy * dy));
    }

    method int getX() { return x; }
    method int getY() { return y; }
}
"""


def _sub(cls, name):
    return next(s for s in cls.subroutine_decs if s.name == name)


def test_parser_builds_class_structure():
    cls = parse_text(POINT)
    assert cls.type == NodeType.CLASS
    assert cls.name == "Point"
    assert [d.kind for d in cls.class_var_decs] == [SymbolKind.FIELD, SymbolKind.STATIC]
    assert cls.class_var_decs[0].names == ["x", "y"]
    assert cls.field_count == 2
    assert [s.name for s in cls.subroutine_decs] == ["new", "dist", "getX", "getY"]


def test_subroutine_kinds_and_locals():
    cls = parse_text(POINT)
    new = _sub(cls, "new")
    dist = _sub(cls, "dist")
    assert new.kind == SubroutineKind.CONSTRUCTOR
    assert new.return_type == "Point"
    assert [p.name for p in new.parameters] == ["ax", "ay"]
    assert dist.kind == SubroutineKind.METHOD
    assert dist.local_count == 3


def test_symbols_are_resolved_into_leaves():
    cls = parse_text(POINT)
    new = _sub(cls, "new")
    let_x, let_y, let_count, _ = new.statements

    assert let_x.symbol.kind == SymbolKind.FIELD and let_x.symbol.index == 0
    assert let_y.symbol.index == 1
    assert let_count.symbol.kind == SymbolKind.STATIC
    assert isinstance(let_x.value, VariableNode)
    assert let_x.value.symbol.kind == SymbolKind.ARG
    assert let_x.value.symbol.index == 0


def test_method_arguments_start_after_this():
    cls = parse_text(POINT)
    dist = _sub(cls, "dist")
    let_dx = dist.statements[0]
    call = let_dx.value.right
    assert isinstance(call, SubroutineCallNode)
    assert call.receiver == "other"
    assert call.receiver_symbol.kind == SymbolKind.ARG
    assert call.receiver_symbol.index == 1
    assert call.receiver_symbol.type == "Point"


def test_class_receiver_is_left_unresolved():
    cls = parse_text(POINT)
    ret = _sub(cls, "dist").statements[-1]
    call = ret.expression
    assert call.receiver == "Math"
    assert call.receiver_symbol is None
    assert isinstance(call.arguments[0], BinaryOpNode)
    assert isinstance(call.arguments[0].left, GroupNode)


def test_expressions_fold_left_without_precedence():
    cls = parse_text("class A { function int f() { return 2 + 3 * 4; } }")
    expr = cls.subroutine_decs[0].statements[0].expression
    assert isinstance(expr, BinaryOpNode)
    assert expr.operator == "*"
    assert expr.left.operator == "+"
    assert expr.right.value == 4


def test_term_disambiguation():
    src = """
    class A {
        field Array a;
        method void f(int i) {
            let a[i] = a[i + 1];
            do g(i);
            do A.h(-i, ~i);
            return;
        }
        method void g(int i) { return; }
        function void h(int x, int y) { return; }
    }
    """
    f = parse_text(src).subroutine_decs[0]
    let_stmt, do_g, do_h, ret = f.statements

    assert let_stmt.index is not None
    assert isinstance(let_stmt.value, ArrayAccessNode)
    assert let_stmt.value.symbol.kind == SymbolKind.FIELD
    assert do_g.call.receiver is None and do_g.call.name == "g"
    assert [a.operator for a in do_h.call.arguments] == ["-", "~"]
    assert isinstance(ret, ReturnStatementNode) and ret.expression is None


def test_if_else_and_while():
    src = """
    class A {
        function void f(int n) {
            while (n > 0) {
                if (n = 1) { let n = 0; } else { let n = n - 1; }
            }
            if (true) { return; }
            return;
        }
    }
    """
    f = parse_text(src).subroutine_decs[0]
    loop = f.statements[0]
    assert isinstance(loop, WhileStatementNode)
    branch = loop.body[0]
    assert isinstance(branch, IfStatementNode)
    assert len(branch.then_statements) == 1
    assert len(branch.else_statements) == 1
    assert f.statements[1].else_statements is None
    assert isinstance(f.statements[1].condition, KeywordConstantNode)


def test_string_and_keyword_constants():
    src = 'class A { function void f() { var String s; let s = "hi there"; let s = null; return; } }'
    stmts = parse_text(src).subroutine_decs[0].statements
    assert stmts[0].value == StringConstantNode(line=1, value="hi there")
    assert stmts[1].value.value == "null"


def test_syntax_error_names_expected_and_offending_token():
    with pytest.raises(ParseError) as exc:
        parse_text("class A { function void f() { var int x; let x 1; } }")
    message = str(exc.value)
    assert message.startswith("syntax error")
    assert "expected symbol '='" in message
    assert "integerConstant '1'" in message


def test_missing_semicolon():
    with pytest.raises(ParseError) as exc:
        parse_text("class A { field int x }")
    assert "symbol ';'" in str(exc.value)
    assert "symbol '}'" in str(exc.value)


def test_bad_term_start():
    with pytest.raises(ParseError) as exc:
        parse_text("class A { function int f() { return *; } }")
    assert "expected term" in str(exc.value)


def test_trailing_tokens_are_rejected():
    with pytest.raises(ParseError):
        parse_text("class A { } class B { }")


def test_unexpected_end_of_input():
    with pytest.raises(ParseError) as exc:
        parse_text("class A {")
    assert "end of input" in str(exc.value)


def test_undeclared_variable():
    with pytest.raises(SymbolError) as exc:
        parse_text("class A { function void f() { let y = 1; return; } }")
    assert "undeclared variable 'y'" in str(exc.value)


def test_duplicate_local():
    with pytest.raises(SymbolError):
        parse_text("class A { function void f(int a) { var int a; return; } }")
