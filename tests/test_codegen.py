"""Code generation: the fixed emission scenarios and the listing invariants."""

import re

from tests.utils import compile_text, function_body
from codegen import IdGenerator


def _body_of(stmts: str, decls: str = "", locals_: str = "") -> list:
    """Compile statements inside `function void f()` of class C, minus the header."""
    src = f"class C {{ {decls} function void f() {{ {locals_} {stmts} }} }}"
    vm = compile_text(src)
    return function_body(vm, "C.f")[1:]


def test_arithmetic_is_left_to_right():
    body = _body_of("do Output.printInt(2 + 3 * 4); return;")
    assert body[:5] == [
        "push constant 2",
        "push constant 3",
        "add",
        "push constant 4",
        "call Math.multiply 2",
    ]
    assert body[5] == "call Output.printInt 1"


def test_unary_not_of_group():
    body = _body_of("do Output.printInt(~(2 - 3)); return;")
    assert body[:4] == [
        "push constant 2",
        "push constant 3",
        "sub",
        "not",
    ]


def test_void_return():
    vm = compile_text("class C { function void main() { return; } }")
    assert vm == [
        "function C.main 0",
        "push constant 0",
        "return",
    ]


def test_while_loop():
    body = _body_of("while (true) { return; } return;")
    assert body[:9] == [
        "label WHILE_START_ID_1",
        "push constant 0",
        "not",
        "not",
        "if-goto WHILE_END_ID_1",
        "push constant 0",
        "return",
        "goto WHILE_START_ID_1",
        "label WHILE_END_ID_1",
    ]


def test_method_dispatch_on_field():
    src = """
    class SquareGame {
        field Square square;
        method void dispose() {
            do square.dispose();
            return;
        }
    }
    """
    vm = compile_text(src)
    assert vm[:6] == [
        "function SquareGame.dispose 0",
        "push argument 0",
        "pop pointer 0",
        "push this 0",
        "call Square.dispose 1",
        "pop temp 0",
    ]


def test_static_dispatch():
    body = _body_of("do Sys.halt(); return;")
    assert body[:2] == ["call Sys.halt 0", "pop temp 0"]


def test_array_write():
    src = """
    class C {
        field Array a;
        method void f() {
            var int i, v;
            let a[i] = v;
            return;
        }
    }
    """
    body = function_body(compile_text(src), "C.f")
    assert body[3:11] == [
        "push this 0",
        "push local 0",
        "add",
        "push local 1",
        "pop temp 0",
        "pop pointer 1",
        "push temp 0",
        "pop that 0",
    ]


def test_array_read():
    body = _body_of(
        "let x = a[2]; return;", locals_="var Array a; var int x;"
    )
    assert body[:6] == [
        "push local 0",
        "push constant 2",
        "add",
        "pop pointer 1",
        "push that 0",
        "pop local 1",
    ]


def test_if_else_labels():
    body = _body_of(
        "if (x < 1) { let x = 1; } else { let x = 2; } return;",
        locals_="var int x;",
    )
    assert body[:13] == [
        "push local 0",
        "push constant 1",
        "lt",
        "not",
        "if-goto ELSE_START_ID_1",
        "push constant 1",
        "pop local 0",
        "goto IF_END_ID_1",
        "label ELSE_START_ID_1",
        "push constant 2",
        "pop local 0",
        "label IF_END_ID_1",
        "push constant 0",
    ]


def test_keyword_and_string_constants():
    body = _body_of(
        'let b = true; let b = false; let s = null; let s = "Hi"; return;',
        locals_="var boolean b; var String s;",
    )
    assert body == [
        "push constant 0",
        "not",
        "pop local 0",
        "push constant 0",
        "pop local 0",
        "push constant 0",
        "pop local 1",
        "push constant 2",
        "call String.new 1",
        "push constant 72",
        "call String.appendChar 2",
        "push constant 105",
        "call String.appendChar 2",
        "pop local 1",
        "push constant 0",
        "return",
    ]


def test_constructor_allocates_fields_and_returns_this():
    src = """
    class Point {
        field int x, y;
        static int count;
        constructor Point new(int ax) {
            let x = ax;
            return this;
        }
    }
    """
    assert compile_text(src) == [
        "function Point.new 0",
        "push constant 2",
        "call Memory.alloc 1",
        "pop pointer 0",
        "push argument 0",
        "pop this 0",
        "push pointer 0",
        "return",
    ]


def test_unqualified_call_passes_this():
    src = """
    class Game {
        method void run() { do step(1, 2); return; }
        method void step(int a, int b) { return; }
    }
    """
    body = function_body(compile_text(src), "Game.run")
    assert body[3:8] == [
        "push pointer 0",
        "push constant 1",
        "push constant 2",
        "call Game.step 3",
        "pop temp 0",
    ]


def test_method_call_on_local_and_argument():
    src = """
    class Main {
        function int f(Point p) {
            var Point q;
            return p.dist(q);
        }
    }
    """
    assert compile_text(src) == [
        "function Main.f 1",
        "push argument 0",
        "push local 0",
        "call Point.dist 2",
        "return",
    ]


def test_static_variables_use_static_segment():
    body = _body_of("let n = n + 1; return;", decls="static int n;")
    assert body[:4] == ["push static 0", "push constant 1", "add", "pop static 0"]


def test_division_and_comparisons():
    body = _body_of(
        "let x = ((x / 2) = 1) | (x > 3) & (-x); return;", locals_="var int x;"
    )
    assert "call Math.divide 2" in body
    assert body.index("eq") < body.index("gt") < body.index("or") < body.index("and")
    assert "neg" in body


def test_function_header_counts_vars_not_args():
    src = """
    class C {
        method int f(int a, int b, int c) {
            var int x;
            var char y, z;
            return a;
        }
    }
    """
    vm = compile_text(src)
    assert vm[0] == "function C.f 3"
    assert vm[3] == "push argument 1"


SAMPLE = """
class C {
    function void f(int n) {
        var int i;
        while (i < n) {
            if (i = 3) { let i = i + 2; } else { let i = i + 1; }
        }
        if (n > 0) { return; }
        return;
    }
    method void g() {
        while (false) { do f(1); }
        return;
    }
}
"""


def test_every_if_goto_has_exactly_one_label():
    vm = compile_text(SAMPLE)
    labels = [l.split()[1] for l in vm if l.startswith("label ")]
    assert len(labels) == len(set(labels))
    for line in vm:
        if line.startswith("if-goto ") or line.startswith("goto "):
            assert labels.count(line.split()[1]) == 1


def test_ids_increase_across_units_and_reset_reproduces_output(ids):
    first = compile_text(SAMPLE, ids)
    second = compile_text(SAMPLE, ids)

    def ids_in(vm):
        return {int(m) for m in re.findall(r"label \w+_ID_(\d+)", "\n".join(vm))}

    assert ids_in(first) == {1, 2, 3, 4}
    assert min(ids_in(second)) > max(ids_in(first))

    ids.reset()
    assert compile_text(SAMPLE, ids) == first
    assert compile_text(SAMPLE, IdGenerator()) == first
