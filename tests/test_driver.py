"""The `jackc` driver: files, directories, outputs and exit codes."""

from main import compile_path, compile_source, main

MAIN = """
// Entry point
class Main {
    function void main() {
        var Point p;
        let p = Point.new(3);
        do Output.printInt(p.getX());
        return;
    }
}
"""

POINT = """
class Point {
    field int x;
    constructor Point new(int ax) { let x = ax; return this; }
    method int getX() { if (x < 0) { return 0; } return x; }
}
"""


def _write_program(tmp_path):
    (tmp_path / "Main.jack").write_text(MAIN)
    (tmp_path / "Point.jack").write_text(POINT)


def test_compile_source_returns_all_stages(ids):
    unit = compile_source(POINT, ids)
    assert unit.tokens[0].value == "class"
    assert unit.class_node.name == "Point"
    assert unit.vm[0] == "function Point.new 0"


def test_single_file_writes_vm_beside_source(tmp_path):
    src = tmp_path / "Point.jack"
    src.write_text(POINT)
    assert main([str(src)]) == 0
    text = (tmp_path / "Point.vm").read_text()
    assert text.startswith("function Point.new 0\n")
    assert text.endswith("return\n")


def test_directory_compiles_every_unit(tmp_path):
    _write_program(tmp_path)
    (tmp_path / "SkipIgnore.jack").write_text("not jack at all")
    assert main([str(tmp_path)]) == 0
    assert (tmp_path / "Main.vm").exists()
    assert (tmp_path / "Point.vm").exists()
    assert not (tmp_path / "SkipIgnore.vm").exists()


def test_ids_are_shared_across_units_of_a_run(tmp_path, ids):
    _write_program(tmp_path)
    compile_path(str(tmp_path), ids=ids)
    assert ids.last == 1
    assert "if-goto ELSE_START_ID_1" in (tmp_path / "Point.vm").read_text()


def test_failing_unit_writes_nothing(tmp_path, capsys):
    _write_program(tmp_path)
    (tmp_path / "Zbad.jack").write_text("class Zbad { function void f() { let = 1; } }")
    assert main([str(tmp_path)]) == 1
    assert list(tmp_path.glob("*.vm")) == []

    err = capsys.readouterr().err.strip()
    assert err.startswith("jackc: syntax error: line 1: Zbad.jack:")
    assert len(err.splitlines()) == 1


def test_missing_path_is_an_io_error(tmp_path, capsys):
    assert main([str(tmp_path / "Nope.jack")]) == 1
    assert capsys.readouterr().err.startswith("jackc: io error:")


def test_xml_outputs(tmp_path):
    src = tmp_path / "Point.jack"
    src.write_text(POINT)
    assert main([str(src), "--xml"]) == 0
    tokens_xml = (tmp_path / "PointT.xml").read_text().splitlines()
    tree_xml = (tmp_path / "Point.xml").read_text().splitlines()
    assert tokens_xml[0] == "<tokens>"
    assert "<symbol> &lt; </symbol>" in tokens_xml
    assert tree_xml[0] == "<class>"
    assert tree_xml[-1] == "</class>"


def test_stage_dumps_go_to_stdout(tmp_path, capsys):
    src = tmp_path / "Point.jack"
    src.write_text(POINT)
    assert main([str(src), "--print-tokens", "--print-ast", "--print-symbols"]) == 0
    out = capsys.readouterr().out
    assert "Tokens Point.jack" in out
    assert "Class(Point, fields=1)" in out
    assert "x: int field 0" in out


def test_output_is_reproducible(tmp_path):
    _write_program(tmp_path)
    compile_path(str(tmp_path))
    first = (tmp_path / "Point.vm").read_bytes()
    compile_path(str(tmp_path))
    assert (tmp_path / "Point.vm").read_bytes() == first
