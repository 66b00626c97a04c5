import pytest

from errors import SourceError
from source import SourceLine, collect_sources, read_source, strip_comments, write_lines


def test_strip_comments_drops_blank_and_comment_lines():
    text = "\n  // only a comment\n  let x = 1;   \n\n/* a\n b */ do f();\n"
    assert strip_comments(text) == [
        SourceLine(3, "let x = 1;"),
        SourceLine(6, "do f();"),
    ]


def test_block_comment_separates_tokens():
    lines = strip_comments("let/* gap */x = 1;")
    assert lines == [SourceLine(1, "let x = 1;")]


def test_collect_sources_single_file(tmp_path):
    f = tmp_path / "Main.jack"
    f.write_text("class Main {}")
    assert collect_sources(f) == [f]


def test_collect_sources_rejects_wrong_suffix(tmp_path):
    f = tmp_path / "Main.txt"
    f.write_text("")
    with pytest.raises(SourceError):
        collect_sources(f)


def test_collect_sources_directory_is_sorted_and_filtered(tmp_path):
    for name in ("Main.jack", "Ball.jack", "OldIgnore.jack", "notes.txt"):
        (tmp_path / name).write_text("")
    names = [p.name for p in collect_sources(tmp_path)]
    assert names == ["Ball.jack", "Main.jack"]


def test_collect_sources_missing_path(tmp_path):
    with pytest.raises(SourceError) as exc:
        collect_sources(tmp_path / "nope")
    assert "io error" in str(exc.value)


def test_write_and_read_use_lf(tmp_path):
    out = tmp_path / "x.vm"
    write_lines(out, ["push constant 1", "return"])
    assert out.read_bytes() == b"push constant 1\nreturn\n"
    assert read_source(out) == "push constant 1\nreturn\n"


def test_read_source_missing_file(tmp_path):
    with pytest.raises(SourceError):
        read_source(tmp_path / "missing.jack")
