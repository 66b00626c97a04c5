"""Reading Jack source files and stripping comments.

The lexer works on clean lines: no comments, no surrounding whitespace, no
blank lines. This module produces those lines from raw file text and keeps
the original line number of every surviving line so that later stages can
report positions.

Comment rules:
- `// ...` runs to the end of the line.
- `/* ... */` (and the `/** ... */` API-doc form) may span several lines.
- Comment markers inside a string constant are part of the string.

It also discovers the translation units named on the command line: either
a single file or every file with the wanted suffix inside a directory.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from errors import SourceError


@dataclass(frozen=True)
class SourceLine:
    number: int
    text: str


def strip_comments(text: str) -> List[SourceLine]:
    """Return the non-empty, comment-free, trimmed lines of `text`."""
    result: List[SourceLine] = []
    in_block = False

    for number, raw in enumerate(text.splitlines(), start=1):
        out: List[str] = []
        in_string = False
        i = 0
        while i < len(raw):
            ch = raw[i]
            pair = raw[i : i + 2]
            if in_block:
                if pair == "*/":
                    in_block = False
                    i += 2
                    # A block comment separates tokens like whitespace does.
                    out.append(" ")
                    continue
                i += 1
                continue
            if in_string:
                out.append(ch)
                if ch == '"':
                    in_string = False
                i += 1
                continue
            if ch == '"':
                in_string = True
                out.append(ch)
                i += 1
                continue
            if pair == "//":
                break
            if pair == "/*":
                in_block = True
                i += 2
                continue
            out.append(ch)
            i += 1

        line = "".join(out).strip()
        if line:
            result.append(SourceLine(number, line))

    return result


def read_source(path: Union[str, Path]) -> str:
    """Read a source file as UTF-8 text."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return fh.read()
    except OSError as e:
        raise SourceError(f"could not read file '{path}': {e.strerror}") from e


def write_lines(path: Union[str, Path], lines: List[str]) -> None:
    """Write `lines` LF-terminated to `path`."""
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as fh:
            for line in lines:
                fh.write(line + "\n")
    except OSError as e:
        raise SourceError(f"could not write file '{path}': {e.strerror}") from e


def collect_sources(
    path: Union[str, Path], suffix: str = ".jack", exclude: str = "Ignore"
) -> List[Path]:
    """Return the translation units named by `path`.

    A file must end in `suffix`. A directory contributes every `*suffix`
    file directly inside it whose name does not contain `exclude`, in
    sorted order.
    """
    p = Path(path)
    if p.is_file():
        if p.suffix != suffix:
            raise SourceError(f"expected a '{suffix}' file, got '{p}'")
        return [p]
    if p.is_dir():
        files = sorted(
            f
            for f in p.glob(f"*{suffix}")
            if f.is_file() and not (exclude and exclude in f.name)
        )
        if not files:
            raise SourceError(f"no '{suffix}' files found in '{p}'")
        return files
    raise SourceError(f"no such file or directory: '{p}'")
