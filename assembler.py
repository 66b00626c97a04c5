"""Two-pass Hack assembler.

The first pass binds every `(LABEL)` to the ROM address of the next real
instruction. The second pass translates A- and C-instructions into 16-bit
words rendered as strings of `0`/`1`, allocating RAM addresses for new
variables from 16 upwards in order of first use.

Instruction forms:
    @123          A-instruction, 0 <= n <= 32767
    @symbol       A-instruction on a label, predefined symbol or variable
    dest=comp;jump  C-instruction, `dest=` and `;jump` optional
    (LABEL)       label pseudo-instruction
"""

from __future__ import annotations
import argparse
import logging
import re
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from errors import AssemblyError, CompileError
from log import setup_logging
from source import collect_sources, read_source, write_lines

logger = logging.getLogger(__name__)

MAX_ADDRESS = 32767
VARIABLE_BASE = 16

SYMBOL_RE = re.compile(r"[A-Za-z_.$:][A-Za-z0-9_.$:]*")

PREDEFINED = {
    "SP": 0,
    "LCL": 1,
    "ARG": 2,
    "THIS": 3,
    "THAT": 4,
    "SCREEN": 16384,
    "KBD": 24576,
}
PREDEFINED.update({f"R{i}": i for i in range(16)})

COMP = {
    "0": "0101010",
    "1": "0111111",
    "-1": "0111010",
    "D": "0001100",
    "A": "0110000",
    "!D": "0001101",
    "!A": "0110001",
    "-D": "0001111",
    "-A": "0110011",
    "D+1": "0011111",
    "A+1": "0110111",
    "D-1": "0001110",
    "A-1": "0110010",
    "D+A": "0000010",
    "D-A": "0010011",
    "A-D": "0000111",
    "D&A": "0000000",
    "D|A": "0010101",
    "M": "1110000",
    "!M": "1110001",
    "-M": "1110011",
    "M+1": "1110111",
    "M-1": "1110010",
    "D+M": "1000010",
    "D-M": "1010011",
    "M-D": "1000111",
    "D&M": "1000000",
    "D|M": "1010101",
}
# commutative spellings
for _op in "+&|":
    for _r in "AM":
        COMP[f"{_r}{_op}D"] = COMP[f"D{_op}{_r}"]
for _r in "ADM":
    COMP[f"1+{_r}"] = COMP[f"{_r}+1"]

JUMP = {
    "": "000",
    "JGT": "001",
    "JEQ": "010",
    "JGE": "011",
    "JLT": "100",
    "JNE": "101",
    "JLE": "110",
    "JMP": "111",
}


def clean_lines(lines: Iterable[str]) -> List[tuple]:
    """(line number, statement) pairs without comments, blanks or spaces."""
    result = []
    for number, raw in enumerate(lines, start=1):
        text = "".join(raw.split("//", 1)[0].split())
        if text:
            result.append((number, text))
    return result


def encode_dest(dest: str, line: int) -> str:
    if not dest:
        return "000"
    if set(dest) - set("AMD") or len(set(dest)) != len(dest):
        raise AssemblyError(f"invalid dest '{dest}'", line)
    return "".join("1" if r in dest else "0" for r in "ADM")


def encode_c(text: str, line: int) -> str:
    dest, _, rest = text.rpartition("=")
    comp, _, jump = rest.partition(";")
    if comp not in COMP:
        raise AssemblyError(f"invalid comp '{comp}'", line)
    if jump not in JUMP:
        raise AssemblyError(f"invalid jump '{jump}'", line)
    return "111" + COMP[comp] + encode_dest(dest, line) + JUMP[jump]


class Assembler:
    def __init__(self) -> None:
        self.symbols: Dict[str, int] = dict(PREDEFINED)
        self.next_variable = VARIABLE_BASE

    def first_pass(self, statements: List[tuple]) -> None:
        address = 0
        for line, text in statements:
            if text.startswith("("):
                if not text.endswith(")"):
                    raise AssemblyError(f"malformed label '{text}'", line)
                label = text[1:-1]
                if not SYMBOL_RE.fullmatch(label):
                    raise AssemblyError(f"invalid label name '{label}'", line)
                if label in self.symbols:
                    raise AssemblyError(f"duplicate label '{label}'", line)
                self.symbols[label] = address
            else:
                address += 1

    def address_of(self, value: str, line: int) -> int:
        if value.isdigit():
            n = int(value)
            if n > MAX_ADDRESS:
                raise AssemblyError(f"constant {n} out of range", line)
            return n
        if not SYMBOL_RE.fullmatch(value):
            raise AssemblyError(f"invalid symbol '{value}'", line)
        if value not in self.symbols:
            self.symbols[value] = self.next_variable
            self.next_variable += 1
        return self.symbols[value]

    def second_pass(self, statements: List[tuple]) -> List[str]:
        words = []
        for line, text in statements:
            if text.startswith("("):
                continue
            if text.startswith("@"):
                words.append(format(self.address_of(text[1:], line), "016b"))
            else:
                words.append(encode_c(text, line))
        return words

    def assemble(self, lines: Iterable[str]) -> List[str]:
        statements = clean_lines(lines)
        self.first_pass(statements)
        return self.second_pass(statements)


def assemble(lines: Iterable[str]) -> List[str]:
    """Assemble Hack assembly lines into `0`/`1` word strings."""
    return Assembler().assemble(lines)


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Assemble Hack assembly into binary")
    ap.add_argument("path", help=".asm file")
    ap.add_argument("--verbose", action="store_true", help="Log each assembled file")
    args = ap.parse_args(argv)

    setup_logging(args.verbose)

    try:
        outputs = []
        for path in collect_sources(args.path, suffix=".asm", exclude=""):
            words = assemble(read_source(path).splitlines())
            outputs.append((path.with_suffix(".hack"), words))
            logger.info("Assembled %s (%d words)", path, len(words))
        for out, words in outputs:
            write_lines(out, words)
    except CompileError as e:
        print(f"hackasm: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
