"""VM to Hack assembly translator.

Overview:
- `parse_vm(lines)` turns VM text into `VMCommand` values. Comments (`//`)
    and blank lines are dropped; anything else that is not one of the nine
    command forms raises `TranslationError`.
- `CodeWriter` turns commands into Hack assembly lines. It tracks the
    current file (for `static` names) and the current function (for label
    scoping), and numbers the labels it invents so they never clash.
- `translate_files(paths)` translates a whole program: bootstrap, every
    file in order, then a halt loop.

Memory conventions:
- `local`, `argument`, `this`, `that` are base pointers in RAM[1..4] plus
    an index; `pointer i` is RAM[3 + i], `temp i` is RAM[5 + i].
- `static i` in file `Foo.vm` is the assembler variable `Foo.i`.
- `constant i` can only be pushed.
- Booleans are -1 (true) and 0 (false).

Frames: `call` pushes the return address and the caller's LCL, ARG, THIS
and THAT, then repositions ARG and LCL. `return` reads the frame through
R13 and the return address through R14.

Bootstrap: when some file defines `Sys.init`, the program starts with
SP=256 and `call Sys.init 0`. Otherwise it starts with the fixed test
layout SP=256, LCL=300, ARG=400, THIS=3000, THAT=3010 and runs the code in
file order.
"""

from __future__ import annotations
import argparse
import logging
import sys
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Iterable, List, Optional

from errors import CompileError, TranslationError
from log import setup_logging
from source import collect_sources, read_source, write_lines

logger = logging.getLogger(__name__)


class CommandType(Enum):
    ARITHMETIC = auto()
    PUSH = auto()
    POP = auto()
    LABEL = auto()
    GOTO = auto()
    IF_GOTO = auto()
    FUNCTION = auto()
    CALL = auto()
    RETURN = auto()


KEYWORD_COMMANDS = {
    "push": CommandType.PUSH,
    "pop": CommandType.POP,
    "label": CommandType.LABEL,
    "goto": CommandType.GOTO,
    "if-goto": CommandType.IF_GOTO,
    "function": CommandType.FUNCTION,
    "call": CommandType.CALL,
    "return": CommandType.RETURN,
}

ARITHMETIC_COMMANDS = ("add", "sub", "neg", "eq", "gt", "lt", "and", "or", "not")

BASE_SEGMENTS = {"local": "LCL", "argument": "ARG", "this": "THIS", "that": "THAT"}
FIXED_SEGMENTS = {"pointer": (3, 2), "temp": (5, 8)}
SEGMENTS = tuple(BASE_SEGMENTS) + tuple(FIXED_SEGMENTS) + ("static", "constant")

MAX_CONSTANT = 32767

HALT_LABEL = "VM$HALT"


@dataclass
class VMCommand:
    type: CommandType
    arg1: str = ""
    arg2: Optional[int] = None
    line: int = 0

    def __str__(self) -> str:
        if self.type == CommandType.ARITHMETIC:
            return self.arg1
        parts = [self.type.name.lower().replace("_", "-")]
        if self.arg1:
            parts.append(self.arg1)
        if self.arg2 is not None:
            parts.append(str(self.arg2))
        return " ".join(parts)


def _int_arg(text: str, line: int) -> int:
    if not text.isdigit():
        raise TranslationError(f"expected a non-negative integer, got '{text}'", line)
    return int(text)


def parse_command(text: str, line: int = 0) -> VMCommand:
    parts = text.split()
    op = parts[0]

    if op in ARITHMETIC_COMMANDS:
        if len(parts) != 1:
            raise TranslationError(f"'{op}' takes no arguments", line)
        return VMCommand(CommandType.ARITHMETIC, op, line=line)

    if op not in KEYWORD_COMMANDS:
        raise TranslationError(f"unknown command '{op}'", line)
    ctype = KEYWORD_COMMANDS[op]

    match ctype:
        case CommandType.RETURN:
            if len(parts) != 1:
                raise TranslationError("'return' takes no arguments", line)
            return VMCommand(ctype, line=line)

        case CommandType.LABEL | CommandType.GOTO | CommandType.IF_GOTO:
            if len(parts) != 2:
                raise TranslationError(f"'{op}' takes one label", line)
            return VMCommand(ctype, parts[1], line=line)

        case CommandType.FUNCTION | CommandType.CALL:
            if len(parts) != 3:
                raise TranslationError(f"'{op}' takes a name and a count", line)
            return VMCommand(ctype, parts[1], _int_arg(parts[2], line), line=line)

        case _:
            if len(parts) != 3:
                raise TranslationError(f"'{op}' takes a segment and an index", line)
            segment = parts[1]
            index = _int_arg(parts[2], line)
            if segment not in SEGMENTS:
                raise TranslationError(f"unknown segment '{segment}'", line)
            if segment == "constant":
                if ctype == CommandType.POP:
                    raise TranslationError("cannot pop to the constant segment", line)
                if index > MAX_CONSTANT:
                    raise TranslationError(f"constant {index} out of range", line)
            if segment in FIXED_SEGMENTS and index >= FIXED_SEGMENTS[segment][1]:
                raise TranslationError(f"index {index} out of range for '{segment}'", line)
            return VMCommand(ctype, segment, index, line=line)


def parse_vm(lines: Iterable[str]) -> List[VMCommand]:
    """Parse VM source lines into commands."""
    commands: List[VMCommand] = []
    for number, raw in enumerate(lines, start=1):
        text = raw.split("//", 1)[0].strip()
        if text:
            commands.append(parse_command(text, number))
    return commands


class CodeWriter:
    def __init__(self) -> None:
        self.file_name = ""
        self.function_name = ""
        self.label_counter = 0

    def set_file(self, file_name: str) -> None:
        self.file_name = file_name

    def fresh_label(self, stem: str) -> str:
        self.label_counter += 1
        return f"{stem}.{self.label_counter}"

    def scoped(self, label: str) -> str:
        if self.function_name:
            return f"{self.function_name}${label}"
        return label

    # stack helpers

    @staticmethod
    def push_d() -> List[str]:
        return ["@SP", "A=M", "M=D", "@SP", "M=M+1"]

    @staticmethod
    def pop_d() -> List[str]:
        return ["@SP", "AM=M-1", "D=M"]

    def static_name(self, index: int) -> str:
        return f"{self.file_name}.{index}"

    # commands

    def write(self, command: VMCommand) -> List[str]:
        out = [f"// {command}"]
        match command.type:
            case CommandType.ARITHMETIC:
                out += self.arithmetic(command.arg1)
            case CommandType.PUSH:
                out += self.push(command.arg1, command.arg2)
            case CommandType.POP:
                out += self.pop(command.arg1, command.arg2)
            case CommandType.LABEL:
                out.append(f"({self.scoped(command.arg1)})")
            case CommandType.GOTO:
                out += [f"@{self.scoped(command.arg1)}", "0;JMP"]
            case CommandType.IF_GOTO:
                out += self.pop_d() + [f"@{self.scoped(command.arg1)}", "D;JNE"]
            case CommandType.FUNCTION:
                out += self.function(command.arg1, command.arg2)
            case CommandType.CALL:
                out += self.call(command.arg1, command.arg2)
            case CommandType.RETURN:
                out += self.return_()
        return out

    def arithmetic(self, op: str) -> List[str]:
        match op:
            case "add" | "sub" | "and" | "or":
                compute = {"add": "M=D+M", "sub": "M=M-D", "and": "M=D&M", "or": "M=D|M"}
                return self.pop_d() + ["A=A-1", compute[op]]
            case "neg":
                return ["@SP", "A=M-1", "M=-M"]
            case "not":
                return ["@SP", "A=M-1", "M=!M"]
            case _:
                # eq, gt, lt: assume true, overwrite with false if the jump is not taken
                jump = {"eq": "JEQ", "gt": "JGT", "lt": "JLT"}[op]
                done = self.fresh_label(f"VM$CMP_{op.upper()}")
                return self.pop_d() + [
                    "A=A-1",
                    "D=M-D",
                    "M=-1",
                    f"@{done}",
                    f"D;{jump}",
                    "@SP",
                    "A=M-1",
                    "M=0",
                    f"({done})",
                ]

    def push(self, segment: str, index: int) -> List[str]:
        if segment == "constant":
            return [f"@{index}", "D=A"] + self.push_d()
        if segment in BASE_SEGMENTS:
            return [
                f"@{index}",
                "D=A",
                f"@{BASE_SEGMENTS[segment]}",
                "A=D+M",
                "D=M",
            ] + self.push_d()
        if segment == "static":
            return [f"@{self.static_name(index)}", "D=M"] + self.push_d()
        base, _ = FIXED_SEGMENTS[segment]
        return [f"@R{base + index}", "D=M"] + self.push_d()

    def pop(self, segment: str, index: int) -> List[str]:
        if segment in BASE_SEGMENTS:
            return [
                f"@{index}",
                "D=A",
                f"@{BASE_SEGMENTS[segment]}",
                "D=D+M",
                "@R13",
                "M=D",
            ] + self.pop_d() + ["@R13", "A=M", "M=D"]
        if segment == "static":
            return self.pop_d() + [f"@{self.static_name(index)}", "M=D"]
        base, _ = FIXED_SEGMENTS[segment]
        return self.pop_d() + [f"@R{base + index}", "M=D"]

    def function(self, name: str, n_locals: int) -> List[str]:
        self.function_name = name
        out = [f"({name})"]
        for _ in range(n_locals):
            out += ["@SP", "A=M", "M=0", "@SP", "M=M+1"]
        return out

    def call(self, name: str, n_args: int) -> List[str]:
        ret = self.fresh_label(f"{self.function_name or self.file_name or 'VM'}$ret")
        out = [f"@{ret}", "D=A"] + self.push_d()
        for pointer in ("LCL", "ARG", "THIS", "THAT"):
            out += [f"@{pointer}", "D=M"] + self.push_d()
        out += [
            # ARG = SP - n - 5
            "@SP",
            "D=M",
            f"@{n_args + 5}",
            "D=D-A",
            "@ARG",
            "M=D",
            # LCL = SP
            "@SP",
            "D=M",
            "@LCL",
            "M=D",
            f"@{name}",
            "0;JMP",
            f"({ret})",
        ]
        return out

    def return_(self) -> List[str]:
        out = [
            # FRAME = LCL, RET = *(FRAME - 5)
            "@LCL",
            "D=M",
            "@R13",
            "M=D",
            "@5",
            "A=D-A",
            "D=M",
            "@R14",
            "M=D",
        ]
        # *ARG = pop(), SP = ARG + 1
        out += self.pop_d() + ["@ARG", "A=M", "M=D", "@ARG", "D=M+1", "@SP", "M=D"]
        for pointer in ("THAT", "THIS", "ARG", "LCL"):
            out += ["@R13", "AM=M-1", "D=M", f"@{pointer}", "M=D"]
        out += ["@R14", "A=M", "0;JMP"]
        return out

    # program frame

    def bootstrap(self, call_sys_init: bool) -> List[str]:
        if call_sys_init:
            out = ["// bootstrap", "@256", "D=A", "@SP", "M=D"]
            out += self.call("Sys.init", 0)
            out += [f"@{HALT_LABEL}", "0;JMP"]
            return out

        out = ["// bootstrap"]
        for address, pointer in ((256, "SP"), (300, "LCL"), (400, "ARG"), (3000, "THIS"), (3010, "THAT")):
            out += [f"@{address}", "D=A", f"@{pointer}", "M=D"]
        return out

    @staticmethod
    def halt() -> List[str]:
        return [f"({HALT_LABEL})", f"@{HALT_LABEL}", "0;JMP"]


def defines_sys_init(commands: Iterable[VMCommand]) -> bool:
    return any(
        c.type == CommandType.FUNCTION and c.arg1 == "Sys.init" for c in commands
    )


def translate_units(units: List[tuple], bootstrap: bool = True) -> List[str]:
    """Translate `(file_stem, commands)` pairs into one assembly program."""
    writer = CodeWriter()
    out: List[str] = []
    if bootstrap:
        has_init = any(defines_sys_init(commands) for _, commands in units)
        out += writer.bootstrap(has_init)

    for stem, commands in units:
        writer.set_file(stem)
        writer.function_name = ""
        for command in commands:
            out += writer.write(command)

    out += writer.halt()
    return out


def translate_text(text: str, file_stem: str = "Main", bootstrap: bool = True) -> List[str]:
    return translate_units([(file_stem, parse_vm(text.splitlines()))], bootstrap)


def translate_files(paths: List[Path], bootstrap: bool = True) -> List[str]:
    units = []
    for path in paths:
        try:
            commands = parse_vm(read_source(path).splitlines())
        except TranslationError as e:
            raise TranslationError(f"{path.name}: {e.message}", e.line) from e
        logger.info("Translating %s (%d commands)", path, len(commands))
        units.append((path.stem, commands))
    return translate_units(units, bootstrap)


def output_path(path: Path) -> Path:
    if path.is_dir():
        return path / f"{path.name}.asm"
    return path.with_suffix(".asm")


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Translate Hack VM code to Hack assembly")
    ap.add_argument("path", help=".vm file or directory of .vm files")
    ap.add_argument(
        "--no-bootstrap",
        action="store_true",
        help="Omit the startup code (stack and segment pointer setup)",
    )
    ap.add_argument("--verbose", action="store_true", help="Log each translated file")
    args = ap.parse_args(argv)

    setup_logging(args.verbose)

    try:
        path = Path(args.path)
        paths = collect_sources(path, suffix=".vm", exclude="")
        asm = translate_files(paths, bootstrap=not args.no_bootstrap)
        out = output_path(path)
        write_lines(out, asm)
        logger.info("Wrote %s", out)
    except CompileError as e:
        print(f"vmtranslate: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
