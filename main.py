"""Jack compiler driver.

`jackc <path>` compiles one `.jack` file, or every `.jack` file in a
directory, into `.vm` files written beside the sources. Each file is one
translation unit holding one class.

Every unit is lexed, parsed and translated in memory first; files are only
written once all units compiled, so a failing unit leaves no output behind.
Label ids come from a single `IdGenerator` shared by every unit of the run.
"""

from __future__ import annotations
import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from graphviz import ExecutableNotFound

from ast_nodes import ClassNode
from ast_xml import class_to_xml
from codegen import IdGenerator, generate_code
from errors import CompileError, SourceError
from lexer import tokenize_text
from log import setup_logging
from parser import Parser
from pretty_printer import PrettyPrinter
from source import collect_sources, read_source, write_lines
from tokens import Token, tokens_to_xml
from vm_cfg import build_vm_cfg
from vm_viz import write_and_render

logger = logging.getLogger(__name__)


@dataclass
class CompiledUnit:
    path: Optional[Path]
    tokens: List[Token]
    class_node: ClassNode
    vm: List[str] = field(default_factory=list)

    @property
    def vm_path(self) -> Path:
        return self.path.with_suffix(".vm")


def lex(text: str) -> List[Token]:
    """Tokenize input string."""
    return tokenize_text(text)


def parse_tokens(tokens: List[Token]) -> ClassNode:
    """Parse tokens into AST."""
    return Parser(tokens).parse()


def compile_source(
    text: str, ids: Optional[IdGenerator] = None, path: Optional[Path] = None
) -> CompiledUnit:
    """Lex, parse and translate one translation unit held in memory."""
    tokens = lex(text)
    class_node = parse_tokens(tokens)
    vm = generate_code(class_node, ids)
    return CompiledUnit(path, tokens, class_node, vm)


def compile_file(path: Path, ids: IdGenerator) -> CompiledUnit:
    try:
        unit = compile_source(read_source(path), ids, path)
    except CompileError as e:
        if isinstance(e, SourceError):
            raise
        raise type(e)(f"{path.name}: {e.message}", e.line) from e

    if unit.class_node.name != path.stem:
        logger.warning(
            "%s: class '%s' does not match the file name", path.name, unit.class_node.name
        )
    logger.info(
        "Compiled %s: class %s, %d subroutines, %d VM commands",
        path,
        unit.class_node.name,
        len(unit.class_node.subroutine_decs),
        len(unit.vm),
    )
    logger.debug("\n".join(unit.vm))
    return unit


def compile_path(
    path: str,
    *,
    ids: Optional[IdGenerator] = None,
    xml: bool = False,
    print_tokens: bool = False,
    print_ast: bool = False,
    print_symbols: bool = False,
    viz_path: Optional[str] = None,
    viz_format: str = "svg",
) -> List[CompiledUnit]:
    """Compile a `.jack` file or directory and write the `.vm` outputs.

    Flags control which stages are printed; printing never changes what is
    written.
    """
    ids = ids if ids is not None else IdGenerator()
    units = [compile_file(p, ids) for p in collect_sources(path)]

    for unit in units:
        if print_tokens:
            print(f"Tokens {unit.path.name} ({len(unit.tokens)}):")
            for tok in unit.tokens:
                print(f"  {tok}")
        if print_ast:
            print(f"AST {unit.path.name}:")
            print(PrettyPrinter.print_ast(unit.class_node, indent=2))
        if print_symbols:
            print(f"Symbols {unit.path.name}:")
            print(PrettyPrinter.print_symbol_table(unit.class_node))

    for unit in units:
        write_lines(unit.vm_path, unit.vm)
        if xml:
            stem = unit.path.with_suffix("")
            write_lines(f"{stem}T.xml", tokens_to_xml(unit.tokens))
            write_lines(f"{stem}.xml", class_to_xml(unit.class_node))

    if viz_path:
        cfg = build_vm_cfg([line for unit in units for line in unit.vm])
        write_and_render(cfg, viz_path, fmt=viz_format)
        logger.info("Wrote VM control-flow graph to %s.%s", viz_path, viz_format)

    return units


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Compile Jack source to Hack VM code")
    parser.add_argument("path", help=".jack file or directory of .jack files")
    parser.add_argument(
        "--xml",
        action="store_true",
        help="Also write <name>T.xml (tokens) and <name>.xml (parse tree)",
    )
    parser.add_argument(
        "--print-tokens", dest="print_tokens", action="store_true", help="Print tokens"
    )
    parser.add_argument(
        "--print-ast", dest="print_ast", action="store_true", help="Print the AST"
    )
    parser.add_argument(
        "--print-symbols",
        dest="print_symbols",
        action="store_true",
        help="Print the symbol tables of every class",
    )
    parser.add_argument(
        "--viz-cfg",
        dest="viz_cfg",
        help="Path (without extension) to write Graphviz visualization of the VM CFG",
    )
    parser.add_argument(
        "--viz-format",
        dest="viz_format",
        default="svg",
        help="Format for Graphviz output (svg, png, pdf, etc)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", action="store_true", help="Log one line per compiled file"
    )
    verbosity.add_argument(
        "--debug",
        action="store_true",
        help="Log symbol definitions and the emitted VM code",
    )
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.debug)

    try:
        compile_path(
            args.path,
            xml=args.xml,
            print_tokens=args.print_tokens,
            print_ast=args.print_ast,
            print_symbols=args.print_symbols,
            viz_path=args.viz_cfg,
            viz_format=args.viz_format,
        )
    except CompileError as e:
        print(f"jackc: {e}", file=sys.stderr)
        return 1
    except ExecutableNotFound as e:
        print(f"jackc: viz error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
