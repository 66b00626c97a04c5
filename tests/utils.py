from typing import List

from codegen import CodeGenerator, IdGenerator
from lexer import tokenize_text
from parser import Parser


def lex(text: str):
    """Return a list of tokens for the given source text."""
    return tokenize_text(text)


def parse_tokens(tokens):
    """Parse a list of tokens into an AST node."""
    return Parser(tokens).parse()


def parse_text(text: str):
    """Convenience: lex+parse a source text into an AST."""
    return Parser(lex(text)).parse()


def compile_text(text: str, ids: IdGenerator = None) -> List[str]:
    """Compile one class to VM lines with a fresh label id generator."""
    return CodeGenerator(ids if ids is not None else IdGenerator()).generate(
        parse_text(text)
    )


def function_body(vm: List[str], name: str) -> List[str]:
    """The VM lines of function `name`, from its header to the next header."""
    start = vm.index(next(l for l in vm if l.startswith(f"function {name} ")))
    end = next(
        (i for i in range(start + 1, len(vm)) if vm[i].startswith("function ")),
        len(vm),
    )
    return vm[start:end]
