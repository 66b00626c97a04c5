import pytest

from errors import LexicalError
from main import lex
from tokens import Token, TokenType, tokens_from_xml, tokens_to_xml


def _pairs(tokens):
    return [(t.type, t.value) for t in tokens]


def test_lexer_recognizes_keywords_symbols_and_identifiers():
    tokens = lex("class Main { field int x; }")
    assert _pairs(tokens) == [
        (TokenType.KEYWORD, "class"),
        (TokenType.IDENTIFIER, "Main"),
        (TokenType.SYMBOL, "{"),
        (TokenType.KEYWORD, "field"),
        (TokenType.KEYWORD, "int"),
        (TokenType.IDENTIFIER, "x"),
        (TokenType.SYMBOL, ";"),
        (TokenType.SYMBOL, "}"),
    ]


def test_lexer_splits_symbols_inside_words():
    tokens = lex("let a[i]=x.y(-1);")
    assert [t.value for t in tokens] == [
        "let", "a", "[", "i", "]", "=", "x", ".", "y", "(", "-", "1", ")", ";",
    ]
    assert tokens[11].type == TokenType.INT_CONST


def test_string_constant_keeps_inner_whitespace():
    tokens = lex('do Output.printString("Hello,  world ; x");')
    strings = [t for t in tokens if t.type == TokenType.STRING_CONST]
    assert len(strings) == 1
    assert strings[0].value == "Hello,  world ; x"
    assert tokens[-1] == Token(TokenType.SYMBOL, ";")


def test_two_string_constants_on_one_line():
    tokens = lex('let s = "a b"; let t = "c";')
    strings = [t.value for t in tokens if t.type == TokenType.STRING_CONST]
    assert strings == ["a b", "c"]


def test_comments_are_removed_and_lines_are_tracked():
    src = """// header
class A { /* block
   comment */ field int x; // trailing
/** doc */
}"""
    tokens = lex(src)
    assert [t.value for t in tokens] == ["class", "A", "{", "field", "int", "x", ";", "}"]
    assert tokens[0].line == 2
    assert tokens[3].line == 3
    assert tokens[-1].line == 5


def test_comment_markers_inside_string_are_kept():
    tokens = lex('let s = "http://x /* y */";')
    assert tokens[3] == Token(TokenType.STRING_CONST, "http://x /* y */")


def test_integer_range_is_checked():
    assert lex("32767")[0] == Token(TokenType.INT_CONST, "32767")
    with pytest.raises(LexicalError) as exc:
        lex("let x = 32768;")
    assert "32768" in str(exc.value)


def test_malformed_integer_is_rejected():
    with pytest.raises(LexicalError) as exc:
        lex("let x = 12ab;")
    assert "12ab" in str(exc.value)


def test_unknown_character_is_rejected():
    with pytest.raises(LexicalError) as exc:
        lex("let x = 1 # 2;")
    assert "#" in str(exc.value)
    assert exc.value.line == 1


def test_unterminated_string_is_rejected():
    with pytest.raises(LexicalError):
        lex('let s = "abc;')


def test_token_xml_escapes_reserved_symbols():
    xml = tokens_to_xml(lex("if (a < b & c > d) {}"))
    assert xml[0] == "<tokens>"
    assert xml[-1] == "</tokens>"
    assert "<symbol> &lt; </symbol>" in xml
    assert "<symbol> &gt; </symbol>" in xml
    assert "<symbol> &amp; </symbol>" in xml
    assert "<keyword> if </keyword>" in xml


def test_token_xml_reserialization_is_idempotent():
    src = 'class A { function void f() { let s = "x < y"; return 1 & 2 > 3; } }'
    tokens = lex(src)
    first = tokens_to_xml(tokens)
    reread = tokens_from_xml(first)
    assert reread == tokens
    assert tokens_to_xml(reread) == first


def test_tokens_from_xml_rejects_unknown_tags():
    with pytest.raises(ValueError):
        tokens_from_xml(["<tokens>", "<bogus> x </bogus>", "</tokens>"])
