from main import lex
from token_stream import TokenStream


def test_first_is_idempotent_and_second_looks_ahead():
    ts = TokenStream(lex("let a [ 1 ]"))
    assert ts.first() is ts.first()
    assert ts.first().value == "let"
    assert ts.second().value == "a"
    assert ts.advance().value == "let"
    assert ts.first().value == "a"
    assert ts.second().value == "["


def test_past_the_end_returns_none():
    ts = TokenStream(lex("x"))
    assert ts.second() is None
    assert ts.advance().value == "x"
    assert ts.at_end()
    assert ts.first() is None
    assert ts.advance() is None


def test_reset_and_context():
    ts = TokenStream(lex("a b c"))
    assert len(ts) == 3
    ts.advance()
    assert ts.context(radius=1) == "a >>b<< c"
    ts.reset()
    assert ts.first().value == "a"
