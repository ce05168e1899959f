"""
Test parsing of text into generic values.
"""

from pytest import raises

from hatchet.exceptions import DepthExceededError, HatchetSyntaxError
from hatchet.parsing import parse


def test_scalars():
    """
    Test bare and quoted scalars.
    """
    assert parse("abc") == "abc"
    assert parse("  42 \n") == "42"
    assert parse('"hello world"') == "hello world"
    assert parse('""') == ""

    # bare scalars may contain punctuation other than structural characters
    assert parse("2024-01-02T03:04:05") == "2024-01-02T03:04:05"
    assert parse("a,b;c") == "a,b;c"


def test_escapes():
    """
    Test escape sequences in quoted scalars.
    """
    assert parse(r'"a\"b"') == 'a"b'
    assert parse(r'"a\\b"') == "a\\b"
    assert parse(r'"line1\nline2\ttab\r"') == "line1\nline2\ttab\r"

    # unknown escapes are kept verbatim
    assert parse(r'"C:\path"') == "C:\\path"


def test_sequences():
    """
    Test sequences, including nesting and empty sequences.
    """
    assert parse("[]") == []
    assert parse("[a b c]") == ["a", "b", "c"]
    assert parse("[a [b c] []]") == ["a", ["b", "c"], []]
    assert parse('[ "x y"\n z ]') == ["x y", "z"]

    # structural characters delimit tokens without whitespace
    assert parse("[a[b]c]") == ["a", ["b"], "c"]


def test_mappings():
    """
    Test mappings, including nesting and key order.
    """
    assert parse("{}") == {}
    assert parse("{ a 1 b 2 }") == {"a": "1", "b": "2"}
    assert list(parse("{ z 1 a 2 }")) == ["z", "a"]

    text = """
    {
      name "Rex"
      tags [good loyal]
      owner {
        name Sam
      }
    }
    """
    assert parse(text) == {
        "name": "Rex",
        "tags": ["good", "loyal"],
        "owner": {"name": "Sam"},
    }

    # quoted keys
    assert parse('{ "key" value }') == {"key": "value"}


def test_syntax_errors():
    """
    Test malformed text.
    """
    bad_texts = [
        "",
        "   ",
        "[a b",
        "{ a 1",
        '"unterminated',
        '"trailing backslash\\',
        "a b",
        "]",
        "[a }",
        "{ a }",
        "{ [a] b }",
        "{ a 1 a 2 }",
    ]

    for text in bad_texts:
        with raises(HatchetSyntaxError):
            parse(text)


def test_syntax_error_position():
    """
    Test that syntax errors report the line and column.
    """
    with raises(HatchetSyntaxError) as exc_info:
        parse("{\n  a 1\n  b }")

    assert exc_info.value.line == 3
    assert exc_info.value.column == 5
    assert "Missing value" in exc_info.value.reason

    with raises(HatchetSyntaxError) as exc_info:
        parse("{ a 1 a 2 }")

    assert exc_info.value.pos == 6
    assert "Duplicate key" in str(exc_info.value)


def test_max_depth():
    """
    Test that nesting beyond the maximum depth is rejected.
    """
    assert parse("[[[a]]]", max_depth=3) == [[["a"]]]

    with raises(DepthExceededError):
        parse("[[[a]]]", max_depth=2)

    with raises(DepthExceededError):
        parse("[" * 1000 + "]" * 1000)
