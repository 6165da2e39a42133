# tests/test_pattern.py
import pytest

from openrepo.core.pattern import (
    MODE_CHECK_IGNORE,
    MODE_IGNORE,
    compile_rule,
    is_valid_pattern,
    split_patterns,
)


@pytest.mark.parametrize("line", ["", "   ", "\t", "# comment", "#*.log", "foo\\"])
def test_rejected_lines(line):
    assert is_valid_pattern(line) is False


@pytest.mark.parametrize("line", ["*.log", "\\#notes", "foo\\\\", "!keep.log", " leading"])
def test_accepted_lines(line):
    assert is_valid_pattern(line) is True


def test_non_string_is_not_a_pattern():
    assert is_valid_pattern(None) is False
    assert is_valid_pattern(42) is False


def test_split_patterns_drops_blank_lines():
    assert split_patterns("*.log\r\n\nbuild/\n") == ["*.log", "build/"]


def test_negation_and_escapes():
    rule = compile_rule("!important.log")
    assert rule.negative is True
    assert rule.body == "important.log"

    escaped = compile_rule("\\!important.log")
    assert escaped.negative is False
    assert escaped.body == "!important.log"
    assert escaped.matches("!important.log")

    assert compile_rule("\\#notes").matches("#notes")


@pytest.mark.parametrize(
    "pattern, path, expected",
    [
        ("*.log", "debug.log", True),
        ("*.log", "src/debug.log", True),
        ("*.log", "debug.log.txt", False),
        ("ab", "ab", True),
        ("ab", "x/ab", True),
        ("ab", "abc", False),
        ("/root.txt", "root.txt", True),
        ("/root.txt", "sub/root.txt", False),
        ("doc/*.txt", "doc/notes.txt", True),
        ("doc/*.txt", "doc/sub/notes.txt", False),
        ("?.md", "a.md", True),
        ("?.md", "ab.md", False),
        ("**/foo", "foo", True),
        ("**/foo", "a/b/foo", True),
        ("**/foo", "foobar", False),
        ("a/**/b", "a/b", True),
        ("a/**/b", "a/x/y/b", True),
        ("a/**/b", "a/xb", False),
        ("logs/**", "logs/a", True),
        ("logs/**", "logs/", False),
        ("build/", "build/", True),
        ("build/", "build", False),
        ("[a-c].txt", "b.txt", True),
        ("[a-c].txt", "d.txt", False),
        ("[!a].txt", "b.txt", True),
        ("[!a].txt", "a.txt", False),
    ],
)
def test_match_regex(pattern, path, expected):
    assert compile_rule(pattern).matches(path) is expected


def test_reversed_range_matches_nothing():
    rule = compile_rule("[z-a].txt")
    assert not rule.matches("a.txt")
    assert not rule.matches("z.txt")
    assert not rule.matches("-.txt")


def test_unterminated_bracket_matches_nothing():
    rule = compile_rule("[abc")
    assert not rule.matches("[abc")
    assert not rule.matches("a")


def test_trailing_spaces():
    assert compile_rule("foo   ").matches("foo")
    escaped = compile_rule("foo\\ ")
    assert escaped.matches("foo ")
    assert not escaped.matches("foo")


def test_bom_is_stripped():
    assert compile_rule("\ufeff*.log").matches("a.log")


def test_trailing_wildcard_modes():
    rule = compile_rule("foo/*")
    assert rule.matches("foo/bar", MODE_IGNORE)
    assert rule.matches("foo/bar", MODE_CHECK_IGNORE)
    # Only the ancestor-check regex accepts the bare directory.
    assert not rule.matches("foo/", MODE_IGNORE)
    assert rule.matches("foo/", MODE_CHECK_IGNORE)


def test_case_sensitivity_is_a_compile_option():
    assert compile_rule("*.LOG").matches("a.log")
    assert not compile_rule("*.LOG", ignore_case=False).matches("a.log")


def test_compiling_twice_is_deterministic():
    for pattern in ["*.log", "a/**/b", "foo/*", "[a-c]?.md", "!/x/"]:
        first, second = compile_rule(pattern), compile_rule(pattern)
        assert first.regex.pattern == second.regex.pattern
        assert first.check_regex.pattern == second.check_regex.pattern
