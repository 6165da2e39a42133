# src/openrepo/core/pattern.py
"""
Compiles one gitignore-style pattern line into regular expressions.

The pattern body is rewritten by an ordered list of (regex, replacer) steps,
each operating on the output of the previous one. The result is a regex
"prefix"; the trailing wildcard is expanded last and differently per mode:

- MODE_IGNORE ("regex"): ``foo/*`` needs at least one more character.
- MODE_CHECK_IGNORE ("check_regex"): ``foo/*`` also accepts ``foo/`` itself,
  so an ancestor directory of a possibly re-included path is not pruned.
"""
import logging
import re
from dataclasses import dataclass
from re import Match, Pattern
from typing import Callable, List, Tuple

logger = logging.getLogger(__name__)

MODE_IGNORE = "regex"
MODE_CHECK_IGNORE = "check_regex"

# Stands in for an empty or broken bracket expression.
NEVER_MATCH = "(?!)"

_BLANK_LINE = re.compile(r"^\s+$")
_INVALID_TRAILING_BACKSLASH = re.compile(r"(?:[^\\]|^)\\$")
_LEADING_ESCAPED_EXCLAMATION = re.compile(r"^\\!")
_LEADING_ESCAPED_HASH = re.compile(r"^\\#")
_SPLIT_LINES = re.compile(r"\r?\n")
_RANGE = re.compile(r"([0-z])-([0-z])")
_TRAILING_WILDCARD = re.compile(r"(^|\\/)?\\\*$")
_INTERNAL_SLASH = re.compile(r"/(?!$)")


def _sanitize_range(chars: str) -> str:
    # Reversed ranges such as z-a are dropped.
    return _RANGE.sub(
        lambda m: m.group(0) if ord(m.group(1)) <= ord(m.group(2)) else "",
        chars,
    )


def _clean_range_backslash(slashes: str) -> str:
    return slashes[: len(slashes) - len(slashes) % 2]


def _replace_escaped_spaces(m: Match, body: str) -> str:
    slashes = m.group(1)
    return slashes[: len(slashes) - len(slashes) % 2] + " "


def _replace_starting(m: Match, body: str) -> str:
    return "^" if _INTERNAL_SLASH.search(body) else r"(?:^|\/)"


def _replace_double_star(m: Match, body: str) -> str:
    # Intermediate "/**" spans zero or more directories; a trailing one
    # matches everything below the directory.
    if m.start() + 6 < len(m.string):
        return r"(?:\/[^\/]+)*"
    return r"\/.+"


def _replace_intermediate_star(m: Match, body: str) -> str:
    return m.group(1) + m.group(2).replace(r"\*", r"[^\/]*")


def _replace_range(m: Match, body: str) -> str:
    lead_escape, chars, end_escape, close = m.group(1), m.group(2), m.group(3), m.group(4)
    if lead_escape == "\\":
        return "\\[" + chars + _clean_range_backslash(end_escape) + close
    if close != "]" or len(end_escape) % 2:
        return NEVER_MATCH
    chars = _sanitize_range(chars)
    if chars.startswith("!"):
        chars = "^" + chars[1:]
    if not chars and not end_escape:
        return NEVER_MATCH
    return "[" + chars + end_escape + "]"


def _replace_ending(m: Match, body: str) -> str:
    # 'ab' must not match 'abc'; a trailing slash restricts to directories.
    match = m.group(0)
    if match.endswith("/"):
        return match + "$"
    return match + r"(?=$|\/$)"


# (regex, replacer, count); every replacer receives the match and the pattern
# body. count=0 replaces every occurrence.
_REPLACERS: List[Tuple[Pattern, Callable[[Match, str], str], int]] = [
    (re.compile("^\ufeff"), lambda m, body: "", 1),
    # Trailing spaces are dropped unless escaped with a backslash.
    (
        re.compile(r"((?:\\\\)*?)(\\?\s+)$"),
        lambda m, body: m.group(1) + (" " if m.group(2).startswith("\\") else ""),
        1,
    ),
    # "\ " -> " "
    (re.compile(r"(\\+?)\s"), _replace_escaped_spaces, 0),
    # Regex metacharacters written by the user are literals.
    (re.compile(r"[\\$.|*+(){^]"), lambda m, body: "\\" + m.group(0), 0),
    # "?" matches one non-separator character.
    (re.compile(r"(?!\\)\?"), lambda m, body: "[^/]", 0),
    # A leading slash anchors the pattern to the root.
    (re.compile(r"^/"), lambda m, body: "^", 1),
    (re.compile(r"/"), lambda m, body: r"\/", 0),
    # A leading "**/" matches in all directories.
    (re.compile(r"^\^*\\\*\\\*\\/"), lambda m, body: r"^(?:.*\/)?", 1),
    (re.compile(r"^(?=[^^])"), _replace_starting, 1),
    (re.compile(r"\\/\\\*\\\*(?=\\/|$)"), _replace_double_star, 0),
    # Intermediate "*"; a trailing one is expanded per mode later.
    (re.compile(r"(^|[^\\]+)(\\\*)+(?=.+)"), _replace_intermediate_star, 0),
    # Undo the metacharacter escaping for user-escaped characters.
    (re.compile(r"\\\\\\(?=[$.|*+(){^])"), lambda m, body: "\\", 0),
    (re.compile(r"\\\\"), lambda m, body: "\\", 0),
    (re.compile(r"(\\)?\[([^\]/]*?)(\\*)($|\])"), _replace_range, 0),
    (re.compile(r"(?:[^*])$"), _replace_ending, 1),
]


def _make_regex_prefix(body: str) -> str:
    source = body
    for regex, replacer, count in _REPLACERS:
        source = regex.sub(lambda m: replacer(m, body), source, count=count)
    return source


def _expand_trailing_wildcard(prefix: str, mode: str) -> str:
    def replace(m: Match) -> str:
        head = m.group(1)
        if not head:
            star = "[^/]*"
        elif mode == MODE_IGNORE:
            star = head + "[^/]+"
        else:
            star = head + "[^/]*"
        return star + r"(?=$|\/$)"

    return _TRAILING_WILDCARD.sub(replace, prefix, count=1)


def _compile(source: str, ignore_case: bool, pattern: str) -> Pattern:
    try:
        return re.compile(source, re.IGNORECASE if ignore_case else 0)
    except re.error as e:
        logger.warning("Ignore pattern %r cannot be compiled, it will match nothing: %s", pattern, e)
        return re.compile(NEVER_MATCH)


@dataclass(frozen=True)
class IgnoreRule:
    """One compiled ignore pattern."""
    pattern: str
    body: str
    negative: bool
    ignore_case: bool
    regex: Pattern
    check_regex: Pattern

    def matches(self, path: str, mode: str = MODE_IGNORE) -> bool:
        return getattr(self, mode).search(path) is not None


def is_valid_pattern(pattern) -> bool:
    """True if the line is a pattern at all (not blank, comment or malformed)."""
    return (
        isinstance(pattern, str)
        and bool(pattern)
        and not _BLANK_LINE.match(pattern)
        and not _INVALID_TRAILING_BACKSLASH.search(pattern)
        and not pattern.startswith("#")
    )


def split_patterns(text: str) -> List[str]:
    return [line for line in _SPLIT_LINES.split(text) if line]


def compile_rule(pattern: str, ignore_case: bool = True) -> IgnoreRule:
    """Compile a pattern already accepted by is_valid_pattern()."""
    negative = pattern.startswith("!")
    body = pattern[1:] if negative else pattern
    body = _LEADING_ESCAPED_EXCLAMATION.sub("!", body, count=1)
    body = _LEADING_ESCAPED_HASH.sub("#", body, count=1)

    prefix = _make_regex_prefix(body)
    return IgnoreRule(
        pattern=pattern,
        body=body,
        negative=negative,
        ignore_case=ignore_case,
        regex=_compile(_expand_trailing_wildcard(prefix, MODE_IGNORE), ignore_case, pattern),
        check_regex=_compile(_expand_trailing_wildcard(prefix, MODE_CHECK_IGNORE), ignore_case, pattern),
    )
