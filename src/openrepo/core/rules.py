# src/openrepo/core/rules.py
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Union

from openrepo.core.pattern import (
    MODE_IGNORE,
    IgnoreRule,
    compile_rule,
    is_valid_pattern,
    split_patterns,
)


@dataclass(frozen=True)
class MatchResult:
    """Outcome of evaluating one path. rule is the ignoring rule, if any."""
    ignored: bool = False
    unignored: bool = False
    rule: Optional[IgnoreRule] = None


class RuleSet:
    """Ordered compiled ignore rules; later rules override earlier ones."""

    def __init__(self, ignore_case: bool = True):
        self.ignore_case = ignore_case
        self._rules: List[IgnoreRule] = []

    def __iter__(self) -> Iterator[IgnoreRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def add(self, patterns: Union[str, IgnoreRule, "RuleSet", Iterable]) -> bool:
        """
        Append patterns in order. Accepts a (multi-line) string, a compiled
        rule, another rule set or ignore engine, or an iterable of these.
        Invalid lines are skipped. Returns True if anything was added.
        """
        if isinstance(patterns, str):
            items = split_patterns(patterns)
        elif isinstance(patterns, (IgnoreRule, RuleSet)) or hasattr(patterns, "rules"):
            items = [patterns]
        else:
            items = list(patterns)

        added = False
        for item in items:
            added = self._add(item) or added
        return added

    def _add(self, item) -> bool:
        other = getattr(item, "rules", item)
        if isinstance(other, RuleSet):
            self._rules.extend(other._rules)
            return bool(other._rules)
        if isinstance(item, IgnoreRule):
            self._rules.append(item)
            return True
        if is_valid_pattern(item):
            self._rules.append(compile_rule(item, self.ignore_case))
            return True
        return False

    def test(self, path: str, check_unignored: bool = False, mode: str = MODE_IGNORE) -> MatchResult:
        """Evaluate a single path against every rule, without looking at its parents."""
        ignored = False
        unignored = False
        matched_rule = None

        for rule in self._rules:
            negative = rule.negative
            # Already in the state this rule would produce.
            if unignored == negative and ignored != unignored:
                continue
            # Negation only matters for something ignored, unless asked.
            if negative and not ignored and not unignored and not check_unignored:
                continue
            if not rule.matches(path, mode):
                continue
            ignored = not negative
            unignored = negative
            matched_rule = None if negative else rule

        return MatchResult(ignored=ignored, unignored=unignored, rule=matched_rule)
