# src/openrepo/core/ignore.py
import logging
import os
import re
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from openrepo.config import DEFAULT_IGNORE_PATTERNS, IGNORE_FILE_NAMES
from openrepo.core.pattern import MODE_CHECK_IGNORE, MODE_IGNORE
from openrepo.core.rules import MatchResult, RuleSet
from openrepo.errors import PathValidationError

logger = logging.getLogger(__name__)

_INVALID_PATH = re.compile(r"^\.*/|^\.+$")
_WINDOWS_ABSOLUTE = re.compile(r"^[a-z]:/", re.IGNORECASE)
_WINDOWS_VERBATIM = re.compile(r'^\\\\\?\\|["<>|\x00-\x1f]+')
SLASH = "/"


def to_posix(path: str) -> str:
    """Convert a Windows-style path to forward slashes unless it must stay verbatim."""
    if _WINDOWS_VERBATIM.search(path):
        return path
    return path.replace("\\", SLASH)


class Ignore:
    """
    Path-level ignore decisions over a RuleSet.

    A path is ignored when any of its ancestor directories is ignored, or
    else when its own rules say so. Results are memoized per path; adding
    patterns drops both caches.
    """

    def __init__(
        self,
        ignore_case: bool = True,
        allow_relative_paths: bool = False,
        windows_paths: Optional[bool] = None,
    ):
        self._rules = RuleSet(ignore_case)
        self._strict_path_check = not allow_relative_paths
        self._windows_paths = os.name == "nt" if windows_paths is None else windows_paths
        self._init_cache()

    @property
    def rules(self) -> RuleSet:
        return self._rules

    def _init_cache(self) -> None:
        self._ignore_cache: Dict[str, MatchResult] = {}
        self._test_cache: Dict[str, MatchResult] = {}

    def add(self, patterns) -> "Ignore":
        self._rules.add(patterns)
        self._init_cache()
        return self

    def _is_not_relative(self, path: str) -> bool:
        if self._windows_paths and _WINDOWS_ABSOLUTE.match(path):
            return True
        return bool(_INVALID_PATH.search(path))

    def _convert(self, path: str) -> str:
        return to_posix(path) if self._windows_paths else path

    def validate(self, original_path) -> str:
        """Return the path in matching form, or raise PathValidationError."""
        if not isinstance(original_path, str):
            raise PathValidationError(f"path must be a string, but got `{original_path!r}`")
        if not original_path:
            raise PathValidationError("path must not be empty")
        path = self._convert(original_path)
        if self._is_not_relative(path):
            raise PathValidationError(f'path should be a relative path string, but got "{original_path}"')
        return path

    def _prepare(self, original_path) -> str:
        if self._strict_path_check:
            return self.validate(original_path)
        if isinstance(original_path, str):
            return self._convert(original_path)
        return str(original_path)

    def _t(
        self,
        path: str,
        cache: Dict[str, MatchResult],
        check_unignored: bool,
        slices: Optional[List[str]] = None,
    ) -> MatchResult:
        if path in cache:
            return cache[path]

        if slices is None:
            slices = [s for s in path.split(SLASH) if s]
        if slices:
            slices.pop()

        if not slices:
            result = self._rules.test(path, check_unignored, MODE_IGNORE)
        else:
            parent = self._t(SLASH.join(slices) + SLASH, cache, check_unignored, slices)
            # Once a directory is ignored, nothing below it can be re-included.
            result = parent if parent.ignored else self._rules.test(path, check_unignored, MODE_IGNORE)

        cache[path] = result
        return result

    def test(self, path: str) -> MatchResult:
        return self._t(self._prepare(path), self._test_cache, True)

    def ignores(self, path: str) -> bool:
        return self._t(self._prepare(path), self._ignore_cache, False).ignored

    def check_ignore(self, path: str) -> MatchResult:
        """
        Like test(), but a directory path (ending in "/") is matched with
        the ancestor-check regexes, where a trailing ``*`` may also match an
        empty name: ``foo/*`` reports ``foo/`` as ignored.
        """
        path = self._prepare(path)
        if not path.endswith(SLASH):
            return self.test(path)

        slices = [s for s in path.split(SLASH) if s][:-1]
        if slices:
            parent = self._t(SLASH.join(slices) + SLASH, self._test_cache, True, slices)
            if parent.ignored:
                return parent

        return self._rules.test(path, False, MODE_CHECK_IGNORE)

    def create_filter(self) -> Callable[[str], bool]:
        return lambda path: not self.ignores(path)

    def filter(self, paths: Iterable[str]) -> List[str]:
        if isinstance(paths, str):
            paths = [paths]
        keep = self.create_filter()
        return [p for p in paths if keep(p)]


def is_path_valid(path, windows_paths: Optional[bool] = None) -> bool:
    try:
        Ignore(windows_paths=windows_paths).validate(path)
    except PathValidationError:
        return False
    return True


def load_ignore_file(ignore_file: Path) -> List[str]:
    """Read pattern lines from an ignore file. A missing file yields no patterns."""
    try:
        with open(ignore_file, "r", encoding="utf-8") as f:
            return f.read().splitlines()
    except FileNotFoundError:
        return []
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", ignore_file, e)
        return []


def build_ignore(root_dir: Path, extra_patterns: Optional[Iterable[str]] = None) -> Ignore:
    """
    Defaults first, then the root's ignore files, then any extra (user
    edited) patterns, so later sources can re-include what earlier ones drop.
    """
    ig = Ignore()
    ig.add(DEFAULT_IGNORE_PATTERNS)

    for name in IGNORE_FILE_NAMES:
        lines = load_ignore_file(Path(root_dir) / name)
        if lines:
            ig.add(lines)
            logger.debug("Loaded %d lines from %s", len(lines), name)

    if extra_patterns:
        ig.add(list(extra_patterns))
    return ig
