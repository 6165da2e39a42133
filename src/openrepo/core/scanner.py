# src/openrepo/core/scanner.py
import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from openrepo.core.ignore import Ignore, build_ignore
from openrepo.errors import InvalidRootError
from openrepo.models import FileEntry

logger = logging.getLogger(__name__)


class ProjectScanner:
    def __init__(self, root_dir: Path, ignore: Ignore):
        self.root_dir = Path(root_dir)
        self.ignore = ignore

    def _on_walk_error(self, error: OSError) -> None:
        # The unreadable subtree is left out; the walk carries on.
        logger.warning("Could not read directory %s: %s", error.filename, error.strerror or error)

    def _rel(self, abs_path: str) -> str:
        return Path(os.path.relpath(abs_path, self.root_dir)).as_posix()

    def scan(self) -> Iterator[FileEntry]:
        """
        Walks the directory tree in name order, pruning ignored directories,
        and yields a FileEntry for every file that is not ignored.
        Symlinks are neither followed nor reported.
        """
        for root, dirs, files in os.walk(self.root_dir, onerror=self._on_walk_error):
            # --- 1. Prune directories (os.walk descends into what stays in dirs) ---
            kept_dirs = []
            for d in sorted(dirs):
                dir_abs_path = os.path.join(root, d)
                if os.path.islink(dir_abs_path):
                    continue
                if self.ignore.ignores(self._rel(dir_abs_path) + "/"):
                    logger.debug("Pruning directory: %s", dir_abs_path)
                    continue
                kept_dirs.append(d)
            dirs[:] = kept_dirs

            # --- 2. Files ---
            for f in sorted(files):
                file_abs_path = os.path.join(root, f)
                if os.path.islink(file_abs_path):
                    continue
                if self.ignore.ignores(self._rel(file_abs_path)):
                    continue

                try:
                    size = os.stat(file_abs_path).st_size
                except OSError as e:
                    logger.warning("Could not get stats for file %s: %s", file_abs_path, e)
                    size = None
                yield FileEntry(path=file_abs_path, size=size)


def scan_directory(root_dir, extra_patterns: Optional[Iterable[str]] = None) -> List[FileEntry]:
    """
    Lists the files under root_dir that survive the default ignore rules,
    the root's .gitignore and repo_ignore, and any extra patterns.
    """
    if not root_dir:
        return []
    root = Path(root_dir)
    if not root.exists():
        raise InvalidRootError(f"Root directory '{root}' does not exist")
    if not root.is_dir():
        raise InvalidRootError(f"Root path '{root}' is not a directory")

    logger.info("Scanning directory: %s", root)
    scanner = ProjectScanner(root.resolve(), build_ignore(root, extra_patterns))
    entries = list(scanner.scan())
    logger.info("Found %d files after filtering", len(entries))
    return entries
