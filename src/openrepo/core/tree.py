# src/openrepo/core/tree.py
import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Dict, Iterable, Iterator, List, Optional

from openrepo.models import FileEntry

logger = logging.getLogger(__name__)

ROOT_KEY = ""


@dataclass
class TreeNode:
    """One node of the arena. children holds keys, never node objects."""
    key: str
    name: str
    is_dir: bool
    path: Optional[str] = None
    size: Optional[int] = None
    children: List[str] = field(default_factory=list)


def _split(rel_path: str) -> List[str]:
    return [part for part in rel_path.replace("\\", "/").split("/") if part]


def _parent_key(key: str) -> str:
    return key.rsplit("/", 1)[0] if "/" in key else ROOT_KEY


class FileTree:
    """
    Directory tree stored as a flat map from relative POSIX path to node.
    Children are kept in display order: directories first, then by name.
    """

    def __init__(self, root_name: str, root_path: Optional[str] = None):
        self.root_path = root_path
        self.nodes: Dict[str, TreeNode] = {
            ROOT_KEY: TreeNode(key=ROOT_KEY, name=root_name, is_dir=True, path=root_path)
        }
        self._unsorted = set()

    @classmethod
    def from_entries(cls, entries: Iterable[FileEntry], root_dir) -> "FileTree":
        root = Path(root_dir)
        tree = cls(root.name or str(root), str(root))
        for entry in entries:
            try:
                rel = Path(entry.path).relative_to(root).as_posix()
            except ValueError:
                logger.debug("Skipping %s: not under %s", entry.path, root)
                continue
            tree.add_file(rel, path=entry.path, size=entry.size)
        return tree

    @classmethod
    def from_paths(cls, rel_paths: Iterable[str], root_name: str) -> "FileTree":
        tree = cls(root_name)
        for rel in rel_paths:
            tree.add_file(rel)
        return tree

    def add_file(self, rel_path: str, path: Optional[str] = None, size: Optional[int] = None) -> str:
        parts = _split(rel_path)
        if not parts:
            return ROOT_KEY
        parent = ROOT_KEY
        for i, part in enumerate(parts):
            key = "/".join(parts[: i + 1])
            is_last = i == len(parts) - 1
            node = self.nodes.get(key)
            if node is None:
                node = TreeNode(key=key, name=part, is_dir=not is_last)
                if self.root_path:
                    node.path = str(PurePath(self.root_path, *parts[: i + 1]))
                self.nodes[key] = node
                self.nodes[parent].children.append(key)
                self._unsorted.add(parent)
            elif not is_last and not node.is_dir:
                node.is_dir = True
                self._unsorted.add(parent)
            parent = key

        leaf = self.nodes[parent]
        leaf.path = path if path is not None else leaf.path
        leaf.size = size
        return parent

    def key_for(self, path: str) -> Optional[str]:
        """Map an absolute path or a relative key to a node key."""
        if path in self.nodes:
            return path
        if self.root_path:
            try:
                key = Path(path).relative_to(self.root_path).as_posix()
            except ValueError:
                return None
            key = ROOT_KEY if key == "." else key
            if key in self.nodes:
                return key
        return None

    def children(self, key: str = ROOT_KEY) -> List[str]:
        node = self.nodes[key]
        if key in self._unsorted:
            node.children.sort(key=lambda k: (not self.nodes[k].is_dir, self.nodes[k].name))
            self._unsorted.discard(key)
        return node.children

    def walk(self, key: str = ROOT_KEY) -> Iterator[TreeNode]:
        """Depth-first, in display order, starting with key itself."""
        stack = [key]
        while stack:
            current = stack.pop()
            yield self.nodes[current]
            stack.extend(reversed(self.children(current)))

    def descendant_files(self, key: str) -> List[str]:
        return [node.path or node.key for node in self.walk(key) if not node.is_dir]

    def expand_selection(self, keys: Iterable[str]) -> List[str]:
        """Turn selected files and folders into a de-duplicated list of files."""
        selected: Dict[str, None] = {}
        for raw in keys:
            key = self.key_for(raw)
            if key is None:
                logger.debug("Ignoring unknown selection: %s", raw)
                continue
            for file_path in self.descendant_files(key):
                selected.setdefault(file_path)
        return list(selected)

    def search(self, term: str) -> List[str]:
        """Keys of files whose relative path contains term, plus their ancestors."""
        needle = term.strip().casefold()
        if not needle:
            return [node.key for node in self.walk()]

        visible = {ROOT_KEY}
        for node in self.walk():
            if not node.is_dir and needle in node.key.casefold():
                key = node.key
                while key not in visible:
                    visible.add(key)
                    key = _parent_key(key)
        return [node.key for node in self.walk() if node.key in visible]

    def render(self) -> str:
        lines = [f"{self.nodes[ROOT_KEY].name}/"]

        def _generate_lines_recursive(key: str, prefix: str):
            entries = self.children(key)
            for i, child in enumerate(entries):
                is_last = (i == len(entries) - 1)
                connector = "└── " if is_last else "├── "
                lines.append(f"{prefix}{connector}{self.nodes[child].name}")

                if self.nodes[child].is_dir:
                    new_prefix = prefix + ("    " if is_last else "│   ")
                    _generate_lines_recursive(child, new_prefix)

        _generate_lines_recursive(ROOT_KEY, "")
        return "\n".join(lines) + "\n"


def generate_project_tree(file_paths: Iterable[str], root_name: str) -> str:
    """Generates the tree text for a set of relative paths; input order is irrelevant."""
    return FileTree.from_paths(file_paths, root_name).render()
