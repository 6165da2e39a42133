# tests/conftest.py
import pytest

from openrepo.models import ErrorKind, FileReadResult


@pytest.fixture
def project(tmp_path):
    """
    A small repository:
    1. source files (src/)
    2. logs ignored through .gitignore
    3. a file ignored through repo_ignore
    4. .git/ and node_modules/ excluded by default
    """
    root = tmp_path / "proj"
    (root / "src" / "lib").mkdir(parents=True)
    (root / "logs").mkdir()
    (root / ".git").mkdir()
    (root / "node_modules" / "pkg").mkdir(parents=True)

    (root / "src" / "main.py").write_text("print('main')\n", encoding="utf-8")
    (root / "src" / "utils.py").write_text("def util(): pass\n", encoding="utf-8")
    (root / "src" / "lib" / "helper.py").write_text("def helper():\n    return 1\n", encoding="utf-8")
    (root / "README.md").write_text("# Project\n", encoding="utf-8")
    (root / "logs" / "app.log").write_text("error...", encoding="utf-8")
    (root / ".git" / "config").write_text("[core]", encoding="utf-8")
    (root / "node_modules" / "top.js").write_text("module.exports = 1", encoding="utf-8")
    (root / "node_modules" / "pkg" / "index.js").write_text("module.exports = 2", encoding="utf-8")

    (root / ".gitignore").write_text("*.log\n", encoding="utf-8")
    (root / "repo_ignore").write_text("# custom rules\nsrc/utils.py\n", encoding="utf-8")
    return root


@pytest.fixture
def fake_reader():
    """Build a reader from {path: content-or-FileReadResult}."""
    def make(files):
        def reader(path):
            value = files.get(path)
            if value is None:
                return FileReadResult(path=path, error=ErrorKind.NOT_FOUND, message=f"no such file: {path}")
            if isinstance(value, FileReadResult):
                return value
            return FileReadResult(path=path, content=value)
        return reader
    return make


@pytest.fixture
def count_words():
    """Deterministic stand-in for the BPE tokenizer."""
    return lambda text: len(text.split())
