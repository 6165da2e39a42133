# tests/test_cli.py
import pytest

from openrepo.cli import main, selection_key
from openrepo.config import INSTRUCTION_TEMPLATES
from openrepo.utils.tokenizer import Tokenizer


class WordEncoding:
    def encode(self, text, disallowed_special=()):
        return text.split()


@pytest.fixture(autouse=True)
def offline_tokenizer(monkeypatch):
    monkeypatch.setattr(Tokenizer, "_encoding", WordEncoding())
    monkeypatch.setattr(Tokenizer, "_unavailable", False)


def test_end_to_end_run(project, capsys):
    output_file = project / "prompt.txt"
    main([str(project), "-i", "Refactor", "-o", str(output_file)])

    assert output_file.exists()
    content = output_file.read_text(encoding="utf-8")

    # Sections
    assert content.startswith("<file_map>\nproj/\n")
    assert "<file_contents>" in content
    assert content.endswith("<user_instructions>\nRefactor\n</user_instructions>\n")

    # Kept files
    assert "File: src/main.py\n```python\nprint('main')\n```" in content
    assert "File: src/lib/helper.py" in content
    assert "File: README.md" in content

    # Ignored files
    assert "app.log" not in content
    assert "File: src/utils.py" not in content
    assert "node_modules" not in content
    assert ".git/" not in content

    err = capsys.readouterr().err
    assert "Top 10 Largest Files" in err
    assert "Total files: 5" in err
    assert "Success! Prompt written to" in err


def test_output_file_is_not_packed_into_itself(project):
    output_file = project / "prompt.txt"
    main([str(project), "-o", str(output_file)])
    main([str(project), "-o", str(output_file)])
    assert "File: prompt.txt" not in output_file.read_text(encoding="utf-8")


@pytest.mark.parametrize("name", ["out[1].txt", "a*b.txt", "#notes.txt", "!x.txt", "out?.txt"])
def test_output_file_with_glob_characters_is_not_packed(project, name):
    output_file = project / name
    main([str(project), "-o", str(output_file)])
    main([str(project), "-o", str(output_file)])
    content = output_file.read_text(encoding="utf-8")
    assert f"File: {name}" not in content
    assert name not in content.split("</file_map>")[0]


def test_output_file_name_does_not_hide_other_files(project):
    (project / "abb.txt").write_text("keep me\n", encoding="utf-8")
    main([str(project), "-o", str(project / "a*.txt")])
    assert "File: abb.txt" in (project / "a*.txt").read_text(encoding="utf-8")


def test_stdout_mode(project, capsys):
    main([str(project)])
    out = capsys.readouterr().out
    assert out.startswith("<file_map>")
    assert "<user_instructions>\n(No instructions provided)\n</user_instructions>" in out


def test_select_folder(project, capsys):
    main([str(project), "-s", "src/lib"])
    out = capsys.readouterr().out
    assert "File: src/lib/helper.py" in out
    assert "File: src/main.py" not in out


def test_template(project, capsys):
    main([str(project), "-t", "review"])
    assert INSTRUCTION_TEMPLATES["review"] in capsys.readouterr().out


def test_extra_ignore(project, capsys):
    main([str(project), "--ignore", "*.md", "--ignore", "src/lib/"])
    out = capsys.readouterr().out
    assert "README.md" not in out
    assert "helper.py" not in out
    assert "File: src/main.py" in out


def test_list(project, capsys):
    main([str(project), "--list"])
    captured = capsys.readouterr()
    assert captured.out == (
        "proj/\n"
        "├── src\n"
        "│   ├── lib\n"
        "│   │   └── helper.py\n"
        "│   └── main.py\n"
        "├── .gitignore\n"
        "├── README.md\n"
        "└── repo_ignore\n"
    )
    assert "5 files" in captured.err


def test_unreadable_selection_is_reported(project, capsys):
    (project / "data.bin").write_bytes(b"\x00\x01\x02")
    main([str(project), "-s", "data.bin"])
    captured = capsys.readouterr()
    assert "[Error: BinaryFile - Binary content is not included]" in captured.out
    assert "could not be included" in captured.err


def test_invalid_directory(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([str(tmp_path / "missing")])
    assert exc_info.value.code == 1
    assert "Invalid directory" in capsys.readouterr().err


def test_unwritable_output(project, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([str(project), "-o", str(project / "no_dir" / "out.txt")])
    assert exc_info.value.code == 1
    assert "Could not write to output file" in capsys.readouterr().err


def test_selection_key(tmp_path):
    assert selection_key("src/lib/") == "src/lib"
    assert selection_key(".") == ""
    assert selection_key(str(tmp_path)) == str(tmp_path)
