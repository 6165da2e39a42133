# src/openrepo/core/prompt.py
"""
Builds the prompt artifact from a selection of files.

The artifact text has three sections separated by a blank line::

    <file_map>        tree of the selected files, rooted at the base directory
    <file_contents>   one "File: <path>" block per selected file
    <user_instructions>

A file that cannot be read never aborts the batch: it gets an inline error
block, a PromptError, and a zero token count. Errors and file details keep
the order in which paths were given.
"""
import logging
import os
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from openrepo.config import (
    INSTRUCTION_MARKER,
    LANGUAGE_BY_EXTENSION,
    NO_INSTRUCTION_PLACEHOLDER,
)
from openrepo.core.reader import read_file_content
from openrepo.core.tree import generate_project_tree
from openrepo.models import (
    ErrorKind,
    FileDetail,
    FileReadResult,
    PromptArtifact,
    PromptError,
)
from openrepo.utils.tokenizer import Tokenizer

logger = logging.getLogger(__name__)

Reader = Callable[[str], FileReadResult]

INVALID_SELECTION_MESSAGE = "Selected files data is invalid."

_BACKTICK_RUN = re.compile(r"`+")


def relative_path(full_path: str, base_directory: Optional[str]) -> str:
    """Path relative to base_directory in POSIX form, or the normalized full path if outside it."""
    if not base_directory:
        return full_path
    # ".." segments must not make an outside path look like a descendant.
    normalized = os.path.normpath(full_path)
    try:
        rel = Path(normalized).relative_to(os.path.normpath(base_directory))
    except ValueError:
        return normalized
    return rel.as_posix()


def root_name(base_directory: Optional[str]) -> str:
    if not base_directory:
        return "project"
    return Path(base_directory).name or str(base_directory)


def _language(path: str) -> str:
    return LANGUAGE_BY_EXTENSION.get(Path(path).suffix.lower(), "")


def _validate_selection(selected_paths) -> Optional[List[str]]:
    if selected_paths is None or isinstance(selected_paths, (str, bytes)):
        return None
    try:
        items = list(selected_paths)
    except TypeError:
        return None
    paths = []
    for item in items:
        if isinstance(item, os.PathLike):
            item = os.fspath(item)
        if not isinstance(item, str):
            return None
        paths.append(item)
    # Set semantics, first occurrence wins.
    return list(dict.fromkeys(paths))


def _invoke(reader: Reader, path: str) -> Tuple[Optional[FileReadResult], Optional[Exception]]:
    try:
        return reader(path), None
    except Exception as e:
        return None, e


def _read_all(reader: Reader, paths: List[str], max_workers: int):
    if max_workers > 1 and len(paths) > 1:
        # map() yields in input order, whatever order reads finish in.
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(lambda p: _invoke(reader, p), paths))
    return [_invoke(reader, p) for p in paths]


def _error_kind(value) -> ErrorKind:
    try:
        return ErrorKind(value)
    except ValueError:
        return ErrorKind.READ_ERROR


def _error_block(rel: str, error: PromptError) -> str:
    detail = f" - {error.message}" if error.message else ""
    return f"File: {rel}\n[Error: {error.error}{detail}]"


def _fence(content: str) -> str:
    longest = max((len(run) for run in _BACKTICK_RUN.findall(content)), default=0)
    return "`" * max(3, longest + 1)


def _content_block(rel: str, content: str) -> str:
    body = content if content.endswith("\n") else content + "\n"
    fence = _fence(content)
    return f"File: {rel}\n{fence}{_language(rel)}\n{body}{fence}"


def assemble_prompt(
    selected_paths: Iterable[str],
    instruction: Optional[str],
    base_directory: Optional[str],
    *,
    reader: Reader = read_file_content,
    count_tokens: Callable[[str], int] = Tokenizer.count,
    max_workers: int = 1,
) -> PromptArtifact:
    """Reads every selected file and builds the prompt artifact; reads use a thread pool when max_workers > 1."""
    paths = _validate_selection(selected_paths)
    if paths is None:
        logger.error("assemble_prompt: selected paths must be an iterable of strings")
        return PromptArtifact(
            formatted_prompt="",
            errors=(PromptError(path="N/A", error=ErrorKind.INTERNAL_ERROR, message=INVALID_SELECTION_MESSAGE),),
        )

    rel_paths = [relative_path(p, base_directory) for p in paths]
    file_map = generate_project_tree(rel_paths, root_name(base_directory)).rstrip("\n")

    errors: List[PromptError] = []
    details: List[FileDetail] = []
    blocks: List[str] = []

    for path, rel, (result, exc) in zip(paths, rel_paths, _read_all(reader, paths, max_workers)):
        if exc is not None:
            logger.error("Error invoking reader for %s: %s", path, exc)
            error = PromptError(path=rel, error=ErrorKind.INVOCATION_ERROR, message=str(exc))
        elif result is not None and result.error:
            message = result.message
            if not message and result.size is not None:
                message = f"Size: {result.size} bytes"
            error = PromptError(path=rel, error=_error_kind(result.error), message=message)
        elif result is not None and isinstance(result.content, str):
            blocks.append(_content_block(rel, result.content))
            details.append(FileDetail(path=rel, token_count=count_tokens(result.content)))
            continue
        else:
            error = PromptError(
                path=rel,
                error=ErrorKind.UNEXPECTED_RESPONSE,
                message="Invalid content received from file reader.",
            )

        logger.warning("Skipping file due to error: %s (%s)", rel, error.error)
        errors.append(error)
        blocks.append(_error_block(rel, error))
        details.append(FileDetail(path=rel, token_count=0))

    contents = "\n\n".join(blocks).rstrip("\n")
    contents_section = f"<file_contents>\n{contents}\n</file_contents>" if contents else "<file_contents>\n</file_contents>"

    text = (instruction or "").strip()
    if text:
        details.append(FileDetail(path=INSTRUCTION_MARKER, token_count=count_tokens(text)))
        instruction_section = f"<user_instructions>\n{text}\n</user_instructions>"
    else:
        instruction_section = f"<user_instructions>\n{NO_INSTRUCTION_PLACEHOLDER}\n</user_instructions>"

    formatted_prompt = "\n\n".join(
        [f"<file_map>\n{file_map}\n</file_map>", contents_section, instruction_section]
    )
    return PromptArtifact(formatted_prompt=formatted_prompt, errors=tuple(errors), file_details=tuple(details))
