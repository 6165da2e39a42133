# src/openrepo/models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from openrepo.config import INSTRUCTION_MARKER


class ErrorKind(str, Enum):
    """Why a selected file contributed no content to the prompt."""
    FILE_TOO_LARGE = "FileTooLarge"
    NOT_A_FILE = "NotAFile"
    NOT_FOUND = "NotFound"
    PERMISSION_DENIED = "PermissionDenied"
    READ_ERROR = "ReadError"
    BINARY_FILE = "BinaryFile"
    UNEXPECTED_RESPONSE = "UnexpectedResponse"
    INVOCATION_ERROR = "InvocationError"
    INTERNAL_ERROR = "InternalError"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FileEntry:
    """A file found by the directory scan. size is None if stat failed."""
    path: str
    size: Optional[int]


@dataclass(frozen=True)
class FileReadResult:
    path: str
    content: Optional[str] = None
    error: Optional[ErrorKind] = None
    message: Optional[str] = None
    size: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None and isinstance(self.content, str)


@dataclass(frozen=True)
class FileDetail:
    path: str
    token_count: int


@dataclass(frozen=True)
class PromptError:
    path: str
    error: ErrorKind
    message: Optional[str] = None


@dataclass(frozen=True)
class PromptArtifact:
    """Immutable result of one prompt assembly."""
    formatted_prompt: str
    errors: Tuple[PromptError, ...] = field(default_factory=tuple)
    file_details: Tuple[FileDetail, ...] = field(default_factory=tuple)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def total_tokens(self) -> int:
        """Token total over files only; the instruction entry is excluded."""
        return sum(d.token_count for d in self.file_details if d.path != INSTRUCTION_MARKER)
