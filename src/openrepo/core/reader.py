# src/openrepo/core/reader.py
import logging
import os
import stat
from pathlib import Path

from openrepo.config import BINARY_SNIFF_BYTES, MAX_FILE_SIZE_BYTES
from openrepo.models import ErrorKind, FileReadResult

logger = logging.getLogger(__name__)


def _is_binary(data: bytes) -> bool:
    return b"\0" in data[:BINARY_SNIFF_BYTES]


def read_file_content(path, max_bytes: int = MAX_FILE_SIZE_BYTES) -> FileReadResult:
    """
    Read one file as text. Never raises for I/O problems; the outcome is
    either ``content`` or an ``error`` kind with an optional message.

    Files over max_bytes are not read. Files with a NUL byte near the start
    are treated as binary and rejected; other bytes decode as UTF-8 with
    replacement characters.
    """
    path = os.fspath(path)
    try:
        st = os.stat(path)
        if st.st_size > max_bytes:
            logger.warning("File too large: %s (%d bytes)", path, st.st_size)
            return FileReadResult(path=path, error=ErrorKind.FILE_TOO_LARGE, size=st.st_size)
        if not stat.S_ISREG(st.st_mode):
            logger.warning("Not a file: %s", path)
            return FileReadResult(path=path, error=ErrorKind.NOT_A_FILE)

        raw = Path(path).read_bytes()
    except FileNotFoundError as e:
        return FileReadResult(path=path, error=ErrorKind.NOT_FOUND, message=str(e))
    except PermissionError as e:
        return FileReadResult(path=path, error=ErrorKind.PERMISSION_DENIED, message=str(e))
    except OSError as e:
        logger.warning("Error reading file %s: %s", path, e)
        return FileReadResult(path=path, error=ErrorKind.READ_ERROR, message=str(e))

    if _is_binary(raw):
        return FileReadResult(
            path=path,
            error=ErrorKind.BINARY_FILE,
            message="Binary content is not included",
            size=len(raw),
        )

    logger.debug("Read file: %s", path)
    return FileReadResult(path=path, content=raw.decode("utf-8", errors="replace"))
