"""
Exceptions raised by openrepo.

Data conditions (unreadable files, malformed patterns) never raise; they are
recorded in the prompt artifact or dropped. These exceptions signal caller
mistakes or unusable inputs.
"""


class OpenRepoError(Exception):
    """Base exception for openrepo errors."""


class PathValidationError(OpenRepoError, ValueError):
    """Raised when the ignore engine is given a path it cannot evaluate."""


class InvalidRootError(OpenRepoError):
    """Raised when the directory to scan is missing or not a directory."""


class OutputError(OpenRepoError):
    """Raised when the generated prompt cannot be written."""
