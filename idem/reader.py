"""
Source file reading with extension gating.
"""
import os

from .config import SOURCE_EXTENSION


class SourceFileError(Exception):
    """A source file that cannot be used: wrong extension or unreadable."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(message)


def read_source(path: str, extension: str = SOURCE_EXTENSION) -> str:
    """Return the text of an Idem source file."""
    if not path.endswith(extension):
        raise SourceFileError(path, f"{path}'s file extension is not `{extension}`")
    if not os.path.exists(path):
        raise SourceFileError(path, f"file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SourceFileError(path, f"cannot read {path}: {e}") from e
