"""Error types raised by whiterose."""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class WhiteroseError(Exception):
    """Base class for errors surfaced to the user."""

    hint: Optional[str] = None


class PreconditionError(WhiteroseError):
    """The workspace is not ready for the requested command."""

    def __init__(self, message: str, *, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.hint = hint


class ParseError(WhiteroseError):
    """A report file is not valid structured data."""

    def __init__(self, path: Path | str, reason: str = "") -> None:
        message = f"Failed to parse SARIF report: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.path = str(path)


class FixApplyError(WhiteroseError):
    """Applying a fix failed; recoverable inside the interactive session."""


__all__ = ["WhiteroseError", "PreconditionError", "ParseError", "FixApplyError"]
