"""Exception hierarchy for reconfig."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class ReconfigError(Exception):
    """Base class for every error raised by reconfig."""


class DuplicateRegistration(ReconfigError):
    """A source was registered twice."""


class NotRegistered(ReconfigError, KeyError):
    """A reload was requested for a source that was never registered."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class MissingEnvironment(ReconfigError):
    """A file-derived source does not define a current or required environment.

    Attributes:
        environment: The environment key that was looked up.
        source_id: Path of the offending source.
    """

    def __init__(self, message: str, environment: str, source_id: Optional[str]):
        super().__init__(message)
        self.environment = environment
        self.source_id = source_id


class DisallowedEnvironment(ReconfigError):
    """An environment assertion failed."""


class SourceError(ReconfigError):
    """Base class for failures while loading a source.

    Attributes:
        path: Path of the source being loaded.
    """

    def __init__(self, message: str, path: Union[str, Path, None] = None):
        super().__init__(message)
        self.path = str(path) if path is not None else None


class SourceNotFound(SourceError, FileNotFoundError):
    """The source file does not exist."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class EmptyContent(SourceError):
    """The source parsed to nothing (empty file, null or false)."""


class MalformedContent(SourceError, ValueError):
    """The source could not be parsed, or is not a mapping."""


class TreeLocked(ReconfigError):
    """A write was attempted on a locked configuration tree."""


__all__ = [
    "ReconfigError",
    "DuplicateRegistration",
    "NotRegistered",
    "MissingEnvironment",
    "DisallowedEnvironment",
    "SourceError",
    "SourceNotFound",
    "EmptyContent",
    "MalformedContent",
    "TreeLocked",
]
