"""Error taxonomy shared by the store, the CLI and the MCP server."""

from __future__ import annotations

from pathlib import Path


class NoteError(Exception):
    """Base class for every error surfaced to a caller."""


class StorageUnavailable(NoteError):
    """The notes directory or a record file could not be read or written."""


class NotFound(NoteError):
    """No record exists for the requested id."""

    def __init__(self, note_id: int) -> None:
        super().__init__(f"note #{note_id} not found")
        self.note_id = note_id


class CorruptRecord(NoteError):
    """A record exists but could not be parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"corrupt note record {path}: {reason}")
        self.path = path


class InvalidArgument(NoteError):
    """Malformed user input, e.g. a non-numeric id."""


class EditorFailed(NoteError):
    """The external editor could not be run or its output read back."""
