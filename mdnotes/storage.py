"""Directory-backed storage layer: one JSON file per note."""

from __future__ import annotations

import logging
import os
import re
import tempfile
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from .errors import CorruptRecord, InvalidArgument, NotFound, StorageUnavailable
from .models import Note, merge_tags, next_id

logger = logging.getLogger("mdnotes.storage")

NOTE_SUFFIX = ".json"
ID_WIDTH = 4
NOTE_FILE_PATTERN = re.compile(r"^\d{4,}\.json$")
RECORD_MODE = 0o644

__all__ = ["NoteStorage", "ScanResult", "next_id"]


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


@dataclass
class ScanResult:
    """Outcome of reading one directory entry during a full scan."""

    path: Path
    note: Note | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.note is not None


class NoteStorage:
    """Manages note persistence in a directory of JSON records.

    Records are named by zero-padded id (``0007.json``).  Writes go through a
    temp file in the same directory followed by ``os.replace``, so readers
    never see a partially written record.  Concurrent ``create`` calls from
    separate processes can still compute the same id; there is no locking.
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, note_id: int) -> Path:
        """Return the record path for *note_id*."""
        return self._root / f"{note_id:0{ID_WIDTH}d}{NOTE_SUFFIX}"

    # ------------------------------------------------------------------
    # Directory
    # ------------------------------------------------------------------

    def ensure_ready(self) -> None:
        """Create the notes directory (and parents) if missing."""
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageUnavailable(
                f"cannot create notes directory {self._root}: {exc}"
            ) from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def scan(self) -> list[ScanResult]:
        """Read every note-shaped file in the directory.

        Per-file failures are recorded on the result instead of raised.
        """
        self.ensure_ready()
        try:
            entries = sorted(self._root.iterdir())
        except OSError as exc:
            raise StorageUnavailable(f"cannot list {self._root}: {exc}") from exc

        results: list[ScanResult] = []
        for entry in entries:
            if not NOTE_FILE_PATTERN.match(entry.name) or not entry.is_file():
                continue
            try:
                note = Note.model_validate_json(entry.read_bytes())
            except OSError as exc:
                results.append(ScanResult(entry, error=f"unreadable: {exc}"))
            except ValidationError as exc:
                results.append(
                    ScanResult(entry, error=f"unparseable: {exc.error_count()} errors")
                )
            else:
                results.append(ScanResult(entry, note=note))
        return results

    def load_all(self) -> list[Note]:
        """Return every parseable note, ordered by ascending id."""
        results = self.scan()
        notes = [r.note for r in results if r.ok]
        skipped = [r for r in results if not r.ok]
        for result in skipped:
            logger.debug("Skipping %s (%s)", result.path.name, result.error)
        logger.info(
            "Loaded %d notes from %s (%d skipped)", len(notes), self._root, len(skipped)
        )
        return sorted(notes, key=lambda n: n.id)

    def load_one(self, note_id: int) -> Note:
        """Load a single note by id."""
        path = self.path_for(note_id)
        try:
            raw = path.read_bytes()
        except FileNotFoundError as exc:
            raise NotFound(note_id) from exc
        except OSError as exc:
            raise StorageUnavailable(f"cannot read {path}: {exc}") from exc
        try:
            return Note.model_validate_json(raw)
        except ValidationError as exc:
            raise CorruptRecord(path, f"{exc.error_count()} validation errors") from exc

    def search(self, query: str) -> list[Note]:
        """Return notes whose title, body or tags contain *query* (case-insensitive)."""
        return [n for n in self.load_all() if n.matches(query)]

    @property
    def count(self) -> int:
        """Number of readable notes."""
        return len(self.load_all())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(self, note: Note) -> Path:
        """Atomically write *note*, replacing any record with the same id."""
        self.ensure_ready()
        target = self.path_for(note.id)
        try:
            payload = note.model_dump_json(indent=2)
        except PydanticSerializationError as exc:
            raise InvalidArgument(
                f"note #{note.id} contains text that cannot be stored as UTF-8"
            ) from exc

        try:
            fd, tmp_path = tempfile.mkstemp(
                prefix=".tmp_", suffix=NOTE_SUFFIX, dir=self._root
            )
        except OSError as exc:
            raise StorageUnavailable(f"cannot create temp file in {self._root}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                os.chmod(tmp_path, RECORD_MODE & ~_current_umask())
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, target)
        except OSError as exc:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageUnavailable(f"cannot write {target}: {exc}") from exc

        logger.info("Saved note %d to %s", note.id, target.name)
        return target

    def create(
        self, title: str, body: str = "", tags: Iterable[str] | None = None
    ) -> Note:
        """Assign the next id from a fresh snapshot and persist a new note."""
        note = Note(
            id=next_id(self.load_all()),
            title=title,
            body=body,
            tags=merge_tags([], tags or []),
            created=datetime.now(UTC),
        )
        self.save(note)
        return note

    def add_tags(self, note: Note, new_tags: Iterable[str]) -> Note:
        """Merge *new_tags* into *note* and persist the result."""
        updated = note.with_tags(new_tags)
        self.save(updated)
        logger.info("Tagged note %d: %s", updated.id, ",".join(updated.tags))
        return updated
