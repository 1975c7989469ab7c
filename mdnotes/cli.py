"""Markdown notes command-line interface.

Usage:
    notes add <title>            open $EDITOR (or vim) to write the body
    notes list                   list saved notes (id, title, tags)
    notes view <id>              print a note
    notes search <query>         search title/body/tags (case-insensitive)
    notes tag <id> <tag> [...]   add one or more tags to a note
    notes export <id> <file>     export a note to a simple HTML file
    notes help                   show usage
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from .config import Settings
from .editor import capture_text
from .errors import InvalidArgument, NoteError
from .export import export_note
from .storage import NoteStorage

logger = logging.getLogger("mdnotes.cli")

PROG = "notes"
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_id(raw: str) -> int:
    """Parse a positive note id from user input."""
    try:
        note_id = int(raw)
    except ValueError as exc:
        raise InvalidArgument(f"invalid note id: {raw!r}") from exc
    if note_id <= 0:
        raise InvalidArgument(f"note id must be positive: {note_id}")
    return note_id


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_add(args: argparse.Namespace, storage: NoteStorage, settings: Settings) -> None:
    title = " ".join(args.title).strip()
    if not title:
        raise InvalidArgument("title must not be empty")
    body = capture_text("", editor=settings.editor)
    note = storage.create(title, body)
    print(f"Saved note #{note.id}")


def cmd_list(args: argparse.Namespace, storage: NoteStorage, settings: Settings) -> None:
    notes = storage.load_all()
    if not notes:
        print("No notes.")
        return
    print("ID  Title - tags")
    for note in notes:
        print(f"{note.id:3d}  {note.title} - {','.join(note.tags)}")


def cmd_view(args: argparse.Namespace, storage: NoteStorage, settings: Settings) -> None:
    note = storage.load_one(parse_id(args.id))
    print(f"# {note.title}\n\n{note.body}")


def cmd_search(args: argparse.Namespace, storage: NoteStorage, settings: Settings) -> None:
    matches = storage.search(" ".join(args.query))
    if not matches:
        print("No matches.")
        return
    for note in matches:
        print(f"{note.id:3d}  {note.title}")


def cmd_tag(args: argparse.Namespace, storage: NoteStorage, settings: Settings) -> None:
    note_id = parse_id(args.id)
    storage.add_tags(storage.load_one(note_id), args.tags)
    print(f"Updated tags for #{note_id}")


def cmd_export(args: argparse.Namespace, storage: NoteStorage, settings: Settings) -> None:
    note_id = parse_id(args.id)
    note = storage.load_one(note_id)
    export_note(note, Path(args.file))
    print(f"Exported note #{note_id} to {args.file}")


COMMANDS = {
    "add": cmd_add,
    "list": cmd_list,
    "view": cmd_view,
    "search": cmd_search,
    "tag": cmd_tag,
    "export": cmd_export,
}


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Markdown notes CLI",
        add_help=False,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    add_parser = subparsers.add_parser("add", help="Add a note (opens $EDITOR or vim)")
    add_parser.add_argument("title", nargs="+", help="Note title")

    subparsers.add_parser("list", help="List notes")

    view_parser = subparsers.add_parser("view", help="View note")
    view_parser.add_argument("id", help="Note id")

    search_parser = subparsers.add_parser("search", help="Search title/body/tags")
    search_parser.add_argument("query", nargs="+", help="Search text")

    tag_parser = subparsers.add_parser("tag", help="Add tags to a note")
    tag_parser.add_argument("id", help="Note id")
    tag_parser.add_argument("tags", nargs="+", help="Tags to add")

    export_parser = subparsers.add_parser("export", help="Export to simple HTML")
    export_parser.add_argument("id", help="Note id")
    export_parser.add_argument("file", help="Output HTML file")

    subparsers.add_parser("help", help="Show this help")
    return parser


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()

    if not argv or argv[0] not in COMMANDS:
        parser.print_help()
        return 0

    if settings is None:
        try:
            settings = Settings()
        except ValidationError as exc:
            print(f"Error: invalid configuration: {exc}", file=sys.stderr)
            return 1
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    args = parser.parse_args(argv)
    storage = NoteStorage(settings.notes_dir)
    try:
        COMMANDS[args.command](args, storage, settings)
    except NoteError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
