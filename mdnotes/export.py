"""Render a note as a minimal standalone HTML document."""

from __future__ import annotations

from pathlib import Path

from .errors import StorageUnavailable
from .models import Note

_ESCAPES = str.maketrans({"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;"})

HEADING_MARKER = "# "


def escape(text: str) -> str:
    return text.translate(_ESCAPES)


def render_body(body: str) -> list[str]:
    """Turn body lines into ``<h2>``/``<p>`` elements, dropping blank lines."""
    elements: list[str] = []
    for line in body.split("\n"):
        line = line.removesuffix("\r")
        if line.startswith(HEADING_MARKER):
            heading = line.removeprefix(HEADING_MARKER).strip()
            elements.append(f"<h2>{escape(heading)}</h2>")
        elif line.strip():
            elements.append(f"<p>{escape(line)}</p>")
    return elements


def render_html(note: Note) -> str:
    title = escape(note.title)
    lines = [
        "<!doctype html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{title}</title>",
        "</head>",
        "<body>",
        f"<h1>{title}</h1>",
        *render_body(note.body),
        "</body>",
        "</html>",
    ]
    return "\n".join(lines) + "\n"


def export_note(note: Note, path: Path) -> Path:
    """Write *note* as HTML to *path*."""
    path = Path(path)
    try:
        path.write_text(render_html(note), encoding="utf-8")
    except OSError as exc:
        raise StorageUnavailable(f"cannot write {path}: {exc}") from exc
    return path
