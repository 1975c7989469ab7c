"""
mdnotes MCP Server

Exposes tools for adding, listing, searching and tagging notes in the local
notes directory via the Model Context Protocol.  Uses stdio transport unless
NOTES_MCP_TRANSPORT says otherwise.
"""

import logging
from datetime import UTC, datetime

from mcp.server.fastmcp import FastMCP

from .config import Settings
from .errors import NoteError
from .storage import NoteStorage

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger("mdnotes.server")

# ---------------------------------------------------------------------------
# MCP server + storage
# ---------------------------------------------------------------------------
settings = Settings()
mcp = FastMCP("mdnotes", host=settings.mcp_host, port=settings.mcp_port)
storage = NoteStorage(settings.notes_dir)

# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool()
def add_note(title: str, body: str = "", tags: list[str] | None = None) -> dict:
    """Save a new note with a title, markdown body, and optional tags.

    Use this tool when the user wants to create, store, or remember a piece
    of information for later retrieval.

    Args:
        title: Short descriptive title for the note.
        body: The markdown body of the note.
        tags: Optional list of tags for categorisation.

    Returns:
        Dictionary with the assigned note_id and a confirmation message.
    """
    if not title.strip():
        return {"error": "title must not be empty"}
    try:
        note = storage.create(title.strip(), body, tags or [])
    except NoteError as exc:
        return {"error": str(exc)}
    logger.info("Tool add_note invoked: id=%d", note.id)
    return {
        "note_id": note.id,
        "message": f"Saved note #{note.id} '{note.title}'.",
    }


@mcp.tool()
def list_notes(tag: str | None = None) -> dict:
    """List stored notes, optionally filtered by tag.

    Args:
        tag: Optional tag to filter notes by (case-insensitive).

    Returns:
        Dictionary with the matching notes and their count.
    """
    try:
        notes = storage.load_all()
    except NoteError as exc:
        return {"error": str(exc)}
    if tag:
        wanted = tag.lower()
        notes = [n for n in notes if wanted in (t.lower() for t in n.tags)]
    logger.info("Tool list_notes invoked: tag=%s, found=%d", tag, len(notes))
    return {
        "count": len(notes),
        "notes": [n.model_dump(mode="json") for n in notes],
    }


@mcp.tool()
def get_note(note_id: int) -> dict:
    """Fetch a single note by its id.

    Args:
        note_id: The numeric id shown by list_notes.

    Returns:
        Dictionary with the note, or an error message.
    """
    try:
        note = storage.load_one(note_id)
    except NoteError as exc:
        return {"error": str(exc)}
    logger.info("Tool get_note invoked: id=%d", note_id)
    return {"note": note.model_dump(mode="json")}


@mcp.tool()
def search_notes(query: str) -> dict:
    """Search notes by keyword (substring match on title, body and tags).

    Args:
        query: The search string, matched case-insensitively.

    Returns:
        Dictionary with matching notes and their count.
    """
    try:
        results = storage.search(query)
    except NoteError as exc:
        return {"error": str(exc)}
    logger.info("Tool search_notes invoked: query='%s', found=%d", query, len(results))
    return {
        "count": len(results),
        "notes": [n.model_dump(mode="json") for n in results],
    }


@mcp.tool()
def tag_note(note_id: int, tags: list[str]) -> dict:
    """Add one or more tags to an existing note.

    Args:
        note_id: The numeric id of the note.
        tags: Tags to append; duplicates and blanks are ignored.

    Returns:
        Dictionary with the note's resulting tag list.
    """
    try:
        note = storage.add_tags(storage.load_one(note_id), tags)
    except NoteError as exc:
        return {"error": str(exc)}
    logger.info("Tool tag_note invoked: id=%d", note_id)
    return {"note_id": note.id, "tags": note.tags}


@mcp.tool()
def health_check() -> dict:
    """Check whether the notes server is healthy.

    Returns:
        Dictionary with server status, note count, and timestamp.
    """
    logger.info("Tool health_check invoked")
    try:
        total = storage.count
    except NoteError as exc:
        return {"status": "unhealthy", "error": str(exc)}
    return {
        "status": "healthy",
        "server": "mdnotes",
        "notes_dir": str(storage.root),
        "total_notes": total,
        "timestamp": datetime.now(UTC).isoformat(),
    }


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
def main() -> None:
    logger.info("Starting mdnotes MCP server (%s transport) ...", settings.mcp_transport)
    mcp.run(transport=settings.mcp_transport)


if __name__ == "__main__":
    main()
