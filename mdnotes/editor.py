"""Launch the user's editor to capture note content."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from pathlib import Path

from .config import DEFAULT_EDITOR
from .errors import EditorFailed

logger = logging.getLogger("mdnotes.editor")


def capture_text(seed: str = "", editor: str = DEFAULT_EDITOR) -> str:
    """Open *editor* on a temp file pre-filled with *seed* and return the result.

    Blocks until the editor exits. The temp file is removed on every path.
    """
    command = shlex.split(editor) or [DEFAULT_EDITOR]
    try:
        fd, tmp_path = tempfile.mkstemp(prefix="note-", suffix=".md")
    except OSError as exc:
        raise EditorFailed(f"cannot create temp file: {exc}") from exc

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(seed)

        logger.info("Launching editor: %s %s", command[0], tmp_path)
        try:
            subprocess.run([*command, tmp_path], check=True)
        except FileNotFoundError as exc:
            raise EditorFailed(f"editor not found: {command[0]}") from exc
        except subprocess.CalledProcessError as exc:
            raise EditorFailed(
                f"editor {command[0]} exited with status {exc.returncode}"
            ) from exc
        except OSError as exc:
            raise EditorFailed(f"cannot run editor {command[0]}: {exc}") from exc

        # Non-UTF-8 bytes decode to U+FFFD.
        return Path(tmp_path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise EditorFailed(f"cannot use temp file {tmp_path}: {exc}") from exc
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
