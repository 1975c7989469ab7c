"""Settings loaded from environment variables and an optional .env file."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_EDITOR = "vim"


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "NOTES_",
        "extra": "ignore",
        "env_ignore_empty": True,
        "populate_by_name": True,
    }

    # Storage
    notes_dir: Path = Field(
        default=Path("notes_db"),
        validation_alias=AliasChoices("NOTES_DIR"),
    )

    # Editor used by `add`
    editor: str = Field(
        default=DEFAULT_EDITOR,
        validation_alias=AliasChoices("NOTES_EDITOR", "EDITOR"),
    )

    # Logging
    log_level: str = "WARNING"

    # MCP server
    mcp_transport: str = "stdio"
    mcp_host: str = "127.0.0.1"
    mcp_port: int = 8001

    @field_validator("editor")
    @classmethod
    def _fallback_editor(cls, value: str) -> str:
        return value.strip() or DEFAULT_EDITOR

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value!r}")
        return level
