"""
Taskbot — Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (one level up from taskbot/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str
    TELEGRAM_WEBHOOK_URL: str = ""

    # SQLite + attachment blobs
    DATABASE_PATH: str = "data/taskbot.db"
    STORAGE_PATH: str = "data/task_files"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Conversation mode store: "memory" | "sqlite"
    MODE_STORE: str = "memory"
    CONVERSATION_MODE_TTL_SECONDS: int = 3600

    # Outbound Bot API calls
    SEND_TIMEOUT_SECONDS: float = 10.0

    # HTTP server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    @field_validator("MAX_UPLOAD_BYTES", "CONVERSATION_MODE_TTL_SECONDS", "PORT", mode="before")
    @classmethod
    def parse_int(cls, v: str | int) -> int:
        return int(v)

    @field_validator("SEND_TIMEOUT_SECONDS", mode="before")
    @classmethod
    def parse_timeout(cls, v: str | float) -> float:
        return float(v)

    @field_validator("MODE_STORE", "LOG_LEVEL", mode="before")
    @classmethod
    def normalize_choice(cls, v: str) -> str:
        return v.strip()


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    token = os.getenv("TELEGRAM_BOT_TOKEN", "")

    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        TELEGRAM_BOT_TOKEN=token,
        TELEGRAM_WEBHOOK_URL=os.getenv("TELEGRAM_WEBHOOK_URL", ""),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/taskbot.db"),
        STORAGE_PATH=os.getenv("STORAGE_PATH", "data/task_files"),
        MAX_UPLOAD_BYTES=os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)),
        MODE_STORE=os.getenv("MODE_STORE", "memory"),
        CONVERSATION_MODE_TTL_SECONDS=os.getenv("CONVERSATION_MODE_TTL_SECONDS", "3600"),
        SEND_TIMEOUT_SECONDS=os.getenv("SEND_TIMEOUT_SECONDS", "10"),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=os.getenv("PORT", "8000"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton — imported by all other modules as:
#   from taskbot.config import settings
settings = _load_settings()
