"""Conversation mode store adapters — implement ModeStore.

InMemoryModeStore serves a single-process deployment. SQLiteModeStore keeps
the modes in the shared database so several workers see the same state.
Both take a clock callable so tests can move time forward.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Callable

from taskbot.ports.mode_store_port import ConversationMode

logger = logging.getLogger(__name__)


class InMemoryModeStore:
    """Process-local implementation of ModeStore."""

    def __init__(
        self,
        ttl_seconds: int = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._modes: dict[int, tuple[ConversationMode, float]] = {}

    def _live_entry(self, chat_id: int) -> ConversationMode:
        # Caller holds the lock.
        entry = self._modes.get(chat_id)
        if entry is None:
            return ConversationMode.NONE
        mode, expires_at = entry
        if self._clock() >= expires_at:
            del self._modes[chat_id]
            return ConversationMode.NONE
        return mode

    def _prune(self, now: float) -> None:
        # Caller holds the lock.
        expired = [chat for chat, (_, expires_at) in self._modes.items() if now >= expires_at]
        for chat in expired:
            del self._modes[chat]

    def set_mode(self, chat_id: int, mode: ConversationMode) -> None:
        with self._lock:
            now = self._clock()
            self._prune(now)
            if mode is ConversationMode.NONE:
                self._modes.pop(chat_id, None)
            else:
                self._modes[chat_id] = (mode, now + self._ttl)
        logger.debug("Chat %d mode set to %s", chat_id, mode.value)

    def get_mode(self, chat_id: int) -> ConversationMode:
        with self._lock:
            return self._live_entry(chat_id)

    def consume_mode(self, chat_id: int, expected: ConversationMode) -> bool:
        """Clear the chat's mode if it is `expected`. True only for the caller that cleared it."""
        with self._lock:
            if self._live_entry(chat_id) is not expected:
                return False
            del self._modes[chat_id]
        logger.debug("Chat %d mode %s consumed", chat_id, expected.value)
        return True

    def clear_mode(self, chat_id: int) -> None:
        with self._lock:
            self._modes.pop(chat_id, None)


class SQLiteModeStore:
    """SQLite-backed implementation of ModeStore."""

    def __init__(
        self,
        db_path: str | None = None,
        ttl_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if db_path is None:
            from taskbot.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        self._ttl = ttl_seconds
        self._clock = clock
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        conn = self._connect()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS conversation_modes (
                    chat_id     INTEGER PRIMARY KEY,
                    mode        TEXT NOT NULL,
                    expires_at  REAL NOT NULL
                )
            """)
        finally:
            conn.close()
        logger.debug("Conversation modes table initialized at %s", self._db_path)

    def set_mode(self, chat_id: int, mode: ConversationMode) -> None:
        now = self._clock()
        conn = self._connect()
        try:
            conn.execute("DELETE FROM conversation_modes WHERE expires_at <= ?", (now,))
            if mode is ConversationMode.NONE:
                conn.execute("DELETE FROM conversation_modes WHERE chat_id = ?", (chat_id,))
            else:
                conn.execute(
                    "INSERT OR REPLACE INTO conversation_modes (chat_id, mode, expires_at) "
                    "VALUES (?, ?, ?)",
                    (chat_id, mode.value, now + self._ttl),
                )
        finally:
            conn.close()
        logger.debug("Chat %d mode set to %s", chat_id, mode.value)

    def get_mode(self, chat_id: int) -> ConversationMode:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT mode FROM conversation_modes WHERE chat_id = ? AND expires_at > ?",
                (chat_id, self._clock()),
            ).fetchone()
        finally:
            conn.close()
        if row is None:
            return ConversationMode.NONE
        return ConversationMode(row["mode"])

    def consume_mode(self, chat_id: int, expected: ConversationMode) -> bool:
        """Delete the row only if it still holds `expected` and has not expired."""
        conn = self._connect()
        try:
            cursor = conn.execute(
                "DELETE FROM conversation_modes "
                "WHERE chat_id = ? AND mode = ? AND expires_at > ?",
                (chat_id, expected.value, self._clock()),
            )
            consumed = cursor.rowcount > 0
        finally:
            conn.close()
        if consumed:
            logger.debug("Chat %d mode %s consumed", chat_id, expected.value)
        return consumed

    def clear_mode(self, chat_id: int) -> None:
        conn = self._connect()
        try:
            conn.execute("DELETE FROM conversation_modes WHERE chat_id = ?", (chat_id,))
        finally:
            conn.close()


def create_mode_store() -> InMemoryModeStore | SQLiteModeStore:
    """Return the mode store matching the MODE_STORE setting."""
    from taskbot.config import settings

    kind = settings.MODE_STORE.lower()
    ttl = settings.CONVERSATION_MODE_TTL_SECONDS

    if kind == "memory":
        return InMemoryModeStore(ttl_seconds=ttl)

    if kind == "sqlite":
        return SQLiteModeStore(ttl_seconds=ttl)

    raise ValueError(f"Unknown MODE_STORE: {kind!r}")
