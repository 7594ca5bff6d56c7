"""Tests for taskbot.adapters.mode_store — in-memory and SQLite conversation modes."""

import sqlite3

import pytest
from unittest.mock import patch

from taskbot.adapters.mode_store import InMemoryModeStore, SQLiteModeStore, create_mode_store
from taskbot.ports.mode_store_port import ConversationMode

AWAITING = ConversationMode.AWAITING_SIMPLE_TITLE


@pytest.fixture(params=["memory", "sqlite"])
def store(request, clock, tmp_db_path):
    if request.param == "memory":
        return InMemoryModeStore(ttl_seconds=3600, clock=clock)
    return SQLiteModeStore(db_path=tmp_db_path, ttl_seconds=3600, clock=clock)


class TestModeStore:
    def test_default_is_none(self, store):
        assert store.get_mode(1) is ConversationMode.NONE

    def test_set_and_get(self, store):
        store.set_mode(1, AWAITING)
        assert store.get_mode(1) is AWAITING
        assert store.get_mode(2) is ConversationMode.NONE

    def test_consume_is_exactly_once(self, store):
        store.set_mode(1, AWAITING)
        assert store.consume_mode(1, AWAITING) is True
        assert store.consume_mode(1, AWAITING) is False
        assert store.get_mode(1) is ConversationMode.NONE

    def test_expires_after_ttl(self, store, clock):
        store.set_mode(1, AWAITING)
        clock.advance(3599)
        assert store.get_mode(1) is AWAITING
        clock.advance(1)
        assert store.get_mode(1) is ConversationMode.NONE
        assert store.consume_mode(1, AWAITING) is False

    def test_setting_again_refreshes_expiry(self, store, clock):
        store.set_mode(1, AWAITING)
        clock.advance(3000)
        store.set_mode(1, AWAITING)
        clock.advance(3000)
        assert store.get_mode(1) is AWAITING

    def test_set_none_clears(self, store):
        store.set_mode(1, AWAITING)
        store.set_mode(1, ConversationMode.NONE)
        assert store.get_mode(1) is ConversationMode.NONE

    def test_clear(self, store):
        store.set_mode(1, AWAITING)
        store.clear_mode(1)
        assert store.consume_mode(1, AWAITING) is False


class TestPruning:
    def test_memory_drops_expired_chats_on_set(self, clock):
        store = InMemoryModeStore(ttl_seconds=3600, clock=clock)
        for chat_id in range(1, 51):
            store.set_mode(chat_id, AWAITING)
        clock.advance(3600)

        store.set_mode(999, AWAITING)

        assert list(store._modes) == [999]

    def test_sqlite_drops_expired_chats_on_set(self, clock, tmp_db_path):
        store = SQLiteModeStore(db_path=tmp_db_path, ttl_seconds=3600, clock=clock)
        for chat_id in range(1, 51):
            store.set_mode(chat_id, AWAITING)
        clock.advance(3600)

        store.set_mode(999, AWAITING)

        conn = sqlite3.connect(tmp_db_path)
        try:
            rows = conn.execute("SELECT chat_id FROM conversation_modes").fetchall()
        finally:
            conn.close()
        assert rows == [(999,)]

    def test_live_entries_survive(self, clock):
        store = InMemoryModeStore(ttl_seconds=3600, clock=clock)
        store.set_mode(1, AWAITING)
        clock.advance(1800)
        store.set_mode(2, AWAITING)
        assert store.get_mode(1) is AWAITING


class TestCreateModeStore:
    def test_memory(self):
        with patch("taskbot.config.settings.MODE_STORE", "memory"):
            assert isinstance(create_mode_store(), InMemoryModeStore)

    def test_sqlite(self, tmp_db_path):
        with patch("taskbot.config.settings.MODE_STORE", "sqlite"), \
             patch("taskbot.config.settings.DATABASE_PATH", tmp_db_path):
            assert isinstance(create_mode_store(), SQLiteModeStore)

    def test_unknown(self):
        with patch("taskbot.config.settings.MODE_STORE", "redis"):
            with pytest.raises(ValueError):
                create_mode_store()
