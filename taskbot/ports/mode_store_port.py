"""Conversation mode port — short-lived per-chat state with expiry.

A chat has at most one pending mode. Setting a mode overwrites the previous
one; consuming it returns the mode and clears it in the same step.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol


class ConversationMode(str, Enum):
    NONE = "none"
    AWAITING_SIMPLE_TITLE = "awaiting_simple_title"


class ModeStore(Protocol):
    """Abstract key-value store: chat id -> ConversationMode, with TTL."""

    def set_mode(self, chat_id: int, mode: ConversationMode) -> None: ...

    def get_mode(self, chat_id: int) -> ConversationMode: ...

    def consume_mode(
        self, chat_id: int, expected: ConversationMode
    ) -> bool: ...

    def clear_mode(self, chat_id: int) -> None: ...
