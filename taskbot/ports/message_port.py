"""Message port — abstract interface for talking back to a chat.

Bot handlers depend on this protocol, never on telegram.Bot directly.
"""

from __future__ import annotations

from typing import Any, Protocol


class MessageSender(Protocol):
    """Abstract outbound messaging interface used by the bot handlers."""

    async def send_message(
        self, chat_id: int, text: str, reply_markup: Any | None = None
    ) -> Any | None: ...

    async def answer_callback(self, callback_id: str) -> None: ...
