"""
Taskbot — Inbound webhook update models.

Only the parts of a Telegram update the router reads. Unknown keys are
ignored; an update carrying neither `message` nor `callback_query` parses
fine and is simply skipped by the router.

JSON examples:
{
    "update_id": 1,
    "message": {
        "message_id": 10,
        "chat": {"id": 555, "type": "private"},
        "from": {"id": 555, "first_name": "Ann", "language_code": "en"},
        "text": "/tasks"
    }
}
{
    "update_id": 2,
    "callback_query": {
        "id": "abc",
        "data": "task_view:7",
        "from": {"id": 555, "first_name": "Ann"},
        "message": {"message_id": 11, "chat": {"id": 555, "type": "private"}}
    }
}
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

GROUP_CHAT_TYPES = ("group", "supergroup")


class Sender(BaseModel):
    id: int
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    is_bot: bool = False
    language_code: str | None = None


class Chat(BaseModel):
    id: int
    type: str = "private"
    title: str | None = None

    @property
    def is_group(self) -> bool:
        return self.type in GROUP_CHAT_TYPES


class IncomingMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: int | None = None
    chat: Chat
    sender: Sender | None = Field(default=None, alias="from")
    text: str | None = None


class CallbackMessage(BaseModel):
    message_id: int | None = None
    chat: Chat


class CallbackPress(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    data: str | None = None
    sender: Sender = Field(alias="from")
    message: CallbackMessage | None = None

    @property
    def chat_id(self) -> int:
        # Without the originating message, a private chat id equals the user id.
        if self.message is not None:
            return self.message.chat.id
        return self.sender.id


class IncomingUpdate(BaseModel):
    update_id: int | None = None
    message: IncomingMessage | None = None
    callback_query: CallbackPress | None = None
