"""
Taskbot — Update router.

Entry point for every webhook update. Classifies it as a text message or
a button press, upserts the acting account (and the group, for group
chats), then hands off to the command or callback interpreter.

Handling is best-effort: any exception raised while processing a single
update is logged with the full payload and swallowed, so Telegram never
re-delivers an update because of our failure. Every button press is
acknowledged exactly once, whatever happened while handling it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from taskbot.bot.actions import BotContext, TaskActions
from taskbot.bot.callbacks import CallbackInterpreter
from taskbot.bot.commands import CommandInterpreter
from taskbot.bot.updates import CallbackPress, IncomingMessage, IncomingUpdate, Sender
from taskbot.core.payload_parser import is_command
from taskbot.ports.mode_store_port import ConversationMode

if TYPE_CHECKING:
    from taskbot.core.task_service import TaskService
    from taskbot.data.db import AccountDB, GroupDB
    from taskbot.data.models import Account
    from taskbot.ports.message_port import MessageSender
    from taskbot.ports.mode_store_port import ModeStore

logger = logging.getLogger(__name__)


class UpdateRouter:
    def __init__(
        self,
        accounts: AccountDB,
        groups: GroupDB,
        tasks: TaskService,
        modes: ModeStore,
        sender: MessageSender,
    ) -> None:
        self._accounts = accounts
        self._groups = groups
        self._modes = modes
        self._sender = sender
        self._actions = TaskActions(sender, tasks, modes)
        self._commands = CommandInterpreter(self._actions)
        self._callbacks = CallbackInterpreter(self._actions)

    async def process_update(self, payload: dict[str, Any]) -> None:
        """Handle one raw webhook update. Never raises."""
        try:
            update = IncomingUpdate.model_validate(payload)
        except ValidationError as exc:
            logger.warning(
                "Ignoring malformed update %s: %s", payload.get("update_id"), exc,
            )
            return

        try:
            if update.message is not None:
                await self._process_message(update.message)
            elif update.callback_query is not None:
                await self._process_callback(update.callback_query)
            else:
                logger.debug("Ignoring update %s of unsupported type", update.update_id)
        except Exception:
            logger.exception("Error processing Telegram update: %s", payload)

    def _save_account(self, sender: Sender) -> Account:
        return self._accounts.upsert_account(
            telegram_id=sender.id,
            username=sender.username,
            first_name=sender.first_name,
            last_name=sender.last_name,
            is_bot=sender.is_bot,
            language_code=sender.language_code,
        )

    async def _process_message(self, message: IncomingMessage) -> None:
        if message.sender is None:
            logger.debug("Ignoring message without sender in chat %d", message.chat.id)
            return

        account = self._save_account(message.sender)
        chat = message.chat
        if chat.is_group:
            group = self._groups.upsert_group(chat.id, chat.title or "Group", chat.type)
            self._groups.ensure_member(group.id, account.id)

        ctx = BotContext(chat_id=chat.id, account=account)
        text = message.text or ""

        if (
            text.strip()
            and not is_command(text)
            and self._modes.consume_mode(chat.id, ConversationMode.AWAITING_SIMPLE_TITLE)
        ):
            await self._actions.create_from_title(ctx, text)
            return

        if is_command(text):
            await self._commands.dispatch(ctx, text)

    async def _process_callback(self, press: CallbackPress) -> None:
        try:
            account = self._save_account(press.sender)
            ctx = BotContext(chat_id=press.chat_id, account=account)
            await self._callbacks.dispatch(ctx, press.data)
        finally:
            await self._sender.answer_callback(press.id)
