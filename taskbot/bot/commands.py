"""
Taskbot — Command interpreter.

Maps slash-commands (case-insensitive, optional @BotName suffix) to task
actions. `/create` and `/edit` carry pipe-delimited payloads; malformed
payloads are answered with the validation message and change nothing.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from taskbot.bot.actions import BotContext, TaskActions
from taskbot.core import presenter
from taskbot.core.payload_parser import (
    TaskValidationError,
    parse_create_payload,
    split_command,
)

logger = logging.getLogger(__name__)

CommandHandler = Callable[[BotContext, str], Awaitable[None]]


class CommandInterpreter:
    def __init__(self, actions: TaskActions) -> None:
        self._actions = actions
        self._handlers: dict[str, CommandHandler] = {
            "start": self._start,
            "help": self._help,
            "tasks": self._tasks,
            "create": self._create,
            "edit": self._edit,
        }

    async def dispatch(self, ctx: BotContext, text: str) -> None:
        command, args = split_command(text)
        handler = self._handlers.get(command)
        if handler is None:
            logger.debug("Unknown command %r from account #%d", command, ctx.account.id)
            await self._actions.reply(ctx, presenter.UNKNOWN_COMMAND_TEXT)
            return
        await handler(ctx, args)

    async def _start(self, ctx: BotContext, args: str) -> None:
        await self._actions.show_welcome(ctx)

    async def _help(self, ctx: BotContext, args: str) -> None:
        await self._actions.show_help(ctx)

    async def _tasks(self, ctx: BotContext, args: str) -> None:
        await self._actions.show_task_list(ctx)

    async def _create(self, ctx: BotContext, args: str) -> None:
        if not args:
            await self._actions.show_create_choice(ctx)
            return
        try:
            fields = parse_create_payload(args)
        except TaskValidationError as exc:
            await self._actions.reply(ctx, f"⚠️ {exc}")
            return
        await self._actions.create_task(ctx, fields, raw=args)

    async def _edit(self, ctx: BotContext, args: str) -> None:
        if not args:
            await self._actions.reply(ctx, presenter.EDIT_USAGE_TEXT)
            return

        raw_id, *rest = args.split(maxsplit=1)
        payload = rest[0].strip() if rest else ""
        if not payload:
            await self._actions.show_edit_instructions(ctx, raw_id)
            return
        await self._actions.edit_task(ctx, raw_id, payload)
