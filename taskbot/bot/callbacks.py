"""
Taskbot — Callback interpreter.

Inline-button payloads look like "task_status:42:completed": an action tag
followed by positional args. Unknown tags and missing args are silent
no-ops; the router acknowledges the press either way.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from taskbot.bot.actions import BotContext, TaskActions
from taskbot.core import callback_data
from taskbot.core.callback_data import CallbackAction

logger = logging.getLogger(__name__)

CallbackHandler = Callable[[BotContext, list[str]], Awaitable[None]]


def _arg(args: list[str], index: int) -> str | None:
    if index < len(args) and args[index]:
        return args[index]
    return None


class CallbackInterpreter:
    def __init__(self, actions: TaskActions) -> None:
        self._actions = actions
        self._handlers: dict[CallbackAction, CallbackHandler] = {
            CallbackAction.TASK_LIST: self._task_list,
            CallbackAction.TASK_CREATE: self._task_create,
            CallbackAction.TASK_CREATE_SIMPLE: self._task_create_simple,
            CallbackAction.TASK_CREATE_ADVANCED: self._task_create_advanced,
            CallbackAction.TASK_VIEW: self._task_view,
            CallbackAction.TASK_EDIT: self._task_edit,
            CallbackAction.TASK_DELETE: self._task_delete,
            CallbackAction.TASK_STATUS: self._task_status,
            CallbackAction.HELP: self._help,
        }

    async def dispatch(self, ctx: BotContext, data: str | None) -> None:
        action, args = callback_data.parse(data or "")
        handler = self._handlers.get(action) if action is not None else None
        if handler is None:
            logger.debug("Ignoring callback payload %r", data)
            return
        await handler(ctx, args)

    async def _task_list(self, ctx: BotContext, args: list[str]) -> None:
        await self._actions.show_task_list(ctx)

    async def _task_create(self, ctx: BotContext, args: list[str]) -> None:
        await self._actions.show_create_choice(ctx)

    async def _task_create_simple(self, ctx: BotContext, args: list[str]) -> None:
        await self._actions.start_simple_create(ctx)

    async def _task_create_advanced(self, ctx: BotContext, args: list[str]) -> None:
        await self._actions.show_create_instructions(ctx)

    async def _task_view(self, ctx: BotContext, args: list[str]) -> None:
        task_id = _arg(args, 0)
        if task_id:
            await self._actions.view_task(ctx, task_id)

    async def _task_edit(self, ctx: BotContext, args: list[str]) -> None:
        task_id = _arg(args, 0)
        if task_id:
            await self._actions.show_edit_instructions(ctx, task_id)

    async def _task_delete(self, ctx: BotContext, args: list[str]) -> None:
        task_id = _arg(args, 0)
        if task_id:
            await self._actions.delete_task(ctx, task_id)

    async def _task_status(self, ctx: BotContext, args: list[str]) -> None:
        task_id, status = _arg(args, 0), _arg(args, 1)
        if task_id and status:
            await self._actions.change_status(ctx, task_id, status)

    async def _help(self, ctx: BotContext, args: list[str]) -> None:
        await self._actions.show_help(ctx)
