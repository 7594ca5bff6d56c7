"""
Taskbot — Bot task actions.

The operations reachable from both slash-commands and callback buttons.
Every task lookup is scoped to the account derived from the inbound
sender, and a missing or foreign task always gets the same denial reply.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from taskbot.core import presenter
from taskbot.core.payload_parser import (
    TaskFields,
    TaskValidationError,
    parse_edit_payload,
    parse_task_id,
)
from taskbot.data.models import TASK_STATUSES
from taskbot.ports.mode_store_port import ConversationMode

if TYPE_CHECKING:
    from taskbot.core.task_service import TaskService
    from taskbot.data.models import Account, Task
    from taskbot.ports.message_port import MessageSender
    from taskbot.ports.mode_store_port import ModeStore

logger = logging.getLogger(__name__)


@dataclass
class BotContext:
    """Who is acting, and where replies go."""

    chat_id: int
    account: Account


class TaskActions:
    """Task operations rendered back to a chat through a MessageSender."""

    def __init__(
        self,
        sender: MessageSender,
        tasks: TaskService,
        modes: ModeStore,
    ) -> None:
        self._sender = sender
        self._tasks = tasks
        self._modes = modes

    async def reply(self, ctx: BotContext, text: str, reply_markup=None) -> None:
        await self._sender.send_message(ctx.chat_id, text, reply_markup=reply_markup)

    async def _owned_task(self, ctx: BotContext, raw_task_id: str | None) -> Task | None:
        """Load a task owned by the caller, or send the uniform denial."""
        task_id = parse_task_id(raw_task_id)
        task = self._tasks.get_task(ctx.account.id, task_id) if task_id else None
        if task is None:
            await self.reply(ctx, presenter.NOT_FOUND_TEXT)
        return task

    # -- static screens ------------------------------------------------------

    async def show_welcome(self, ctx: BotContext) -> None:
        text, markup = presenter.render_welcome(ctx.account)
        await self.reply(ctx, text, markup)

    async def show_help(self, ctx: BotContext) -> None:
        await self.reply(ctx, presenter.render_help())

    async def show_create_choice(self, ctx: BotContext) -> None:
        text, markup = presenter.render_create_choice()
        await self.reply(ctx, text, markup)

    async def start_simple_create(self, ctx: BotContext) -> None:
        self._modes.set_mode(ctx.chat_id, ConversationMode.AWAITING_SIMPLE_TITLE)
        await self.reply(ctx, presenter.render_title_prompt())

    async def show_create_instructions(self, ctx: BotContext) -> None:
        await self.reply(ctx, presenter.render_create_instructions())

    # -- task screens --------------------------------------------------------

    async def show_task_list(self, ctx: BotContext) -> None:
        tasks = self._tasks.list_tasks(ctx.account.id)
        text, markup = presenter.render_task_list(tasks)
        await self.reply(ctx, text, markup)

    async def view_task(self, ctx: BotContext, raw_task_id: str | None) -> None:
        task = await self._owned_task(ctx, raw_task_id)
        if task is None:
            return
        text, markup = presenter.render_task_detail(task)
        await self.reply(ctx, text, markup)

    async def show_edit_instructions(self, ctx: BotContext, raw_task_id: str | None) -> None:
        task = await self._owned_task(ctx, raw_task_id)
        if task is None:
            return
        await self.reply(ctx, presenter.render_edit_instructions(task.id))

    async def delete_task(self, ctx: BotContext, raw_task_id: str | None) -> None:
        task = await self._owned_task(ctx, raw_task_id)
        if task is None:
            return
        self._tasks.delete_task(task)
        await self.reply(ctx, presenter.render_task_deleted(task))
        await self.show_task_list(ctx)

    async def change_status(
        self, ctx: BotContext, raw_task_id: str | None, status: str | None,
    ) -> None:
        if status not in TASK_STATUSES:
            logger.debug("Ignoring status change to %r", status)
            return
        task = await self._owned_task(ctx, raw_task_id)
        if task is None:
            return
        task = self._tasks.set_status(task, status)
        await self.reply(ctx, presenter.render_status_changed(task))
        text, markup = presenter.render_task_detail(task)
        await self.reply(ctx, text, markup)

    # -- creation / editing --------------------------------------------------

    async def create_task(self, ctx: BotContext, fields: TaskFields, raw: str) -> None:
        try:
            task = self._tasks.create_task(
                account_id=ctx.account.id,
                title=fields.title or "",
                description=fields.description,
                priority=fields.priority,
                due_date=fields.due_date,
            )
        except TaskValidationError as exc:
            await self.reply(ctx, f"⚠️ {exc}")
            return
        except Exception:
            logger.exception(
                "Failed to create task for account #%d from %r", ctx.account.id, raw,
            )
            await self.reply(ctx, presenter.GENERIC_FAILURE_TEXT)
            return

        await self.reply(ctx, presenter.render_task_created(task))
        text, markup = presenter.render_task_detail(task)
        await self.reply(ctx, text, markup)

    async def create_from_title(self, ctx: BotContext, title: str) -> None:
        await self.create_task(ctx, TaskFields(title=title), raw=title)

    async def edit_task(self, ctx: BotContext, raw_task_id: str | None, payload: str) -> None:
        """Overwrite the fields present in `payload`; omitted ones keep their values."""
        task = await self._owned_task(ctx, raw_task_id)
        if task is None:
            return
        try:
            fields = parse_edit_payload(payload)
            task = self._tasks.update_task(task, fields.changes())
        except TaskValidationError as exc:
            await self.reply(ctx, f"⚠️ {exc}")
            return
        except Exception:
            logger.exception(
                "Failed to update task #%d for account #%d from %r",
                task.id, ctx.account.id, payload,
            )
            await self.reply(ctx, presenter.GENERIC_FAILURE_TEXT)
            return

        await self.reply(ctx, presenter.render_task_updated(task))
        text, markup = presenter.render_task_detail(task)
        await self.reply(ctx, text, markup)
