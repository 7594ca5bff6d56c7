"""
Taskbot — Presenter.

Pure formatting: tasks in, (HTML text, inline keyboard) out. Nothing here
touches storage or the network. User-supplied text is always escaped since
messages are sent with parse_mode=HTML.
"""

from __future__ import annotations

from datetime import datetime
from html import escape

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from taskbot.core import callback_data
from taskbot.core.callback_data import CallbackAction
from taskbot.data.models import Account, Task

STATUS_GLYPHS = {
    "pending": "⏳",
    "in_progress": "🔄",
    "completed": "✅",
    "cancelled": "❌",
}
DEFAULT_STATUS_GLYPH = "❓"

PRIORITY_GLYPHS = {
    "low": "🟢",
    "medium": "🟡",
    "high": "🟠",
    "urgent": "🔴",
}
DEFAULT_PRIORITY_GLYPH = "⚪"

STATUS_LABELS = {
    "pending": "pending",
    "in_progress": "in progress",
    "completed": "completed",
    "cancelled": "cancelled",
}

_BUTTON_TITLE_LIMIT = 48

# Telegram rejects messages longer than 4096 characters
MESSAGE_LIMIT = 4096
MAX_LISTED_TASKS = 30

NOT_FOUND_TEXT = "Task not found or you don't have access to it."
UNKNOWN_COMMAND_TEXT = "Unknown command. Use /help to see the list of available commands."
GENERIC_FAILURE_TEXT = "Something went wrong while saving your task. Please try again."
EDIT_USAGE_TEXT = (
    "Usage: <code>/edit &lt;task_id&gt; Title | Description | Priority | Due date</code>\n"
    "Use /tasks to find task IDs."
)


def status_glyph(status: str) -> str:
    return STATUS_GLYPHS.get(status, DEFAULT_STATUS_GLYPH)


def priority_glyph(priority: str) -> str:
    return PRIORITY_GLYPHS.get(priority, DEFAULT_PRIORITY_GLYPH)


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def format_due(due_date: str) -> str:
    """Render an ISO timestamp as DD.MM.YYYY HH:MM; unparseable values pass through."""
    try:
        return datetime.fromisoformat(due_date).strftime("%d.%m.%Y %H:%M")
    except ValueError:
        return due_date


def _button(text: str, action: CallbackAction, *args: object) -> InlineKeyboardButton:
    return InlineKeyboardButton(text, callback_data=callback_data.build(action, *args))


def _short(title: str) -> str:
    if len(title) <= _BUTTON_TITLE_LIMIT:
        return title
    return title[: _BUTTON_TITLE_LIMIT - 1] + "…"


def _create_button() -> InlineKeyboardButton:
    return _button("➕ Create task", CallbackAction.TASK_CREATE)


# ---------------------------------------------------------------------------
# Static screens
# ---------------------------------------------------------------------------


def render_welcome(account: Account) -> tuple[str, InlineKeyboardMarkup]:
    name = escape(account.first_name or "there")
    text = (
        f"Hi, {name}! 👋\n\n"
        "Welcome to the Task Manager bot. I'll help you keep track of your tasks.\n\n"
        "Use /help to see the list of available commands."
    )
    keyboard = [
        [
            _button("📋 My tasks", CallbackAction.TASK_LIST),
            _create_button(),
        ],
        [_button("❓ Help", CallbackAction.HELP)],
    ]
    return text, InlineKeyboardMarkup(keyboard)


def render_help() -> str:
    return (
        "<b>Available commands:</b>\n\n"
        "/start - Start the bot and register\n"
        "/help - Show this message\n"
        "/tasks - List your tasks\n"
        "/create - Create a new task\n"
        "/edit &lt;id&gt; - Edit one of your tasks\n"
    )


def render_create_choice() -> tuple[str, InlineKeyboardMarkup]:
    text = "How would you like to create the task?"
    keyboard = [
        [
            _button("✏️ Simple (title only)", CallbackAction.TASK_CREATE_SIMPLE),
            _button("🧩 Advanced", CallbackAction.TASK_CREATE_ADVANCED),
        ]
    ]
    return text, InlineKeyboardMarkup(keyboard)


def render_title_prompt() -> str:
    return "Send me the title of the new task."


def render_create_instructions() -> str:
    return (
        "To create a task, send a message in this format:\n\n"
        "<code>/create Title | Description | Priority | Due date</code>\n\n"
        "For example:\n"
        "<code>/create Buy milk | Get 2 liters at the store | high | 2023-06-15</code>\n\n"
        "Priority can be: low, medium, high, urgent\n"
        "Due date uses the YYYY-MM-DD format"
    )


def render_edit_instructions(task_id: int) -> str:
    return (
        "To edit the task, send a message in this format:\n\n"
        f"<code>/edit {task_id} Title | Description | Priority | Due date</code>\n\n"
        "Leave a field empty to keep its current value, e.g.:\n"
        f"<code>/edit {task_id} | | urgent</code>"
    )


# ---------------------------------------------------------------------------
# Task screens
# ---------------------------------------------------------------------------


def render_task_created(task: Task) -> str:
    return f"✅ Task <b>{escape(task.title)}</b> created."


def render_task_updated(task: Task) -> str:
    return f"✅ Task <b>{escape(task.title)}</b> updated."


def render_task_deleted(task: Task) -> str:
    return f"✅ Task \"{escape(task.title)}\" was deleted."


def render_status_changed(task: Task) -> str:
    return (
        f"✅ Status of \"{escape(task.title)}\" changed to "
        f"\"{status_label(task.status)}\"."
    )


def render_task_detail(task: Task) -> tuple[str, InlineKeyboardMarkup]:
    lines = [
        f"<b>{escape(task.title)}</b>",
        "",
        f"Status: {status_glyph(task.status)} {status_label(task.status).capitalize()}",
        f"Priority: {priority_glyph(task.priority)} {task.priority.capitalize()}",
    ]
    if task.due_date:
        lines.append(f"Due: 📅 {format_due(task.due_date)}")
    if task.description:
        lines += ["", "Description:", escape(task.description)]
    if task.files:
        lines += ["", f"Attached files: {len(task.files)}"]

    keyboard = [
        [
            _button("✏️ Edit", CallbackAction.TASK_EDIT, task.id),
            _button("🗑️ Delete", CallbackAction.TASK_DELETE, task.id),
        ],
        [
            _button("✅ Done", CallbackAction.TASK_STATUS, task.id, "completed"),
            _button("⏳ In progress", CallbackAction.TASK_STATUS, task.id, "in_progress"),
        ],
        [_button("◀️ Back to list", CallbackAction.TASK_LIST)],
    ]
    return "\n".join(lines), InlineKeyboardMarkup(keyboard)


def render_task_list(tasks: list[Task]) -> tuple[str, InlineKeyboardMarkup]:
    """Numbered summary with one view button per task.

    At most MAX_LISTED_TASKS entries are shown, and fewer if the text would
    not fit in one message; the rest are counted in a trailing line.
    """
    if not tasks:
        text = "You don't have any tasks yet. Use /create to add one."
        return text, InlineKeyboardMarkup([[_create_button()]])

    header = "<b>Your tasks:</b>\n"
    # Room for the "...and N more" line
    budget = MESSAGE_LIMIT - len(header) - 64
    entries: list[str] = []
    for index, task in enumerate(tasks[:MAX_LISTED_TASKS], start=1):
        entry = (
            f"\n{index}. {status_glyph(task.status)} {priority_glyph(task.priority)} "
            f"<b>{escape(task.title)}</b>"
        )
        if task.due_date:
            entry += f"\n📅 Due: {format_due(task.due_date)}"
        entry += "\n"
        if len(entry) > budget:
            break
        budget -= len(entry)
        entries.append(entry)

    shown = tasks[: len(entries)]
    text = header + "".join(entries).rstrip()
    hidden = len(tasks) - len(shown)
    if hidden:
        text += f"\n\n…and {hidden} more."

    keyboard = [
        [_button(f"👁️ {_short(task.title)}", CallbackAction.TASK_VIEW, task.id)]
        for task in shown
    ]
    keyboard.append([_create_button()])
    return text, InlineKeyboardMarkup(keyboard)
