"""
Taskbot — Data Models.

Accounts, groups, tasks and their attachments as stored in SQLite.
Every task belongs to exactly one account; all reads and writes are
scoped by that owner.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

TASK_STATUSES = ("pending", "in_progress", "completed", "cancelled")
TASK_PRIORITIES = ("low", "medium", "high", "urgent")

DEFAULT_STATUS = "pending"
DEFAULT_PRIORITY = "medium"


@dataclass
class Account:
    """A messaging-platform user, keyed by their external Telegram id."""

    id: int
    telegram_id: int
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    is_bot: bool = False
    language_code: str | None = None
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Group:
    """A group or supergroup chat the bot has seen messages from."""

    id: int
    telegram_chat_id: int
    title: str
    type: str
    is_active: bool = True
    created_at: str = ""
    updated_at: str = ""


@dataclass
class GroupMember:
    group_id: int
    account_id: int
    is_admin: bool = False
    created_at: str = ""


@dataclass
class Attachment:
    """A file attached to a task. file_path is relative to STORAGE_PATH."""

    id: int
    task_id: int
    file_name: str
    file_path: str
    file_type: str | None
    file_size: int
    created_at: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Task:
    id: int
    account_id: int
    title: str
    description: str | None = None
    status: str = DEFAULT_STATUS
    priority: str = DEFAULT_PRIORITY
    due_date: str | None = None       # ISO timestamp, e.g. "2023-06-15T00:00:00"
    created_at: str = ""
    updated_at: str = ""
    files: list[Attachment] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)
