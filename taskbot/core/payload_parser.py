"""
Taskbot — Command payload parser.

Turns the text after a slash-command into task fields. Payloads are
pipe-delimited and positional:

    Title | Description | Priority | Due date

`/create` fills omitted segments with defaults; `/edit` leaves them
untouched. Blank segments count as omitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from datetime import datetime

from taskbot.data.models import DEFAULT_PRIORITY, TASK_PRIORITIES, TASK_STATUSES

logger = logging.getLogger(__name__)

COMMAND_PREFIX = "/"
SEGMENT_SEPARATOR = "|"
MAX_SEGMENTS = 4
MAX_TITLE_LENGTH = 255

# Tried in order after datetime.fromisoformat()
_DATE_FORMATS = ("%d.%m.%Y %H:%M", "%d.%m.%Y")


class TaskValidationError(ValueError):
    """Raised when user input cannot be turned into valid task fields."""


@dataclass
class TaskFields:
    """A partial set of task fields; None means "not supplied"."""

    title: str | None = None
    description: str | None = None
    priority: str | None = None
    due_date: str | None = None

    def changes(self) -> dict[str, str]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


# ---------------------------------------------------------------------------
# Command tokenization
# ---------------------------------------------------------------------------


def is_command(text: str) -> bool:
    return text.startswith(COMMAND_PREFIX)


def split_command(text: str) -> tuple[str, str]:
    """Split "/Cmd@MyBot rest of text" into ("cmd", "rest of text").

    Any whitespace, newlines included, ends the command token.
    """
    parts = text.strip().split(maxsplit=1)
    if not parts:
        return "", ""
    head = parts[0]
    rest = parts[1] if len(parts) > 1 else ""
    command = head[len(COMMAND_PREFIX):] if head.startswith(COMMAND_PREFIX) else head
    command = command.split("@", 1)[0].lower()
    return command, rest.strip()


def parse_task_id(raw: str | None) -> int | None:
    """Return a positive integer id, or None for anything else."""
    if raw is None:
        return None
    raw = raw.strip()
    if not raw.isdigit():
        return None
    task_id = int(raw)
    return task_id if task_id > 0 else None


# ---------------------------------------------------------------------------
# Field normalization
# ---------------------------------------------------------------------------


def normalize_title(value: str) -> str:
    title = value.strip()
    if not title:
        raise TaskValidationError("The task title cannot be empty.")
    if len(title) > MAX_TITLE_LENGTH:
        raise TaskValidationError(
            f"The task title is too long (max {MAX_TITLE_LENGTH} characters)."
        )
    return title


def normalize_priority(value: str) -> str:
    priority = value.strip().lower()
    if priority not in TASK_PRIORITIES:
        raise TaskValidationError(
            f"Unknown priority '{value.strip()}'. Use one of: {', '.join(TASK_PRIORITIES)}."
        )
    return priority


def normalize_status(value: str) -> str:
    status = value.strip().lower()
    if status not in TASK_STATUSES:
        raise TaskValidationError(
            f"Unknown status '{value.strip()}'. Use one of: {', '.join(TASK_STATUSES)}."
        )
    return status


def parse_due_date(value: str) -> str:
    """Parse a due date into an ISO timestamp (date-only values become midnight).

    Accepts YYYY-MM-DD, YYYY-MM-DD HH:MM, full ISO-8601 and DD.MM.YYYY[ HH:MM].
    Anything else raises TaskValidationError rather than guessing.
    """
    raw = value.strip()
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(raw, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        raise TaskValidationError(
            f"Couldn't understand the date '{raw}'. Use the YYYY-MM-DD format."
        )
    return parsed.replace(microsecond=0).isoformat()


# ---------------------------------------------------------------------------
# Payload parsing
# ---------------------------------------------------------------------------


def split_segments(payload: str) -> list[str | None]:
    """Split on "|" into exactly MAX_SEGMENTS trimmed values, None for blank/missing."""
    parts = [p.strip() for p in payload.split(SEGMENT_SEPARATOR)]
    if len(parts) > MAX_SEGMENTS:
        raise TaskValidationError(
            f"Too many fields: expected at most {MAX_SEGMENTS} separated by '|'."
        )
    parts += [""] * (MAX_SEGMENTS - len(parts))
    return [p or None for p in parts]


def parse_create_payload(payload: str) -> TaskFields:
    """Fields for a new task: title required, priority defaults to medium."""
    title, description, priority, due = split_segments(payload)
    if title is None:
        raise TaskValidationError("The task title cannot be empty.")

    return TaskFields(
        title=normalize_title(title),
        description=description,
        priority=normalize_priority(priority) if priority else DEFAULT_PRIORITY,
        due_date=parse_due_date(due) if due else None,
    )


def parse_edit_payload(payload: str) -> TaskFields:
    """Fields to overwrite on an existing task; omitted segments stay None."""
    title, description, priority, due = split_segments(payload)
    changes = TaskFields(
        title=normalize_title(title) if title else None,
        description=description,
        priority=normalize_priority(priority) if priority else None,
        due_date=parse_due_date(due) if due else None,
    )
    if not changes.changes():
        raise TaskValidationError("Nothing to change: all fields were empty.")
    return changes
