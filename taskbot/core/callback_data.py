"""Callback-button payloads: "<action>:<arg>:<arg>..."."""

from __future__ import annotations

from enum import Enum

SEPARATOR = ":"


class CallbackAction(str, Enum):
    TASK_LIST = "task_list"
    TASK_CREATE = "task_create"
    TASK_CREATE_SIMPLE = "task_create_simple"
    TASK_CREATE_ADVANCED = "task_create_advanced"
    TASK_VIEW = "task_view"
    TASK_EDIT = "task_edit"
    TASK_DELETE = "task_delete"
    TASK_STATUS = "task_status"
    HELP = "help"


def build(action: CallbackAction, *args: object) -> str:
    return SEPARATOR.join([action.value, *(str(a) for a in args)])


def parse(data: str) -> tuple[CallbackAction | None, list[str]]:
    """Split a payload into its action and positional args.

    Unknown actions come back as None so the caller can ignore them.
    """
    head, *args = (data or "").split(SEPARATOR)
    try:
        action = CallbackAction(head)
    except ValueError:
        return None, args
    return action, args
