"""Service container shared by the route handlers."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request
from telegram import Bot

from taskbot.api.schemas import ApiError
from taskbot.bot.router import UpdateRouter
from taskbot.core.task_service import TaskService
from taskbot.data.db import AccountDB, GroupDB
from taskbot.data.models import Account


@dataclass
class Services:
    accounts: AccountDB
    groups: GroupDB
    tasks: TaskService
    router: UpdateRouter
    bot: Bot | None = None


def get_services(request: Request) -> Services:
    return request.app.state.services


def require_account(services: Services, telegram_id: int) -> Account:
    """Resolve the caller-supplied telegram_id, or 404."""
    account = services.accounts.get_by_telegram_id(telegram_id)
    if account is None:
        raise ApiError(404, "User not found")
    return account
