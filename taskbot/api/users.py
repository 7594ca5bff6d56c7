"""REST endpoints for Telegram accounts, addressed by their telegram_id."""

from __future__ import annotations

import logging
import sqlite3

from fastapi import APIRouter, Depends

from taskbot.api.dependencies import Services, get_services, require_account
from taskbot.api.schemas import ApiError, UserCreate, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
async def list_users(services: Services = Depends(get_services)) -> dict:
    accounts = services.accounts.list_accounts()
    return {"success": True, "data": [a.to_dict() for a in accounts]}


@router.post("", status_code=201)
async def create_user(
    body: UserCreate, services: Services = Depends(get_services),
) -> dict:
    try:
        account = services.accounts.create_account(**body.model_dump())
    except sqlite3.IntegrityError:
        raise ApiError(
            409, "Validation error",
            errors={"telegram_id": ["The telegram id has already been taken."]},
        )
    return {
        "success": True,
        "message": "User created successfully",
        "data": account.to_dict(),
    }


@router.get("/{telegram_id}")
async def show_user(telegram_id: int, services: Services = Depends(get_services)) -> dict:
    account = require_account(services, telegram_id)
    return {"success": True, "data": account.to_dict()}


@router.put("/{telegram_id}")
async def update_user(
    telegram_id: int,
    body: UserUpdate,
    services: Services = Depends(get_services),
) -> dict:
    require_account(services, telegram_id)
    changes = body.model_dump(exclude_unset=True)
    account = services.accounts.update_account(telegram_id, **changes)
    if account is None:
        raise ApiError(404, "User not found")
    return {
        "success": True,
        "message": "User updated successfully",
        "data": account.to_dict(),
    }


@router.delete("/{telegram_id}")
async def delete_user(telegram_id: int, services: Services = Depends(get_services)) -> dict:
    account = require_account(services, telegram_id)
    removed = services.tasks.delete_account_tasks(account.id)
    services.accounts.delete_account(telegram_id)
    logger.info("User %d deleted along with %d task(s)", telegram_id, removed)
    return {"success": True, "message": "User deleted successfully"}
