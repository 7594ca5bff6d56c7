"""REST endpoints for tasks and their attachments.

Ownership on this surface trusts the caller-supplied telegram_id.
Create and update are multipart so files can ride along.
"""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from taskbot.api.dependencies import Services, get_services, require_account
from taskbot.api.schemas import ApiError
from taskbot.config import settings
from taskbot.core.payload_parser import TaskValidationError
from taskbot.core.task_service import UploadedFile
from taskbot.data.models import Account, Task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])

StatusValue = Literal["pending", "in_progress", "completed", "cancelled"]
PriorityValue = Literal["low", "medium", "high", "urgent"]


def _require_task(services: Services, account: Account, task_id: int) -> Task:
    task = services.tasks.get_task(account.id, task_id)
    if task is None:
        raise ApiError(404, "Task not found or you do not have access to it")
    return task


async def _read_uploads(files: list[UploadFile] | None) -> list[UploadedFile]:
    uploads: list[UploadedFile] = []
    for index, upload in enumerate(files or []):
        content = await upload.read()
        if len(content) > settings.MAX_UPLOAD_BYTES:
            raise ApiError(
                422, "Validation error",
                errors={f"files.{index}": [
                    f"The file may not be greater than {settings.MAX_UPLOAD_BYTES} bytes."
                ]},
            )
        uploads.append(UploadedFile(
            file_name=upload.filename or "file",
            content=content,
            content_type=upload.content_type,
        ))
    return uploads


@router.get("")
async def list_tasks(
    telegram_id: int = Query(...),
    status: StatusValue | None = Query(None),
    priority: PriorityValue | None = Query(None),
    search: str | None = Query(None, max_length=255),
    services: Services = Depends(get_services),
) -> dict:
    account = require_account(services, telegram_id)
    tasks = services.tasks.list_tasks(
        account.id, status=status, priority=priority, search=search,
    )
    return {"success": True, "data": [t.to_dict() for t in tasks]}


@router.post("", status_code=201)
async def create_task(
    telegram_id: int = Form(...),
    title: str = Form(..., max_length=255),
    description: str | None = Form(None),
    status: StatusValue | None = Form(None),
    priority: PriorityValue | None = Form(None),
    due_date: str | None = Form(None),
    files: list[UploadFile] | None = File(None),
    services: Services = Depends(get_services),
) -> dict:
    account = require_account(services, telegram_id)
    uploads = await _read_uploads(files)
    try:
        task = services.tasks.create_task(
            account_id=account.id,
            title=title,
            description=description,
            status=status,
            priority=priority,
            due_date=due_date,
            files=uploads,
        )
    except TaskValidationError as exc:
        raise ApiError(422, "Validation error", errors=[str(exc)])
    return {
        "success": True,
        "message": "Task created successfully",
        "data": task.to_dict(),
    }


@router.get("/{task_id}")
async def show_task(
    task_id: int,
    telegram_id: int = Query(...),
    services: Services = Depends(get_services),
) -> dict:
    account = require_account(services, telegram_id)
    task = _require_task(services, account, task_id)
    return {"success": True, "data": task.to_dict()}


@router.put("/{task_id}")
async def update_task(
    task_id: int,
    telegram_id: int = Form(...),
    title: str | None = Form(None, max_length=255),
    description: str | None = Form(None),
    status: StatusValue | None = Form(None),
    priority: PriorityValue | None = Form(None),
    due_date: str | None = Form(None),
    files: list[UploadFile] | None = File(None),
    services: Services = Depends(get_services),
) -> dict:
    account = require_account(services, telegram_id)
    task = _require_task(services, account, task_id)

    supplied = {
        "title": title,
        "description": description,
        "status": status,
        "priority": priority,
        "due_date": due_date,
    }
    changes = {name: value for name, value in supplied.items() if value is not None}
    uploads = await _read_uploads(files)
    try:
        task = services.tasks.update_task(task, changes, files=uploads)
    except TaskValidationError as exc:
        raise ApiError(422, "Validation error", errors=[str(exc)])
    return {
        "success": True,
        "message": "Task updated successfully",
        "data": task.to_dict(),
    }


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    telegram_id: int = Query(...),
    services: Services = Depends(get_services),
) -> dict:
    account = require_account(services, telegram_id)
    task = _require_task(services, account, task_id)
    services.tasks.delete_task(task)
    return {"success": True, "message": "Task deleted successfully"}


@router.delete("/{task_id}/files/{file_id}")
async def remove_file(
    task_id: int,
    file_id: int,
    telegram_id: int = Query(...),
    services: Services = Depends(get_services),
) -> dict:
    account = require_account(services, telegram_id)
    task = _require_task(services, account, task_id)
    if not services.tasks.remove_attachment(task, file_id):
        raise ApiError(404, "File not found")
    return {"success": True, "message": "File removed successfully"}
