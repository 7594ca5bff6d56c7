"""
Taskbot — Task service.

Task operations shared by the REST API and the bot: validation of
status/priority/due-date values, attachment blobs kept in step with their
rows, and cascade deletion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from taskbot.core.payload_parser import (
    normalize_priority,
    normalize_status,
    normalize_title,
    parse_due_date,
)
from taskbot.data.db import TaskDB
from taskbot.data.file_storage import FileStorage
from taskbot.data.models import DEFAULT_PRIORITY, DEFAULT_STATUS, Attachment, Task

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    file_name: str
    content: bytes
    content_type: str | None = None


class TaskService:
    """Stateless orchestration over TaskDB and FileStorage."""

    def __init__(self, tasks: TaskDB, storage: FileStorage) -> None:
        self._tasks = tasks
        self._storage = storage

    # -- reads ---------------------------------------------------------------

    def get_task(self, account_id: int, task_id: int) -> Task | None:
        return self._tasks.get_task(task_id, account_id)

    def list_tasks(
        self,
        account_id: int,
        status: str | None = None,
        priority: str | None = None,
        search: str | None = None,
    ) -> list[Task]:
        return self._tasks.list_tasks(
            account_id, status=status, priority=priority, search=search,
        )

    # -- writes --------------------------------------------------------------

    def create_task(
        self,
        account_id: int,
        title: str,
        description: str | None = None,
        status: str | None = None,
        priority: str | None = None,
        due_date: str | None = None,
        files: Iterable[UploadedFile] = (),
    ) -> Task:
        """Validate and insert a task, then attach files.

        If storing an attachment fails the task is removed again, so callers
        never see a half-created record.
        """
        task = self._tasks.create_task(
            account_id=account_id,
            title=normalize_title(title),
            description=description,
            status=normalize_status(status) if status else DEFAULT_STATUS,
            priority=normalize_priority(priority) if priority else DEFAULT_PRIORITY,
            due_date=parse_due_date(due_date) if due_date else None,
        )
        try:
            for upload in files:
                task.files.append(self._store(task, upload))
        except Exception:
            logger.exception("Attachment upload failed, rolling back task #%d", task.id)
            self.delete_task(task)
            raise
        return task

    def update_task(
        self,
        task: Task,
        changes: dict,
        files: Iterable[UploadedFile] = (),
    ) -> Task:
        """Overwrite only the keys present in `changes`; attach any new files."""
        clean: dict = {}
        for name, value in changes.items():
            if name == "title":
                clean[name] = normalize_title(value)
            elif name == "status":
                clean[name] = normalize_status(value)
            elif name == "priority":
                clean[name] = normalize_priority(value)
            elif name == "due_date":
                clean[name] = parse_due_date(value) if value else None
            else:
                clean[name] = value

        updated = self._tasks.update_task(task.id, task.account_id, **clean)
        if updated is None:
            raise LookupError(f"Task {task.id} disappeared during update")

        for upload in files:
            updated.files.append(self.add_attachment(updated, upload))
        return updated

    def set_status(self, task: Task, status: str) -> Task:
        return self.update_task(task, {"status": status})

    def delete_task(self, task: Task) -> None:
        """Delete the task row (attachment rows cascade), then the blobs."""
        attachments = self._tasks.list_files(task.id)
        self._tasks.delete_task(task.id, task.account_id)
        for attachment in attachments:
            self._delete_blob(attachment)

    def delete_account_tasks(self, account_id: int) -> int:
        tasks = self._tasks.list_tasks(account_id)
        for task in tasks:
            self.delete_task(task)
        return len(tasks)

    # -- attachments ---------------------------------------------------------

    def add_attachment(self, task: Task, upload: UploadedFile) -> Attachment:
        return self._store(task, upload)

    def remove_attachment(self, task: Task, file_id: int) -> bool:
        attachment = self._tasks.get_file(task.id, file_id)
        if attachment is None:
            return False
        self._tasks.delete_file(task.id, file_id)
        self._delete_blob(attachment)
        return True

    def _store(self, task: Task, upload: UploadedFile) -> Attachment:
        path = self._storage.save(task.id, upload.file_name, upload.content)
        try:
            return self._tasks.add_file(
                task_id=task.id,
                file_name=upload.file_name,
                file_path=path,
                file_type=upload.content_type,
                file_size=len(upload.content),
            )
        except Exception:
            self._storage.delete(path)
            raise

    def _delete_blob(self, attachment: Attachment) -> None:
        try:
            self._storage.delete(attachment.file_path)
        except OSError as exc:
            logger.error(
                "Failed to delete blob %s of file #%d: %s",
                attachment.file_path, attachment.id, exc,
            )
