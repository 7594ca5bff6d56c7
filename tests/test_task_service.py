"""Tests for taskbot.core.task_service — validation, attachments, cascade delete."""

import pytest
from unittest.mock import patch

from taskbot.core.payload_parser import TaskValidationError
from taskbot.core.task_service import UploadedFile


class TestCreate:
    def test_create_with_defaults(self, task_service):
        task = task_service.create_task(account_id=1, title="  Buy milk ")
        assert task.title == "Buy milk"
        assert task.status == "pending"
        assert task.priority == "medium"

    def test_create_validates(self, task_service):
        with pytest.raises(TaskValidationError):
            task_service.create_task(account_id=1, title="   ")
        with pytest.raises(TaskValidationError):
            task_service.create_task(account_id=1, title="A", priority="meh")
        with pytest.raises(TaskValidationError):
            task_service.create_task(account_id=1, title="A", due_date="someday")
        assert task_service.list_tasks(1) == []

    def test_create_with_files(self, task_service, file_storage):
        task = task_service.create_task(
            account_id=1,
            title="Report",
            files=[UploadedFile("report.pdf", b"%PDF", "application/pdf")],
        )
        assert len(task.files) == 1
        attachment = task.files[0]
        assert attachment.file_name == "report.pdf"
        assert attachment.file_size == 4
        assert attachment.file_path.startswith(f"{task.id}/")
        assert file_storage.path_for(attachment.file_path).read_bytes() == b"%PDF"

    def test_failed_upload_rolls_back_task(self, task_service):
        with patch("taskbot.data.file_storage.FileStorage.save", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                task_service.create_task(
                    account_id=1, title="Report", files=[UploadedFile("a.txt", b"a")],
                )
        assert task_service.list_tasks(1) == []


class TestUpdate:
    def test_partial_update_keeps_other_fields(self, task_service):
        task = task_service.create_task(
            account_id=1, title="A", description="desc", priority="low", due_date="2023-06-15",
        )
        updated = task_service.update_task(task, {"priority": "HIGH"})
        assert updated.priority == "high"
        assert updated.title == "A"
        assert updated.description == "desc"
        assert updated.due_date == "2023-06-15T00:00:00"

    def test_set_status_validates(self, task_service):
        task = task_service.create_task(account_id=1, title="A")
        assert task_service.set_status(task, "completed").status == "completed"
        with pytest.raises(TaskValidationError):
            task_service.set_status(task, "done")


class TestDelete:
    def test_delete_removes_rows_and_blobs(self, task_service, task_db, file_storage):
        task = task_service.create_task(
            account_id=1,
            title="A",
            files=[UploadedFile("a.txt", b"a"), UploadedFile("b.txt", b"b")],
        )
        paths = [f.file_path for f in task.files]

        task_service.delete_task(task)

        assert task_service.get_task(1, task.id) is None
        assert task_db.list_files(task.id) == []
        assert not any(file_storage.exists(p) for p in paths)

    def test_delete_tolerates_missing_blob(self, task_service, file_storage):
        task = task_service.create_task(
            account_id=1, title="A", files=[UploadedFile("a.txt", b"a")],
        )
        file_storage.delete(task.files[0].file_path)
        task_service.delete_task(task)
        assert task_service.get_task(1, task.id) is None

    def test_remove_attachment(self, task_service, file_storage):
        task = task_service.create_task(
            account_id=1, title="A", files=[UploadedFile("a.txt", b"a")],
        )
        attachment = task.files[0]
        assert task_service.remove_attachment(task, attachment.id) is True
        assert not file_storage.exists(attachment.file_path)
        assert task_service.remove_attachment(task, attachment.id) is False

    def test_delete_account_tasks(self, task_service):
        task_service.create_task(account_id=1, title="A")
        task_service.create_task(account_id=1, title="B")
        task_service.create_task(account_id=2, title="C")
        assert task_service.delete_account_tasks(1) == 2
        assert task_service.list_tasks(1) == []
        assert len(task_service.list_tasks(2)) == 1
