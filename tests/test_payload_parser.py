"""Tests for taskbot.core.payload_parser — command tokenization and payload fields."""

import pytest

from taskbot.core.payload_parser import (
    TaskFields,
    TaskValidationError,
    is_command,
    parse_create_payload,
    parse_due_date,
    parse_edit_payload,
    parse_task_id,
    split_command,
)


class TestSplitCommand:
    def test_plain(self):
        assert split_command("/tasks") == ("tasks", "")

    def test_case_insensitive_with_args(self):
        assert split_command("/CREATE Buy milk | x") == ("create", "Buy milk | x")

    def test_bot_suffix_stripped(self):
        assert split_command("/tasks@MyTaskBot") == ("tasks", "")

    def test_newline_separates_payload(self):
        assert split_command("/create\nBuy milk | x") == ("create", "Buy milk | x")

    def test_empty_text(self):
        assert split_command("") == ("", "")

    def test_is_command(self):
        assert is_command("/start")
        assert not is_command("hello /start")


class TestParseTaskId:
    def test_valid(self):
        assert parse_task_id("42") == 42
        assert parse_task_id(" 7 ") == 7

    def test_invalid(self):
        assert parse_task_id(None) is None
        assert parse_task_id("abc") is None
        assert parse_task_id("-3") is None
        assert parse_task_id("0") is None


class TestParseCreatePayload:
    def test_title_only_takes_defaults(self):
        fields = parse_create_payload("  Buy milk  ")
        assert fields == TaskFields(title="Buy milk", description=None, priority="medium", due_date=None)

    def test_all_segments(self):
        fields = parse_create_payload("Buy milk | Get 2 liters | HIGH | 2023-06-15")
        assert fields.title == "Buy milk"
        assert fields.description == "Get 2 liters"
        assert fields.priority == "high"
        assert fields.due_date == "2023-06-15T00:00:00"

    def test_blank_segments_take_defaults(self):
        fields = parse_create_payload("Buy milk | | |")
        assert fields.description is None
        assert fields.priority == "medium"
        assert fields.due_date is None

    def test_missing_title(self):
        with pytest.raises(TaskValidationError):
            parse_create_payload(" | description only")

    def test_unknown_priority(self):
        with pytest.raises(TaskValidationError, match="priority"):
            parse_create_payload("Buy milk | | whenever")

    def test_bad_date_is_rejected(self):
        with pytest.raises(TaskValidationError, match="date"):
            parse_create_payload("Buy milk | | high | next tuesday-ish")

    def test_too_many_segments(self):
        with pytest.raises(TaskValidationError):
            parse_create_payload("a | b | low | 2023-01-01 | extra")


class TestParseEditPayload:
    def test_only_supplied_fields(self):
        fields = parse_edit_payload(" | | urgent")
        assert fields.changes() == {"priority": "urgent"}

    def test_title_and_date(self):
        fields = parse_edit_payload("New title | | | 15.06.2023")
        assert fields.changes() == {"title": "New title", "due_date": "2023-06-15T00:00:00"}

    def test_all_blank_rejected(self):
        with pytest.raises(TaskValidationError):
            parse_edit_payload(" | | ")


class TestParseDueDate:
    def test_iso_date(self):
        assert parse_due_date("2023-06-15") == "2023-06-15T00:00:00"

    def test_date_and_time(self):
        assert parse_due_date("2023-06-15 18:30") == "2023-06-15T18:30:00"

    def test_dotted_date_with_time(self):
        assert parse_due_date("15.06.2023 09:05") == "2023-06-15T09:05:00"

    def test_garbage(self):
        with pytest.raises(TaskValidationError):
            parse_due_date("tomorrow")

    def test_impossible_date(self):
        with pytest.raises(TaskValidationError):
            parse_due_date("2023-02-30")
