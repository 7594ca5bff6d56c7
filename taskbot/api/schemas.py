"""Request bodies and error shapes for the REST API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ApiError(Exception):
    """Raised by route handlers; rendered as {"success": false, "message": ...}."""

    def __init__(
        self, status_code: int, message: str, errors: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors


class UserCreate(BaseModel):
    telegram_id: int
    username: str | None = Field(default=None, max_length=255)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    is_bot: bool = False
    language_code: str | None = Field(default=None, max_length=10)


class UserUpdate(BaseModel):
    username: str | None = Field(default=None, max_length=255)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    is_bot: bool | None = None
    language_code: str | None = Field(default=None, max_length=10)
