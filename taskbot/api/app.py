"""
Taskbot — HTTP application.

create_app() mounts the REST and webhook routers on a FastAPI app around a
ready-made Services container. build_app() wires the production defaults:
SQLite stores, local file storage, the configured mode store and a
telegram.Bot-backed message sender.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from telegram import Bot

from taskbot.api import tasks, telegram, users
from taskbot.api.dependencies import Services
from taskbot.api.schemas import ApiError
from taskbot.config import settings

logger = logging.getLogger(__name__)


def create_app(services: Services, lifespan=None) -> FastAPI:
    app = FastAPI(title="Taskbot API", version="1.0.0", lifespan=lifespan)
    app.state.services = services

    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError) -> JSONResponse:
        content: dict = {"success": False, "message": exc.message}
        if exc.errors is not None:
            content["errors"] = exc.errors
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "message": "Validation error",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.get("/health")
    async def health_check() -> dict:
        return {"status": "healthy"}

    app.include_router(telegram.router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.include_router(tasks.router, prefix="/api")
    return app


def build_services(bot: Bot | None = None) -> Services:
    """Wire production defaults. Pass a Bot to reuse an existing instance."""
    from taskbot.adapters.mode_store import create_mode_store
    from taskbot.adapters.telegram_sender import TelegramMessageSender
    from taskbot.bot.router import UpdateRouter
    from taskbot.core.task_service import TaskService
    from taskbot.data.db import AccountDB, GroupDB, TaskDB
    from taskbot.data.file_storage import FileStorage

    if bot is None:
        bot = Bot(token=settings.TELEGRAM_BOT_TOKEN)

    accounts = AccountDB()
    groups = GroupDB()
    task_service = TaskService(TaskDB(), FileStorage())
    router = UpdateRouter(
        accounts=accounts,
        groups=groups,
        tasks=task_service,
        modes=create_mode_store(),
        sender=TelegramMessageSender(bot),
    )
    return Services(
        accounts=accounts,
        groups=groups,
        tasks=task_service,
        router=router,
        bot=bot,
    )


def build_app() -> FastAPI:
    services = build_services()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await services.bot.initialize()
        logger.info("Telegram bot initialized")
        try:
            yield
        finally:
            await services.bot.shutdown()

    app = create_app(services, lifespan=lifespan)
    logger.info("Taskbot application built (mode store: %s)", settings.MODE_STORE)
    return app
