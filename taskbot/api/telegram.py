"""Telegram webhook receiver and webhook management endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from telegram.error import TelegramError

from taskbot.adapters import telegram_sender
from taskbot.api.dependencies import Services, get_services
from taskbot.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/telegram", tags=["telegram"])


def _error(message: str, status_code: int = 500, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message, **extra},
    )


@router.post("/webhook")
async def handle_webhook(request: Request, services: Services = Depends(get_services)):
    """Receive one update. Answers success unless the request itself is unusable."""
    try:
        update = await request.json()
    except ValueError as exc:
        logger.error("Telegram webhook body is not JSON: %s", exc)
        return _error(f"Error processing update: {exc}")

    if not isinstance(update, dict):
        logger.warning("Ignoring non-object webhook body: %r", update)
        return {"status": "success"}

    logger.info(
        "Telegram webhook received: update_id=%s has_message=%s has_callback_query=%s",
        update.get("update_id"),
        "message" in update,
        "callback_query" in update,
    )

    try:
        await services.router.process_update(update)
    except Exception as exc:
        logger.exception("Error processing Telegram update: %s", update)
        return _error(f"Error processing update: {exc}")
    return {"status": "success"}


@router.post("/set-webhook")
async def set_webhook(services: Services = Depends(get_services)):
    if services.bot is None or not settings.TELEGRAM_WEBHOOK_URL:
        return _error("Telegram bot token or webhook URL not configured")
    try:
        ok = await telegram_sender.set_webhook(services.bot, settings.TELEGRAM_WEBHOOK_URL)
    except TelegramError as exc:
        logger.error("setWebhook failed: %s", exc)
        return _error("Failed to set webhook", data=str(exc))
    return {"status": "success", "message": "Webhook set successfully", "data": ok}


@router.get("/webhook-info")
async def webhook_info(services: Services = Depends(get_services)):
    if services.bot is None:
        return _error("Telegram bot token not configured")
    try:
        info = await telegram_sender.get_webhook_info(services.bot)
    except TelegramError as exc:
        logger.error("getWebhookInfo failed: %s", exc)
        return _error("Failed to get webhook info", data=str(exc))
    return {"status": "success", "data": info}


@router.post("/delete-webhook")
async def delete_webhook(services: Services = Depends(get_services)):
    if services.bot is None:
        return _error("Telegram bot token not configured")
    try:
        ok = await telegram_sender.delete_webhook(services.bot)
    except TelegramError as exc:
        logger.error("deleteWebhook failed: %s", exc)
        return _error("Failed to delete webhook", data=str(exc))
    return {"status": "success", "data": ok}
