"""Telegram messaging adapter — implements MessageSender.

Wraps a telegram.Bot instance. Every outbound call is bounded by
SEND_TIMEOUT_SECONDS; failures and timeouts are logged and never raised,
so a slow Bot API cannot hold up webhook handling.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from telegram import Bot, InlineKeyboardMarkup, Message
from telegram.constants import ParseMode
from telegram.error import TelegramError

logger = logging.getLogger(__name__)


class TelegramMessageSender:
    """Telegram implementation of MessageSender."""

    def __init__(self, bot: Bot, timeout: float | None = None) -> None:
        if timeout is None:
            from taskbot.config import settings
            timeout = settings.SEND_TIMEOUT_SECONDS

        self._bot = bot
        self._timeout = timeout

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: InlineKeyboardMarkup | None = None,
    ) -> Message | None:
        try:
            return await asyncio.wait_for(
                self._bot.send_message(
                    chat_id=chat_id,
                    text=text,
                    parse_mode=ParseMode.HTML,
                    reply_markup=reply_markup,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.error("sendMessage to chat %s timed out after %.1fs", chat_id, self._timeout)
        except TelegramError as exc:
            logger.error("Failed to send Telegram message to chat %s: %s", chat_id, exc)
        return None

    async def answer_callback(self, callback_id: str) -> None:
        try:
            await asyncio.wait_for(
                self._bot.answer_callback_query(callback_query_id=callback_id),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.error("answerCallbackQuery %s timed out after %.1fs", callback_id, self._timeout)
        except TelegramError as exc:
            logger.error("Failed to answer callback query %s: %s", callback_id, exc)


ALLOWED_UPDATES = ["message", "callback_query"]


async def set_webhook(bot: Bot, url: str) -> bool:
    """Point Telegram at our webhook endpoint. Raises TelegramError on failure."""
    ok = await bot.set_webhook(url=url, allowed_updates=ALLOWED_UPDATES)
    logger.info("Webhook set to %s: %s", url, ok)
    return ok


async def delete_webhook(bot: Bot) -> bool:
    ok = await bot.delete_webhook()
    logger.info("Webhook deleted: %s", ok)
    return ok


async def get_webhook_info(bot: Bot) -> dict[str, Any]:
    info = await bot.get_webhook_info()
    return info.to_dict()
