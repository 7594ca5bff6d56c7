"""Tests for taskbot.adapters.telegram_sender — bounded, non-raising Telegram calls."""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from telegram.constants import ParseMode
from telegram.error import NetworkError

from taskbot.adapters import telegram_sender
from taskbot.adapters.telegram_sender import TelegramMessageSender


@pytest.fixture
def bot():
    return AsyncMock()


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_sends_html_with_markup(self, bot):
        markup = InlineKeyboardMarkup([[InlineKeyboardButton("List", callback_data="task_list")]])
        sender = TelegramMessageSender(bot, timeout=1)

        await sender.send_message(555, "<b>hi</b>", reply_markup=markup)

        bot.send_message.assert_awaited_once_with(
            chat_id=555, text="<b>hi</b>", parse_mode=ParseMode.HTML, reply_markup=markup,
        )

    @pytest.mark.asyncio
    async def test_telegram_error_is_swallowed(self, bot):
        bot.send_message.side_effect = NetworkError("connection reset")
        sender = TelegramMessageSender(bot, timeout=1)
        assert await sender.send_message(555, "hi") is None

    @pytest.mark.asyncio
    async def test_slow_call_times_out(self):
        async def _hang(**kwargs):
            await asyncio.sleep(5)

        bot = MagicMock()
        bot.send_message = _hang
        sender = TelegramMessageSender(bot, timeout=0.01)
        assert await sender.send_message(555, "hi") is None

    def test_default_timeout_from_settings(self, bot):
        from taskbot.config import settings
        sender = TelegramMessageSender(bot)
        assert sender._timeout == settings.SEND_TIMEOUT_SECONDS


class TestAnswerCallback:
    @pytest.mark.asyncio
    async def test_answers(self, bot):
        sender = TelegramMessageSender(bot, timeout=1)
        await sender.answer_callback("cb-1")
        bot.answer_callback_query.assert_awaited_once_with(callback_query_id="cb-1")

    @pytest.mark.asyncio
    async def test_failure_is_swallowed(self, bot):
        bot.answer_callback_query.side_effect = NetworkError("gone")
        sender = TelegramMessageSender(bot, timeout=1)
        await sender.answer_callback("cb-1")


class TestWebhookHelpers:
    @pytest.mark.asyncio
    async def test_set_webhook_limits_update_types(self, bot):
        bot.set_webhook.return_value = True
        assert await telegram_sender.set_webhook(bot, "https://example.com/api/telegram/webhook")
        bot.set_webhook.assert_awaited_once_with(
            url="https://example.com/api/telegram/webhook",
            allowed_updates=["message", "callback_query"],
        )

    @pytest.mark.asyncio
    async def test_get_webhook_info(self, bot):
        info = MagicMock()
        info.to_dict.return_value = {"url": "https://example.com", "pending_update_count": 0}
        bot.get_webhook_info.return_value = info
        assert await telegram_sender.get_webhook_info(bot) == {
            "url": "https://example.com", "pending_update_count": 0,
        }
