"""
Taskbot — Entry Point.

    python main.py serve                  start the webhook + REST server
    python main.py register-webhook       point Telegram at TELEGRAM_WEBHOOK_URL
    python main.py register-webhook --delete
"""

import asyncio
import json
import logging

import typer
import uvicorn
from telegram import Bot
from telegram.error import TelegramError

from taskbot.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

cli = typer.Typer(help="Task manager bot: webhook + REST API")


@cli.command()
def serve(
    host: str = typer.Option(settings.HOST, help="Server host address"),
    port: int = typer.Option(settings.PORT, help="Server port"),
) -> None:
    """Start the HTTP server."""
    from taskbot.api.app import build_app

    logger.info("Starting Taskbot on %s:%d", host, port)
    uvicorn.run(build_app(), host=host, port=port, log_level=settings.LOG_LEVEL.lower())


async def _register(delete: bool) -> int:
    from taskbot.adapters import telegram_sender

    async with Bot(token=settings.TELEGRAM_BOT_TOKEN) as bot:
        if delete:
            typer.echo("Deleting existing webhook...")
            await telegram_sender.delete_webhook(bot)
            typer.echo("Webhook deleted successfully.")

        typer.echo(f"Setting webhook to: {settings.TELEGRAM_WEBHOOK_URL}")
        await telegram_sender.set_webhook(bot, settings.TELEGRAM_WEBHOOK_URL)
        typer.echo("Webhook set successfully!")

        info = await telegram_sender.get_webhook_info(bot)
        typer.echo("Webhook info:")
        for key, value in info.items():
            if isinstance(value, (dict, list)):
                value = json.dumps(value)
            typer.echo(f"  {key}: {value}")
    return 0


@cli.command("register-webhook")
def register_webhook(
    delete: bool = typer.Option(False, "--delete", help="Delete the webhook before setting it"),
) -> None:
    """Register the Telegram bot webhook."""
    if not settings.TELEGRAM_WEBHOOK_URL:
        typer.echo(
            "Telegram webhook URL not configured. "
            "Please set TELEGRAM_WEBHOOK_URL in your .env file.",
            err=True,
        )
        raise typer.Exit(1)

    try:
        code = asyncio.run(_register(delete))
    except TelegramError as exc:
        typer.echo(f"Failed to register webhook: {exc}", err=True)
        raise typer.Exit(1)
    raise typer.Exit(code)


if __name__ == "__main__":
    cli()
