"""FastAPI application with Telegram webhook integration.

This module provides:
- POST /webhook endpoint for Telegram updates
- Startup: build the dispatcher, set commands and webhook
- Shutdown: delete webhook, close the bot session
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Set

from aiogram.types import BotCommand, Update
from fastapi import FastAPI, Request, Response

from viralocal.bot import get_bot, get_dispatcher, close_bot
from viralocal.config import config
from viralocal.services.sessions import get_sessions

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


BOT_COMMANDS = [
    BotCommand(command="start", description="🏠 Início"),
    BotCommand(command="new", description="🆕 Criar novo anúncio"),
]


# Updates in flight; referenced here so the tasks are not garbage-collected
_update_tasks: Set["asyncio.Task[None]"] = set()


async def process_update(update: Update) -> None:
    """Run one update through the dispatcher, logging anything it raises."""
    try:
        await get_dispatcher().feed_update(bot=get_bot(), update=update)
    except Exception:
        logger.exception(f"Error processing update {update.update_id}")


def schedule_update(update: Update) -> "asyncio.Task[None]":
    """Handle an update in a background task so the webhook replies at once."""
    task = asyncio.create_task(process_update(update))
    _update_tasks.add(task)
    task.add_done_callback(_update_tasks.discard)
    return task


async def drain_updates() -> None:
    """Cancel updates still running and wait for them to finish."""
    pending = list(_update_tasks)
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
        logger.info(f"Cancelled {len(pending)} pending updates")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
    - Build the dispatcher with the wizard routers
    - Set bot commands menu
    - Set Telegram webhook

    Shutdown:
    - Delete Telegram webhook
    - Close bot session
    """
    logger.info("Starting application...")

    bot = get_bot()
    get_dispatcher()

    try:
        await bot.set_my_commands(BOT_COMMANDS)
        logger.info("Bot commands menu set")
    except Exception as e:
        logger.error(f"Failed to set bot commands: {e}")

    if config.disable_webhook:
        logger.warning("Webhook disabled by DISABLE_WEBHOOK=1")
    elif config.webhook_url:
        webhook_url = f"{config.webhook_url}/webhook"
        try:
            await bot.set_webhook(
                url=webhook_url,
                drop_pending_updates=True,
                secret_token=config.webhook_secret_token or None,
            )
            logger.info(f"Webhook set to: {webhook_url}")
        except Exception:
            logger.exception("Failed to set webhook; continuing startup.")
    else:
        logger.warning("WEBHOOK_URL not configured, webhook not set")

    yield

    logger.info("Shutting down application...")

    if (not config.disable_webhook) and config.webhook_url:
        try:
            await bot.delete_webhook()
            logger.info("Webhook deleted")
        except Exception as e:
            logger.error(f"Failed to delete webhook: {e}")

    await drain_updates()
    await close_bot()


# Create FastAPI application
app = FastAPI(
    title="Viralocal",
    description="AI ad generator for local sellers, served as a Telegram bot",
    version="1.0.0",
    lifespan=lifespan,
)


@app.post("/webhook")
async def webhook(request: Request) -> Response:
    """
    Handle incoming Telegram updates via webhook.

    The update is acknowledged at once and handled in a background task.
    """
    try:
        if config.webhook_secret_token:
            request_secret = request.headers.get("X-Telegram-Bot-Api-Secret-Token")
            if request_secret != config.webhook_secret_token:
                logger.warning("Webhook request rejected: invalid secret token")
                return Response(status_code=403)

        update_data = await request.json()
        update = Update.model_validate(update_data)

        schedule_update(update)

        return Response(status_code=200)

    except Exception:
        logger.exception("Error processing webhook update")
        # Return 200 to prevent Telegram from retrying
        return Response(status_code=200)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "sessions": len(get_sessions())}


@app.get("/")
async def root():
    """Root endpoint with basic info."""
    return {
        "name": "Viralocal",
        "version": "1.0.0",
        "status": "running",
    }
