"""Aiogram Bot and Dispatcher for the ad wizard."""

import logging
from typing import Optional

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage

from viralocal.config import config

logger = logging.getLogger(__name__)

_bot: Optional[Bot] = None
_dp: Optional[Dispatcher] = None


def get_bot() -> Bot:
    """Get or create the Bot. Messages default to HTML parse mode."""
    global _bot
    if _bot is None:
        if not config.bot_token:
            raise ValueError("BOT_TOKEN is not configured")
        _bot = Bot(
            token=config.bot_token,
            default=DefaultBotProperties(parse_mode=ParseMode.HTML),
        )
        logger.info("Telegram bot created")
    return _bot


def get_dispatcher() -> Dispatcher:
    """
    Get or create the Dispatcher with every wizard router attached.

    FSM state is kept in memory, alongside the wizard sessions, so both
    are lost together on restart.
    """
    global _dp
    if _dp is None:
        from viralocal.handlers import register_all_handlers

        _dp = Dispatcher(storage=MemoryStorage())
        register_all_handlers(_dp)
        logger.info("Dispatcher created, wizard handlers registered")
    return _dp


async def close_bot() -> None:
    global _bot
    if _bot is None:
        return
    await _bot.session.close()
    _bot = None
    logger.info("Telegram bot session closed")
