"""Long-polling runner for local development.

Run with ``python -m viralocal.polling``. Production uses the webhook app
in viralocal.main.
"""

import asyncio
import logging

from viralocal.bot import get_bot, get_dispatcher, close_bot
from viralocal.main import BOT_COMMANDS

logger = logging.getLogger(__name__)


async def run_polling() -> None:
    bot = get_bot()
    dp = get_dispatcher()

    # Polling and webhook are mutually exclusive on Telegram's side
    await bot.delete_webhook(drop_pending_updates=True)
    await bot.set_my_commands(BOT_COMMANDS)

    logger.info("Starting long polling")
    try:
        await dp.start_polling(bot)
    finally:
        await close_bot()


def main() -> None:
    # Logging is configured on import of viralocal.main
    asyncio.run(run_polling())


if __name__ == "__main__":
    main()
