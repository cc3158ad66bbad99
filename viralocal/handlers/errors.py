"""Dispatcher-level handler for exceptions no router caught."""

import logging
from typing import Optional

from aiogram.exceptions import TelegramAPIError
from aiogram.types import ErrorEvent, InlineKeyboardMarkup, Update

from viralocal.keyboards.inline import new_ad_keyboard, retry_keyboard
from viralocal.models import WizardStep
from viralocal.services.sessions import get_sessions

logger = logging.getLogger(__name__)


ERROR_MESSAGE = (
    "❌ <b>Ocorreu um erro</b>\n\n"
    "Algo deu errado. Tente novamente em instantes."
)


def _chat_id(update: Optional[Update]) -> Optional[int]:
    if update is None:
        return None
    if update.message:
        return update.message.chat.id
    if update.callback_query and update.callback_query.message:
        return update.callback_query.message.chat.id
    return None


def _recovery_keyboard(chat_id: int) -> InlineKeyboardMarkup:
    """Offer a retry when the chat was about to generate, else a fresh start."""
    machine = get_sessions().peek(chat_id)
    if machine is None:
        return new_ad_keyboard()
    state = machine.state
    if state.step == WizardStep.TECHNICAL_DETAILS and not state.is_loading:
        return retry_keyboard()
    return new_ad_keyboard()


async def global_error_handler(event: ErrorEvent) -> bool:
    """Log the failure with its chat and apologise to the user. Always handled."""
    exception = event.exception
    chat_id = _chat_id(event.update)

    logger.error(
        f"Unhandled {type(exception).__name__} in chat {chat_id}: {exception}",
        exc_info=exception,
    )

    if chat_id is None:
        return True

    try:
        from viralocal.bot import get_bot

        await get_bot().send_message(
            chat_id=chat_id,
            text=ERROR_MESSAGE,
            reply_markup=_recovery_keyboard(chat_id),
        )
    except TelegramAPIError as e:
        logger.error(f"Failed to send error message to chat {chat_id}: {e}")

    return True
