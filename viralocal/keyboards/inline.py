"""Inline keyboards for the bot."""

from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.utils.keyboard import InlineKeyboardBuilder


# Callback data prefixes
class CallbackData:
    """Callback data constants."""

    # Home screen
    START = "wizard:start"

    # Delivery choice, last input before generation
    DELIVERY_YES = "delivery:yes"
    DELIVERY_NO = "delivery:no"

    # Retry generation after a failure
    RETRY = "wizard:retry"

    # Full reset from any screen
    NEW_AD = "wizard:new"


def home_keyboard() -> InlineKeyboardMarkup:
    """Single button that opens the wizard."""
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(
            text="🚀 Criar Novo Anúncio",
            callback_data=CallbackData.START,
        )
    )
    return builder.as_markup()


def delivery_keyboard() -> InlineKeyboardMarkup:
    """
    Ask whether the seller delivers.

    Layout:
    [🚚 Sim, entrego] [📍 Só retirada]
    """
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(
            text="🚚 Sim, entrego",
            callback_data=CallbackData.DELIVERY_YES,
        ),
        InlineKeyboardButton(
            text="📍 Só retirada",
            callback_data=CallbackData.DELIVERY_NO,
        ),
    )
    return builder.as_markup()


def retry_keyboard() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(
            text="🔁 Tentar novamente",
            callback_data=CallbackData.RETRY,
        )
    )
    builder.row(
        InlineKeyboardButton(
            text="🆕 Começar de novo",
            callback_data=CallbackData.NEW_AD,
        )
    )
    return builder.as_markup()


def new_ad_keyboard() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(
            text="🆕 Criar Novo Anúncio",
            callback_data=CallbackData.NEW_AD,
        )
    )
    return builder.as_markup()
