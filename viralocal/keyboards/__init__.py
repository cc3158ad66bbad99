"""Keyboards package."""

from viralocal.keyboards.inline import (
    CallbackData,
    home_keyboard,
    delivery_keyboard,
    retry_keyboard,
    new_ad_keyboard,
)

__all__ = [
    "CallbackData",
    "home_keyboard",
    "delivery_keyboard",
    "retry_keyboard",
    "new_ad_keyboard",
]
