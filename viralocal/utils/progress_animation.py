"""Progress message shown in the chat while the wizard is loading."""

import asyncio
import logging
from typing import Optional

from aiogram.exceptions import TelegramAPIError
from aiogram.types import Message

from viralocal.models import WizardRunState
from viralocal.services.progress import loading_caption
from viralocal.services.wizard import WizardMachine
from viralocal.utils.helpers import build_progress_bar

logger = logging.getLogger(__name__)


def build_loading_text(state: WizardRunState) -> str:
    """Build the progress message text for a loading snapshot."""
    if state.is_processing:
        caption = loading_caption(state.progress)
        emoji = "🎨"
    else:
        caption = state.loading_message
        emoji = "🔍"

    return (
        f"{emoji} <b>{caption}</b>\n\n"
        f"{build_progress_bar(state.progress)} {round(state.progress)}%"
    )


class ProgressMessage:
    """
    Chat message mirroring the wizard's progress.

    Telegram rate-limits edits, so the message is re-rendered on its own
    interval rather than on every simulator tick.

    Usage:
        async with ProgressMessage(message, machine, render_interval=2.0):
            await machine.advance()
    """

    def __init__(
        self,
        message: Message,
        machine: WizardMachine,
        render_interval: float = 2.0,
    ):
        self.message = message
        self.machine = machine
        self.render_interval = render_interval

        self.sent: Optional[Message] = None
        self._last_text: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    async def __aenter__(self) -> "ProgressMessage":
        # The first render happens after advance() has flipped the loading flag
        self._task = asyncio.create_task(self._render_loop())
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        if self.sent is not None:
            try:
                await self.sent.delete()
            except TelegramAPIError as e:
                logger.debug(f"Could not delete progress message: {e}")

    async def _render_loop(self) -> None:
        try:
            # Let advance() start loading before the first render
            await asyncio.sleep(0)
            while True:
                await self._render()
                await asyncio.sleep(self.render_interval)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Error in progress render loop: {e}")

    async def _render(self) -> None:
        state = self.machine.state
        if not state.is_loading:
            return

        text = build_loading_text(state)
        if text == self._last_text:
            return

        try:
            if self.sent is None:
                self.sent = await self.message.answer(text)
            else:
                await self.sent.edit_text(text)
            self._last_text = text
        except TelegramAPIError as e:
            logger.error(f"Failed to update progress message: {e}")
