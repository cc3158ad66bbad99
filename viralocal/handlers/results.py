"""Handlers that run campaign generation and deliver the results."""

import logging

from aiogram import Router, F
from aiogram.exceptions import TelegramAPIError
from aiogram.types import BufferedInputFile, CallbackQuery, Message
from aiogram.fsm.context import FSMContext

from viralocal.config import config
from viralocal.keyboards.inline import CallbackData, new_ad_keyboard, retry_keyboard
from viralocal.models import (
    CampaignResult,
    DESIGN_FILENAME,
    FEED_FILENAME,
    STORY_FILENAME,
    WizardStep,
)
from viralocal.services.campaign import CampaignGenerationError
from viralocal.services.sessions import get_sessions
from viralocal.services.wizard import WizardValidationError
from viralocal.states.wizard import WizardStates
from viralocal.utils.progress_animation import ProgressMessage

logger = logging.getLogger(__name__)

router = Router(name="results")


BANNER_CAPTIONS = {
    DESIGN_FILENAME: "🎨 <b>Arte de divulgação</b> com preço e contato",
    FEED_FILENAME: "📸 <b>Foto limpa para feed</b> (1:1)",
    STORY_FILENAME: "📱 <b>Foto limpa para story</b> (9:16)",
}

RESULTS_HEADER = "✅ <b>Seu anúncio está pronto!</b>\n\nLegenda para copiar e colar:"

RESULTS_FOOTER = (
    "💡 <i>Baixe as imagens e publique no Facebook, OLX, Instagram ou WhatsApp.</i>"
)

SESSION_EXPIRED_ANSWER = "Sua sessão expirou. Use /new para começar de novo."


async def send_results(message: Message, result: CampaignResult) -> None:
    """Send the copy and the three banners to the chat."""
    await message.answer(RESULTS_HEADER)
    # Model output is sent as plain text so stray markup can't break parsing
    await message.answer(result.copy, parse_mode=None)

    for filename, image_bytes in result.files().items():
        await message.answer_document(
            document=BufferedInputFile(image_bytes, filename=filename),
            caption=BANNER_CAPTIONS[filename],
        )

    await message.answer(RESULTS_FOOTER, reply_markup=new_ad_keyboard())


async def run_generation(callback: CallbackQuery, state: FSMContext) -> None:
    """Advance the wizard out of TechnicalDetails and report the outcome."""
    message = callback.message
    if message is None:
        await callback.answer()
        return

    machine = get_sessions().peek(message.chat.id)
    if machine is None:
        await callback.answer(SESSION_EXPIRED_ANSWER)
        return

    if machine.state.is_loading:
        await callback.answer("⏳ Já estou criando seu anúncio...")
        return
    if machine.state.step != WizardStep.TECHNICAL_DETAILS:
        await callback.answer("Este anúncio já foi finalizado.")
        return

    await callback.answer("Criando seu anúncio! ⏳")

    try:
        await message.edit_reply_markup(reply_markup=None)
    except TelegramAPIError as e:
        logger.debug(f"Could not remove keyboard: {e}")

    try:
        async with ProgressMessage(message, machine, config.progress_render_seconds):
            await machine.advance()
    except WizardValidationError as e:
        await message.answer(f"❌ {e.message}")
        if "contact_phone" in e.missing:
            await state.set_state(WizardStates.waiting_phone)
        elif "location" in e.missing:
            await state.set_state(WizardStates.waiting_location)
        return
    except CampaignGenerationError as e:
        logger.error(f"Generation failed in chat {message.chat.id}: {e}")
        await message.answer(
            f"❌ {machine.state.error or e}",
            reply_markup=retry_keyboard(),
        )
        return

    result = machine.state.result
    # Session may have been reset while generating
    if machine.state.step != WizardStep.RESULTS or result is None:
        return

    await state.set_state(WizardStates.showing_results)
    await send_results(message, result)

    # The result has been delivered; the images are not kept
    get_sessions().drop(message.chat.id)


@router.callback_query(
    WizardStates.choosing_delivery,
    F.data.in_({CallbackData.DELIVERY_YES, CallbackData.DELIVERY_NO}),
)
async def choose_delivery(callback: CallbackQuery, state: FSMContext) -> None:
    """Store the delivery choice and start generation."""
    if callback.message is not None:
        machine = get_sessions().peek(callback.message.chat.id)
        if machine is not None and not machine.state.is_loading:
            machine.update_field("delivery", callback.data == CallbackData.DELIVERY_YES)

    await run_generation(callback, state)


@router.callback_query(WizardStates.choosing_delivery, F.data == CallbackData.RETRY)
async def retry_generation(callback: CallbackQuery, state: FSMContext) -> None:
    await run_generation(callback, state)
