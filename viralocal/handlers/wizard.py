"""Handlers for the wizard input steps (product, question, contact)."""

import logging
from typing import Optional

from aiogram import Router, F, html
from aiogram.filters import StateFilter
from aiogram.types import Message, PhotoSize
from aiogram.fsm.context import FSMContext

from viralocal.config import config
from viralocal.keyboards.inline import delivery_keyboard, new_ad_keyboard
from viralocal.models import WizardStep
from viralocal.services.sessions import get_sessions
from viralocal.services.wizard import WizardMachine, WizardValidationError, missing_fields
from viralocal.states.wizard import WizardStates
from viralocal.utils.helpers import (
    format_price_brl,
    get_supported_formats_text,
    guess_mime_type,
    validate_image_format,
)
from viralocal.utils.progress_animation import ProgressMessage

logger = logging.getLogger(__name__)

router = Router(name="wizard")

# Free text typed as an answer; slash commands are excluded
SLASH_COMMAND = F.text.startswith("/")
USER_TEXT = F.text & ~SLASH_COMMAND


BUSY_MESSAGE = "⏳ Aguarde, ainda estou trabalhando no seu pedido..."

SESSION_EXPIRED_MESSAGE = "⌛ Sua sessão expirou. Vamos começar um novo anúncio?"

UNKNOWN_COMMAND_MESSAGE = (
    "🤔 Não conheço esse comando.\n\n"
    "Use /new para recomeçar o anúncio ou /start para voltar ao início."
)

ASK_PHOTO_MESSAGE = (
    "📸 Agora envie uma <b>foto do produto</b>.\n\n"
    f"📎 <i>Formatos aceitos: {get_supported_formats_text()}</i>"
)

ASK_DESCRIPTION_MESSAGE = (
    "✍️ Foto recebida! Agora escreva uma <b>descrição curta</b> do produto.\n\n"
    "💡 <i>Ex: Tênis Nike Air, tamanho 42, pouco usado</i>"
)

ASK_PRICE_MESSAGE = (
    "💰 <b>Qual o valor?</b>\n\n"
    "Digite apenas números, os dois últimos são os centavos.\n"
    "💡 <i>Ex: 2590 vira R$ 25,90</i>"
)

ASK_PHONE_MESSAGE = (
    "📲 <b>Passo 3 de 3: contato</b>\n\n"
    "Qual o WhatsApp para os clientes chamarem?"
)

ASK_LOCATION_MESSAGE = (
    "📍 <b>Qual a sua localização?</b>\n\n"
    "💡 <i>Ex: Centro, São Paulo</i>"
)

ASK_DELIVERY_MESSAGE = "🚚 <b>Você faz entrega?</b>\n\nAo escolher, eu começo a criar o anúncio."


async def _active_session(
    message: Message,
    state: FSMContext,
    step: WizardStep,
) -> Optional[WizardMachine]:
    """
    Return the chat's session if it is idle on the expected step.

    A session evicted for inactivity no longer matches the chat's FSM
    state; the user is asked to start over.
    """
    machine = get_sessions().peek(message.chat.id)

    if machine is not None and machine.state.is_loading:
        await message.answer(BUSY_MESSAGE)
        return None

    if machine is None or machine.state.step != step:
        await state.clear()
        await message.answer(SESSION_EXPIRED_MESSAGE, reply_markup=new_ad_keyboard())
        return None

    return machine


@router.message(StateFilter(WizardStates), SLASH_COMMAND)
async def unknown_command(message: Message) -> None:
    """Commands other than /start and /new are never taken as wizard input."""
    await message.answer(UNKNOWN_COMMAND_MESSAGE)


def _question_message(question: str) -> str:
    return (
        "🤖 <b>A IA analisou seu produto</b>\n\n"
        f"<b>{html.quote(question)}</b>\n\n"
        "Responda aqui:"
    )


# =============================================================================
# DESCRIPTION INPUT: photo and description
# =============================================================================

async def _continue_product_step(message: Message, state: FSMContext, machine: WizardMachine) -> None:
    """Ask for whatever is still missing, or submit the product."""
    missing = missing_fields(WizardStep.DESCRIPTION_INPUT, machine.state.data)

    if "product_image" in missing:
        await message.answer(ASK_PHOTO_MESSAGE)
        return
    if "description" in missing:
        await message.answer(ASK_DESCRIPTION_MESSAGE)
        return

    try:
        async with ProgressMessage(message, machine, config.progress_render_seconds):
            await machine.advance()
    except WizardValidationError as e:
        await message.answer(f"❌ {e.message}")
        return

    # Session may have been reset while the question was generated
    if machine.state.step != WizardStep.DYNAMIC_QUESTION:
        return

    await state.set_state(WizardStates.waiting_answer)
    await message.answer(_question_message(machine.state.data.dynamic_question or ""))


@router.message(WizardStates.waiting_product, F.photo)
async def process_photo(message: Message, state: FSMContext) -> None:
    """
    Process the product photo.

    A caption on the photo is taken as the description.
    """
    machine = await _active_session(message, state, WizardStep.DESCRIPTION_INPUT)
    if machine is None:
        return

    # Largest size is last
    photo: PhotoSize = message.photo[-1]
    buffer = await message.bot.download(photo)
    image_bytes = buffer.getvalue()
    logger.info(f"Product photo received in chat {message.chat.id}: {len(image_bytes)} bytes")

    machine.update_field("product_image", image_bytes)
    machine.update_field("image_mime_type", "image/jpeg")
    if message.caption and message.caption.strip():
        machine.update_field("description", message.caption.strip())

    await _continue_product_step(message, state, machine)


@router.message(WizardStates.waiting_product, F.document)
async def process_document_image(message: Message, state: FSMContext) -> None:
    """Process the product photo sent as a file."""
    document = message.document

    if not validate_image_format(document.file_name, document.mime_type):
        await message.answer(
            text=(
                "❌ <b>Formato não suportado</b>\n\n"
                f"Envie uma imagem {get_supported_formats_text()}, "
                "ou mande a foto direto (não como arquivo)."
            ),
        )
        return

    machine = await _active_session(message, state, WizardStep.DESCRIPTION_INPUT)
    if machine is None:
        return

    buffer = await message.bot.download(document)
    image_bytes = buffer.getvalue()
    logger.info(f"Product image file received in chat {message.chat.id}: {len(image_bytes)} bytes")

    machine.update_field("product_image", image_bytes)
    machine.update_field("image_mime_type", guess_mime_type(document.file_name, document.mime_type))
    if message.caption and message.caption.strip():
        machine.update_field("description", message.caption.strip())

    await _continue_product_step(message, state, machine)


@router.message(WizardStates.waiting_product, USER_TEXT)
async def process_description(message: Message, state: FSMContext) -> None:
    """Process the product description."""
    machine = await _active_session(message, state, WizardStep.DESCRIPTION_INPUT)
    if machine is None:
        return

    machine.update_field("description", message.text.strip())
    await _continue_product_step(message, state, machine)


@router.message(WizardStates.waiting_product)
async def invalid_product_input(message: Message) -> None:
    """Handle stickers, voice and other input on the product step."""
    await message.answer(
        "❌ Envie uma foto do produto ou uma descrição em texto."
    )


# =============================================================================
# DYNAMIC QUESTION: answer and price
# =============================================================================

@router.message(WizardStates.waiting_answer, USER_TEXT)
async def process_answer(message: Message, state: FSMContext) -> None:
    machine = await _active_session(message, state, WizardStep.DYNAMIC_QUESTION)
    if machine is None:
        return

    machine.update_field("dynamic_answer", message.text.strip())

    await state.set_state(WizardStates.waiting_price)
    await message.answer(ASK_PRICE_MESSAGE)


@router.message(WizardStates.waiting_price, USER_TEXT)
async def process_price(message: Message, state: FSMContext) -> None:
    """Format the price as BRL and leave the question step."""
    machine = await _active_session(message, state, WizardStep.DYNAMIC_QUESTION)
    if machine is None:
        return

    price = format_price_brl(message.text)
    if not price:
        await message.answer(ASK_PRICE_MESSAGE)
        return

    machine.update_field("price", price)

    try:
        await machine.advance()
    except WizardValidationError as e:
        await message.answer(f"❌ {e.message}")
        if "dynamic_answer" in e.missing:
            await state.set_state(WizardStates.waiting_answer)
        return

    await state.set_state(WizardStates.waiting_phone)
    await message.answer(f"✅ Valor: <b>{html.quote(price)}</b>\n\n{ASK_PHONE_MESSAGE}")


# =============================================================================
# TECHNICAL DETAILS: phone, location, delivery
# =============================================================================

@router.message(WizardStates.waiting_phone, USER_TEXT)
async def process_phone(message: Message, state: FSMContext) -> None:
    machine = await _active_session(message, state, WizardStep.TECHNICAL_DETAILS)
    if machine is None:
        return

    machine.update_field("contact_phone", message.text.strip())

    await state.set_state(WizardStates.waiting_location)
    await message.answer(ASK_LOCATION_MESSAGE)


@router.message(WizardStates.waiting_location, USER_TEXT)
async def process_location(message: Message, state: FSMContext) -> None:
    machine = await _active_session(message, state, WizardStep.TECHNICAL_DETAILS)
    if machine is None:
        return

    machine.update_field("location", message.text.strip())

    await state.set_state(WizardStates.choosing_delivery)
    await message.answer(ASK_DELIVERY_MESSAGE, reply_markup=delivery_keyboard())


@router.message(
    StateFilter(
        WizardStates.waiting_answer,
        WizardStates.waiting_price,
        WizardStates.waiting_phone,
        WizardStates.waiting_location,
    )
)
async def invalid_text_input(message: Message) -> None:
    """Handle non-text input where a text answer is expected."""
    await message.answer("❌ Por favor, responda com uma mensagem de texto.")


@router.message(WizardStates.choosing_delivery)
async def remind_delivery_choice(message: Message) -> None:
    await message.answer(ASK_DELIVERY_MESSAGE, reply_markup=delivery_keyboard())
