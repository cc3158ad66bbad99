"""Handlers for /start, /new and the home screen."""

import logging

from aiogram import Router, F
from aiogram.filters import Command, CommandStart
from aiogram.types import Message, CallbackQuery
from aiogram.fsm.context import FSMContext

from viralocal.keyboards.inline import CallbackData, home_keyboard
from viralocal.models import WizardStep
from viralocal.services.sessions import get_sessions
from viralocal.states.wizard import WizardStates
from viralocal.utils.helpers import get_supported_formats_text

logger = logging.getLogger(__name__)

router = Router(name="start")


WELCOME_MESSAGE = """
⚡ <b>Viralocal</b>

Transforme fotos simples de produtos em anúncios profissionais de alta conversão em segundos usando Inteligência Artificial.

<b>Você recebe:</b>
• ✍️ Uma legenda pronta para Facebook/OLX
• 🖼 Uma arte de divulgação com preço e contato
• 📸 Fotos limpas para feed e story
"""

PRODUCT_PROMPT = (
    "📸 <b>Passo 1 de 3: seu produto</b>\n\n"
    "Envie uma foto do produto e uma descrição curta.\n\n"
    "💡 <i>Ex: Bolo de pote de chocolate com morango, feito hoje, super cremoso...</i>\n\n"
    f"📎 <i>Formatos aceitos: {get_supported_formats_text()}</i>"
)


async def open_wizard(message: Message, state: FSMContext, chat_id: int) -> None:
    """Reset the chat's session and move it to the product step."""
    machine = get_sessions().get(chat_id)
    if machine.state.step != WizardStep.HOME:
        machine.reset()

    await machine.advance()
    await state.set_state(WizardStates.waiting_product)

    await message.answer(PRODUCT_PROMPT)


@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext) -> None:
    """
    Handle /start command.

    Drops any previous session and shows the home screen.
    """
    await state.clear()
    get_sessions().drop(message.chat.id)

    logger.info(
        f"User started bot: {message.from_user.id if message.from_user else None} "
        f"in chat {message.chat.id}"
    )

    await message.answer(
        text=WELCOME_MESSAGE,
        reply_markup=home_keyboard(),
    )


@router.message(Command("new"))
async def cmd_new(message: Message, state: FSMContext) -> None:
    """Start a new ad from scratch."""
    await open_wizard(message, state, message.chat.id)


@router.callback_query(F.data.in_({CallbackData.START, CallbackData.NEW_AD}))
async def start_wizard(callback: CallbackQuery, state: FSMContext) -> None:
    """Handle 'Criar Novo Anúncio' buttons."""
    await callback.answer()
    if callback.message is None:
        return

    await open_wizard(callback.message, state, callback.message.chat.id)
