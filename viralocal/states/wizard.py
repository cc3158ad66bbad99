"""FSM states for the ad wizard conversation."""

from aiogram.fsm.state import State, StatesGroup


class WizardStates(StatesGroup):
    """Chat states for the ad wizard (Criar novo anúncio).

    Each wizard step may collect several fields, one message per field,
    so a step maps to one or more chat states.
    """

    # DescriptionInput: photo and description, in any order
    waiting_product = State()

    # DynamicQuestion: answer to the AI question, then the price
    waiting_answer = State()
    waiting_price = State()

    # TechnicalDetails: phone, location, then delivery which starts generation
    waiting_phone = State()
    waiting_location = State()
    choosing_delivery = State()

    # Results were delivered
    showing_results = State()
