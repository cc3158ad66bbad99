"""Wizard state machine driving the campaign orchestrator.

The session is held as an immutable WizardRunState snapshot. Every change
goes through WizardMachine._commit, which swaps the snapshot and notifies
listeners, so there is exactly one writer.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Tuple

from viralocal.models import CampaignInput, WizardRunState, WizardStep
from viralocal.services.campaign import CampaignGenerationError, CampaignOrchestrator
from viralocal.services.progress import (
    PROGRESS_COMPLETE,
    PROGRESS_SEED,
    ProgressSimulator,
)
from viralocal.templates.prompts import QUESTION_WIZARD_FALLBACK
from viralocal.utils.helpers import is_blank

logger = logging.getLogger(__name__)


QUESTION_LOADING_MESSAGE = "Analisando seu produto com IA..."
CAMPAIGN_LOADING_MESSAGE = "Criando arte viral e copy persuasiva..."

GENERATION_ERROR_MESSAGE = "Ocorreu um erro ao gerar o anúncio. Tente novamente."

# Fields that must be filled before leaving each step
REQUIRED_FIELDS: Dict[WizardStep, Tuple[str, ...]] = {
    WizardStep.DESCRIPTION_INPUT: ("product_image", "description"),
    WizardStep.DYNAMIC_QUESTION: ("dynamic_answer", "price"),
    WizardStep.TECHNICAL_DETAILS: ("contact_phone", "location"),
}

VALIDATION_MESSAGES: Dict[WizardStep, str] = {
    WizardStep.DESCRIPTION_INPUT: "Por favor, adicione uma foto e descrição.",
    WizardStep.DYNAMIC_QUESTION: "Responda a pergunta e informe o valor.",
    WizardStep.TECHNICAL_DETAILS: "Preencha os dados de contato.",
}


StateListener = Callable[[WizardRunState], None]


class WizardValidationError(Exception):
    """Raised when the current step is missing required input."""

    def __init__(self, step: WizardStep, missing: List[str], message: str):
        self.step = step
        self.missing = missing
        self.message = message
        super().__init__(
            f"Cannot leave {step.name}: missing {', '.join(missing)}"
        )


def missing_fields(step: WizardStep, data: CampaignInput) -> List[str]:
    """
    List the required fields of a step that are still empty.

    Strings count as empty when blank; the image counts as empty when None
    or zero bytes.
    """
    missing = []
    for name in REQUIRED_FIELDS.get(step, ()):
        value = getattr(data, name)
        if isinstance(value, str):
            if is_blank(value):
                missing.append(name)
        elif not value:
            missing.append(name)
    return missing


class WizardMachine:
    """Step transitions, validation gates and loading state for one session."""

    def __init__(
        self,
        orchestrator: CampaignOrchestrator,
        tick_interval: float = 0.15,
        completion_hold: float = 0.5,
    ):
        self.orchestrator = orchestrator
        self.completion_hold = completion_hold

        self._state = WizardRunState()
        self._listeners: List[StateListener] = []
        # Bumped on reset; completions from an older epoch are dropped
        self._epoch = 0
        self._progress = ProgressSimulator(self._on_progress_tick, tick_interval)

    @property
    def state(self) -> WizardRunState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for new snapshots. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    # User actions
    # -------------------------------------------------------------------------

    def update_field(self, key: str, value: Any) -> WizardRunState:
        """
        Replace one CampaignInput field.

        Raises:
            KeyError: key is not a CampaignInput field
        """
        if key not in CampaignInput.field_names():
            raise KeyError(key)

        if self._state.is_loading:
            logger.warning(f"Ignoring update of {key} while loading")
            return self._state

        return self._apply(data=replace(self._state.data, **{key: value}), error=None)

    async def advance(self) -> WizardRunState:
        """
        Move to the next step if the current one is complete.

        Raises:
            WizardValidationError: required input of the current step is missing
            CampaignGenerationError: the campaign could not be generated
        """
        if self._state.is_loading:
            logger.warning("Advance requested while loading, ignoring")
            return self._state

        step = self._state.step

        if step == WizardStep.HOME:
            return self._apply(step=WizardStep.DESCRIPTION_INPUT, error=None)

        if step == WizardStep.DESCRIPTION_INPUT:
            return await self._submit_description()

        if step == WizardStep.DYNAMIC_QUESTION:
            self._require(step)
            return self._apply(step=WizardStep.TECHNICAL_DETAILS, error=None)

        if step == WizardStep.TECHNICAL_DETAILS:
            return await self._generate_campaign()

        if step == WizardStep.RESULTS:
            return self.reset()

        raise ValueError(f"Cannot advance from {step.name}")

    def reset(self) -> WizardRunState:
        """Drop the session and start over from the home screen."""
        self._epoch += 1
        self._progress.stop()
        logger.info("Wizard session reset")
        return self._commit(WizardRunState())

    # -------------------------------------------------------------------------
    # Transitions with AI calls
    # -------------------------------------------------------------------------

    async def _submit_description(self) -> WizardRunState:
        self._require(WizardStep.DESCRIPTION_INPUT)

        data = self._state.data
        epoch = self._epoch
        self._start_loading(QUESTION_LOADING_MESSAGE)

        try:
            question = await self.orchestrator.fetch_follow_up_question(
                data.description,
                data.product_image,
                data.image_mime_type,
            )
        except asyncio.CancelledError:
            if epoch == self._epoch:
                self._stop_loading()
            raise
        except Exception as e:
            logger.error(f"Follow-up question failed: {e}")
            question = QUESTION_WIZARD_FALLBACK

        if epoch != self._epoch:
            logger.info("Session was reset during question generation, discarding result")
            return self._state

        if is_blank(question):
            question = QUESTION_WIZARD_FALLBACK

        return self._stop_loading(
            step=WizardStep.DYNAMIC_QUESTION,
            data=replace(self._state.data, dynamic_question=question),
        )

    async def _generate_campaign(self) -> WizardRunState:
        self._require(WizardStep.TECHNICAL_DETAILS)

        data = self._state.data
        epoch = self._epoch
        self._start_loading(CAMPAIGN_LOADING_MESSAGE)

        try:
            result = await self.orchestrator.generate_campaign(data)
        except asyncio.CancelledError:
            if epoch == self._epoch:
                self._stop_loading()
            raise
        except Exception as e:
            if epoch != self._epoch:
                logger.info(f"Discarding generation failure from a reset session: {e}")
                return self._state

            logger.error(f"Campaign generation failed: {e}")
            self._stop_loading(error=GENERATION_ERROR_MESSAGE)
            if isinstance(e, CampaignGenerationError):
                raise
            raise CampaignGenerationError(str(e)) from e

        if epoch != self._epoch:
            logger.info("Session was reset during generation, discarding result")
            return self._state

        # Show 100% briefly before revealing the results
        self._progress.stop()
        self._apply(progress=PROGRESS_COMPLETE)
        await asyncio.sleep(self.completion_hold)

        if epoch != self._epoch:
            return self._state

        return self._stop_loading(step=WizardStep.RESULTS, result=result)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require(self, step: WizardStep) -> None:
        missing = missing_fields(step, self._state.data)
        if missing:
            message = VALIDATION_MESSAGES[step]
            self._apply(error=message)
            raise WizardValidationError(step, missing, message)

    def _start_loading(self, message: str) -> None:
        self._apply(
            is_loading=True,
            loading_message=message,
            progress=PROGRESS_SEED,
            error=None,
        )
        self._progress.start(PROGRESS_SEED)

    def _stop_loading(self, **changes: Any) -> WizardRunState:
        self._progress.stop()
        return self._apply(is_loading=False, loading_message="", **changes)

    def _on_progress_tick(self, value: float) -> None:
        if self._state.is_loading:
            self._apply(progress=value)

    def _apply(self, **changes: Any) -> WizardRunState:
        return self._commit(replace(self._state, **changes))

    def _commit(self, new_state: WizardRunState) -> WizardRunState:
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception as e:
                logger.error(f"State listener failed: {e}")
        return new_state
