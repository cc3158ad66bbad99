"""In-memory wizard sessions, one per chat."""

import logging
import time
from typing import Callable, Dict, Optional

from viralocal.config import config
from viralocal.services.ai_gateway import OpenAIGateway
from viralocal.services.campaign import CampaignOrchestrator
from viralocal.services.wizard import WizardMachine

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Maps chat IDs to their WizardMachine. Nothing survives a restart.

    Sessions untouched for longer than idle_ttl seconds are evicted, unless
    they are still loading. A non-positive idle_ttl disables eviction.
    """

    def __init__(
        self,
        factory: Callable[[], WizardMachine],
        idle_ttl: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._factory = factory
        self._sessions: Dict[int, WizardMachine] = {}
        self._touched: Dict[int, float] = {}
        self.idle_ttl = idle_ttl
        self._clock = clock
        self._last_sweep = clock()

    def get(self, chat_id: int) -> WizardMachine:
        """Return the chat's session, creating it on first use."""
        now = self._clock()
        self._evict_idle(now)

        machine = self._sessions.get(chat_id)
        if machine is None:
            machine = self._factory()
            self._sessions[chat_id] = machine
            logger.info(f"Wizard session created for chat {chat_id}")
        self._touched[chat_id] = now
        return machine

    def peek(self, chat_id: int) -> Optional[WizardMachine]:
        """Return the chat's session if it has one, marking it active. Never creates."""
        now = self._clock()
        self._evict_idle(now)

        machine = self._sessions.get(chat_id)
        if machine is not None:
            self._touched[chat_id] = now
        return machine

    def drop(self, chat_id: int) -> None:
        self._touched.pop(chat_id, None)
        machine = self._sessions.pop(chat_id, None)
        if machine is not None:
            machine.reset()

    def __len__(self) -> int:
        return len(self._sessions)

    def _evict_idle(self, now: float) -> None:
        # Sweeps run at most ten times per TTL
        if self.idle_ttl <= 0 or now - self._last_sweep < self.idle_ttl / 10:
            return
        self._last_sweep = now

        expired = [
            chat_id
            for chat_id, touched in self._touched.items()
            if now - touched > self.idle_ttl
            and not self._sessions[chat_id].state.is_loading
        ]
        for chat_id in expired:
            self.drop(chat_id)
        if expired:
            logger.info(f"Evicted {len(expired)} idle wizard sessions")


# Lazily initialized singletons
_orchestrator: Optional[CampaignOrchestrator] = None
_registry: Optional[SessionRegistry] = None


def get_orchestrator() -> CampaignOrchestrator:
    """Get or create the orchestrator backed by OpenAI."""
    global _orchestrator
    if _orchestrator is None:
        gateway = OpenAIGateway(
            api_key=config.openai_api_key,
            text_model=config.text_model,
            search_model=config.search_model,
            image_model=config.image_model,
            timeout=config.openai_timeout,
        )
        _orchestrator = CampaignOrchestrator(gateway)
        logger.info("Campaign orchestrator created")
    return _orchestrator


def _new_machine() -> WizardMachine:
    return WizardMachine(
        get_orchestrator(),
        tick_interval=config.progress_tick_seconds,
        completion_hold=config.completion_hold_seconds,
    )


def get_sessions() -> SessionRegistry:
    """Get or create the global session registry."""
    global _registry
    if _registry is None:
        _registry = SessionRegistry(_new_machine, idle_ttl=config.session_ttl_seconds)
    return _registry
