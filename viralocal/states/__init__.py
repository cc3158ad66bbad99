"""FSM states package."""

from viralocal.states.wizard import WizardStates

__all__ = [
    "WizardStates",
]
