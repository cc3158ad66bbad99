"""Shared fixtures: a scriptable AI gateway and wizard factories."""

from typing import List, Optional, Tuple

import pytest

from viralocal.models import CampaignInput
from viralocal.services.ai_gateway import AIGateway, GatewayError
from viralocal.services.campaign import CampaignOrchestrator
from viralocal.services.wizard import WizardMachine


PRODUCT_IMAGE = b"\xff\xd8\xff\xe0original-product-photo"


class FakeGateway(AIGateway):
    """
    In-memory gateway.

    Each capability returns its configured value, or raises GatewayError
    when the matching ``*_fails`` flag is set. ``edit_failures`` lists
    substrings; an edit whose prompt contains one of them fails.
    """

    def __init__(
        self,
        text: str = "Qual o sabor?",
        grounded_text: str = "minimalist studio, blue palette",
        edited_image: Optional[bytes] = b"edited-image",
        text_fails: bool = False,
        grounded_fails: bool = False,
        edit_fails: bool = False,
        edit_failures: Tuple[str, ...] = (),
    ):
        self.text = text
        self.grounded_text = grounded_text
        self.edited_image = edited_image
        self.text_fails = text_fails
        self.grounded_fails = grounded_fails
        self.edit_fails = edit_fails
        self.edit_failures = edit_failures

        self.text_prompts: List[str] = []
        self.grounded_prompts: List[str] = []
        self.edit_prompts: List[str] = []
        self.edit_sizes: List[Optional[str]] = []

    async def generate_text(self, prompt, image=None, mime_type="image/jpeg"):
        self.text_prompts.append(prompt)
        if self.text_fails:
            raise GatewayError("generate_text", "unreachable")
        return self.text

    async def generate_grounded_text(self, prompt, enable_search=True):
        self.grounded_prompts.append(prompt)
        if self.grounded_fails:
            raise GatewayError("generate_grounded_text", "unreachable")
        return self.grounded_text

    async def edit_image(self, image, mime_type, prompt, size=None):
        self.edit_prompts.append(prompt)
        self.edit_sizes.append(size)
        if self.edit_fails or any(marker in prompt for marker in self.edit_failures):
            raise GatewayError("edit_image", "unreachable")
        return self.edited_image


def unreachable_gateway() -> FakeGateway:
    return FakeGateway(text_fails=True, grounded_fails=True, edit_fails=True)


def filled_input(**overrides) -> CampaignInput:
    values = dict(
        product_image=PRODUCT_IMAGE,
        description="Tênis Nike Air",
        dynamic_question="Qual o tamanho?",
        dynamic_answer="Tamanho 42, pouco usado",
        price="R$ 250,00",
        contact_phone="(11) 99999-0000",
        delivery=True,
        location="Centro, São Paulo",
    )
    values.update(overrides)
    return CampaignInput(**values)


def make_machine(gateway: Optional[AIGateway] = None, **kwargs) -> WizardMachine:
    kwargs.setdefault("tick_interval", 0.001)
    kwargs.setdefault("completion_hold", 0)
    return WizardMachine(CampaignOrchestrator(gateway or FakeGateway()), **kwargs)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def orchestrator(gateway: FakeGateway) -> CampaignOrchestrator:
    return CampaignOrchestrator(gateway)
