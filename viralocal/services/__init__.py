# Business logic services

from viralocal.services.ai_gateway import AIGateway, GatewayError, OpenAIGateway
from viralocal.services.campaign import (
    BannerKind,
    CampaignGenerationError,
    CampaignOrchestrator,
)
from viralocal.services.progress import ProgressSimulator, loading_caption, next_progress
from viralocal.services.wizard import (
    WizardMachine,
    WizardValidationError,
    missing_fields,
)

__all__ = [
    "AIGateway",
    "GatewayError",
    "OpenAIGateway",
    "BannerKind",
    "CampaignGenerationError",
    "CampaignOrchestrator",
    "ProgressSimulator",
    "loading_caption",
    "next_progress",
    "WizardMachine",
    "WizardValidationError",
    "missing_fields",
]
