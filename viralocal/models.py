"""Wizard and campaign data model."""

from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import Dict, Optional, Union


class WizardStep(IntEnum):
    """Wizard screens in navigation order.

    PROCESSING is never stored as the current step: generation is shown as
    a loading overlay on top of TECHNICAL_DETAILS.
    """

    HOME = 0
    DESCRIPTION_INPUT = 1
    DYNAMIC_QUESTION = 2
    TECHNICAL_DETAILS = 3
    PROCESSING = 4
    RESULTS = 5


@dataclass(frozen=True)
class CampaignInput:
    """Everything the user typed or uploaded for one ad."""

    product_image: Optional[bytes] = None
    image_mime_type: str = "image/jpeg"
    description: str = ""
    dynamic_question: Optional[str] = None
    dynamic_answer: str = ""
    price: str = ""
    contact_phone: str = ""
    delivery: bool = False
    location: str = ""

    @classmethod
    def field_names(cls) -> frozenset:
        return frozenset(f.name for f in fields(cls))


# Export file names, in the order results are shown to the user
DESIGN_FILENAME = "viralocal-design.jpg"
FEED_FILENAME = "viralocal-clean-feed.jpg"
STORY_FILENAME = "viralocal-clean-story.jpg"


@dataclass(frozen=True)
class CampaignResult:
    """Generated ad copy and the three banner variants."""

    copy: str
    banner_square: bytes
    banner_story: bytes
    banner_design: bytes

    def __post_init__(self) -> None:
        missing = [f.name for f in fields(self) if getattr(self, f.name) is None]
        if missing:
            raise ValueError(f"CampaignResult fields missing: {', '.join(missing)}")

    def files(self) -> Dict[str, bytes]:
        """Banner images keyed by their download file name."""
        return {
            DESIGN_FILENAME: self.banner_design,
            FEED_FILENAME: self.banner_square,
            STORY_FILENAME: self.banner_story,
        }


@dataclass(frozen=True)
class WizardRunState:
    """Snapshot of one wizard session."""

    step: WizardStep = WizardStep.HOME
    is_loading: bool = False
    loading_message: str = ""
    progress: float = 0
    data: CampaignInput = field(default_factory=CampaignInput)
    result: Optional[CampaignResult] = None
    error: Optional[str] = None

    @property
    def is_processing(self) -> bool:
        """True while the campaign generation overlay is up."""
        return self.is_loading and self.step == WizardStep.TECHNICAL_DETAILS


@dataclass(frozen=True)
class GenericTrend:
    """Art direction text found by search or taken from a fallback."""

    text: str


@dataclass(frozen=True)
class TemplateMatch:
    """The description matched a hard-coded banner template."""

    template_id: str


DesignTrend = Union[GenericTrend, TemplateMatch]
