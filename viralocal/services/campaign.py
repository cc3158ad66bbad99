"""Campaign orchestration over the AI gateway.

Two entry points:
- fetch_follow_up_question: one clarifying question about the product
- generate_campaign: ad copy plus three banners

Every gateway call is wrapped with its own fallback, so sub-call failures
degrade the output instead of failing the operation.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from viralocal.models import (
    CampaignInput,
    CampaignResult,
    DesignTrend,
    GenericTrend,
    TemplateMatch,
)
from viralocal.services.ai_gateway import AIGateway
from viralocal.templates.banners import find_banner_template
from viralocal.templates.prompts import (
    COPY_ERROR_PLACEHOLDER,
    QUESTION_EMPTY_FALLBACK,
    QUESTION_ERROR_FALLBACK,
    TREND_EMPTY_FALLBACK,
    TREND_ERROR_FALLBACK,
    build_clean_square_prompt,
    build_clean_story_prompt,
    build_copy_prompt,
    build_design_prompt,
    build_follow_up_prompt,
    build_trend_search_prompt,
)
from viralocal.utils.helpers import truncate_text

logger = logging.getLogger(__name__)


class CampaignGenerationError(Exception):
    """Raised when generation cannot start because the input is unusable."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Campaign generation failed: {reason}")


class BannerKind(str, Enum):
    """Banner variants produced for every campaign."""

    CLEAN_SQUARE = "clean-square"
    CLEAN_STORY = "clean-story"
    DESIGN_SQUARE = "design-square"


# Output size requested for each banner
BANNER_SIZES = {
    BannerKind.CLEAN_SQUARE: "1024x1024",
    BannerKind.CLEAN_STORY: "1024x1536",
    BannerKind.DESIGN_SQUARE: "1024x1024",
}


class CampaignOrchestrator:
    """Sequences gateway calls for the wizard."""

    def __init__(self, gateway: AIGateway):
        self.gateway = gateway

    async def fetch_follow_up_question(
        self,
        description: str,
        image: Optional[bytes],
        mime_type: str = "image/jpeg",
    ) -> str:
        """
        Ask the model for one short technical question about the product.

        Never raises: an empty answer and a failed call resolve to two
        different fixed questions.
        """
        try:
            response = await self.gateway.generate_text(
                build_follow_up_prompt(description),
                image=image,
                mime_type=mime_type,
            )
        except Exception as e:
            logger.error(f"Error generating follow-up question: {e}")
            return QUESTION_ERROR_FALLBACK

        question = (response or "").strip()
        if not question:
            logger.warning("Follow-up question came back empty, using fallback")
            return QUESTION_EMPTY_FALLBACK
        return question

    async def lookup_design_trend(self, description: str) -> DesignTrend:
        """
        Resolve the art direction for the design banner.

        Descriptions matching a banner template skip the search entirely.
        """
        template = find_banner_template(description)
        if template is not None:
            logger.info(f"Banner template matched: {template.name}")
            return TemplateMatch(template.id)

        try:
            response = await self.gateway.generate_grounded_text(
                build_trend_search_prompt(description),
                enable_search=True,
            )
        except Exception as e:
            logger.error(f"Error fetching design trends: {e}")
            return GenericTrend(TREND_ERROR_FALLBACK)

        trend = (response or "").strip()
        logger.info(f"Design trend found: {truncate_text(trend)}")
        return GenericTrend(trend or TREND_EMPTY_FALLBACK)

    async def generate_copy(self, campaign_input: CampaignInput) -> str:
        try:
            response = await self.gateway.generate_text(build_copy_prompt(campaign_input))
        except Exception as e:
            logger.error(f"Error generating ad copy: {e}")
            return COPY_ERROR_PLACEHOLDER

        copy_text = (response or "").strip()
        if not copy_text:
            logger.warning("Ad copy came back empty, using placeholder")
            return COPY_ERROR_PLACEHOLDER
        return copy_text

    async def generate_banner(
        self,
        image: bytes,
        mime_type: str,
        kind: BannerKind,
        prompt: str,
    ) -> bytes:
        """Edit one banner, returning the untouched source image on any failure."""
        try:
            edited = await self.gateway.edit_image(
                image,
                mime_type,
                prompt,
                size=BANNER_SIZES[kind],
            )
        except Exception as e:
            logger.error(f"Error generating {kind.value} banner: {e}")
            return image

        if not edited:
            logger.warning(f"No image data in {kind.value} banner response")
            return image
        return edited

    async def generate_campaign(self, campaign_input: CampaignInput) -> CampaignResult:
        """
        Produce the copy and the three banners for a filled-in wizard.

        Trend lookup and copy run together first; the trend feeds the
        design banner prompt, so the three image edits start only after
        both have finished.

        Raises:
            CampaignGenerationError: no product image in the input
        """
        image = campaign_input.product_image
        if not image:
            raise CampaignGenerationError("product image is missing")

        logger.info(f"Generating campaign for: {truncate_text(campaign_input.description)}")

        # Join 1: trend + copy. Both branches absorb their own failures.
        design_trend, copy_text = await asyncio.gather(
            self.lookup_design_trend(campaign_input.description),
            self.generate_copy(campaign_input),
        )

        mime_type = campaign_input.image_mime_type
        design_prompt = build_design_prompt(
            design_trend,
            contact=campaign_input.contact_phone,
            price=campaign_input.price,
        )

        # Join 2: three banners. Each falls back to the source image.
        banner_square, banner_story, banner_design = await asyncio.gather(
            self.generate_banner(
                image,
                mime_type,
                BannerKind.CLEAN_SQUARE,
                build_clean_square_prompt(campaign_input.description),
            ),
            self.generate_banner(
                image,
                mime_type,
                BannerKind.CLEAN_STORY,
                build_clean_story_prompt(),
            ),
            self.generate_banner(
                image,
                mime_type,
                BannerKind.DESIGN_SQUARE,
                design_prompt,
            ),
        )

        logger.info("Campaign generated")

        return CampaignResult(
            copy=copy_text,
            banner_square=banner_square,
            banner_story=banner_story,
            banner_design=banner_design,
        )
