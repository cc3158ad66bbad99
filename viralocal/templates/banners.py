"""
Hard-coded banner templates for known product niches.

A template replaces the searched art direction when the product
description contains one of its trigger phrases. Triggers are written
already normalized: lower case, no accents.

Each template contains:
- id: unique identifier (do not change)
- name: human readable label
- triggers: phrases matched against the normalized description
- prompt: design banner prompt with {contact} and {price} placeholders
"""

from dataclasses import dataclass
from typing import List, Optional

from viralocal.utils.helpers import normalize_text


@dataclass(frozen=True)
class BannerTemplate:
    """Brand template for the design banner."""

    id: str
    name: str
    triggers: tuple
    prompt: str

    def matches(self, description: str) -> bool:
        normalized = normalize_text(description)
        return any(trigger in normalized for trigger in self.triggers)

    def render(self, contact: str, price: str) -> str:
        return self.prompt.format(contact=contact, price=price)


BANNER_TEMPLATES: List[BannerTemplate] = [
    BannerTemplate(
        id="bolo_de_pote_v1",
        name="Bolo de Pote V1",
        triggers=("bolo de pote", "bolo no pote"),
        prompt=(
            "Act as a Senior Art Director.\n"
            "Task: create a promotional ad for \"Bolo de Pote\" (cake in a jar) "
            "following a STRICT BRAND TEMPLATE.\n\n"
            "[BRAND VISUAL IDENTITY - \"Bolo de Pote V1\"]\n"
            "- Background: deep burgundy / wine red texture, rich and premium.\n"
            "- Elements: glossy 3D hearts in rose gold and pink floating behind "
            "the product with depth of field.\n"
            "- Base: rustic beige jute mat under the jar.\n"
            "- Props: fresh red strawberries scattered near the base of the jar.\n"
            "- Badge: gold seal on the left side.\n\n"
            "[PRODUCT INTEGRATION]\n"
            "- Use the cake jar from the provided image, placed centrally on the mat.\n"
            "- Make the layers look creamy and delicious. Soft, warm lighting.\n\n"
            "[TEXT OVERLAY - RENDER THIS TEXT CLEARLY]\n"
            "- Top title: \"Experimente nosso\" (small elegant serif, white)\n"
            "- Main title: \"Bolo de Pote\" (large elegant serif, cream)\n"
            "- Call to action: \"PEÇA JÁ! {contact}\" (bottom, bold, white)\n"
            "- Price tag (if it fits): \"{price}\"\n\n"
            "The final image must look like a high-end confectionery flyer."
        ),
    ),
]


def get_banner_template_by_id(template_id: str) -> Optional[BannerTemplate]:
    """
    Get a banner template by its ID.

    Returns:
        BannerTemplate if found, None otherwise
    """
    return next((t for t in BANNER_TEMPLATES if t.id == template_id), None)


def find_banner_template(description: str) -> Optional[BannerTemplate]:
    """
    Return the first template whose trigger appears in the description.

    The match is a plain substring test on the normalized text, so an
    unrelated description that happens to contain a trigger phrase also
    matches.
    """
    return next((t for t in BANNER_TEMPLATES if t.matches(description)), None)
