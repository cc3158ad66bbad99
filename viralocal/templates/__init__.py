# Prompt templates

from viralocal.templates.banners import (
    BannerTemplate,
    BANNER_TEMPLATES,
    get_banner_template_by_id,
    find_banner_template,
)

__all__ = [
    "BannerTemplate",
    "BANNER_TEMPLATES",
    "get_banner_template_by_id",
    "find_banner_template",
]
