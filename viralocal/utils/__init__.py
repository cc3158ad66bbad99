# Utility functions

from viralocal.utils.helpers import (
    validate_image_format,
    guess_mime_type,
    get_supported_formats_text,
    normalize_text,
    is_blank,
    truncate_text,
    format_price_brl,
    build_progress_bar,
    SUPPORTED_MIME_TYPES,
    SUPPORTED_EXTENSIONS,
)

__all__ = [
    # Validation
    "validate_image_format",
    "guess_mime_type",
    "get_supported_formats_text",
    "SUPPORTED_MIME_TYPES",
    "SUPPORTED_EXTENSIONS",
    # Text
    "normalize_text",
    "is_blank",
    "truncate_text",
    # Price
    "format_price_brl",
    # Progress
    "build_progress_bar",
]
