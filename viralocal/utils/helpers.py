"""
Helper utility functions for the wizard and the Telegram bot.

Contains validation and formatting functions used across handlers and services.
"""

import re
import unicodedata
from typing import Optional


# =============================================================================
# IMAGE FORMAT VALIDATION
# =============================================================================

# Supported MIME types for product photos
SUPPORTED_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
})

# Supported file extensions
SUPPORTED_EXTENSIONS = frozenset({
    ".jpg",
    ".jpeg",
    ".png",
    ".webp",
})


def validate_image_format(
    file_name: Optional[str] = None,
    mime_type: Optional[str] = None,
) -> bool:
    """
    Validate that the image format is supported.

    Checks both MIME type and file extension.

    Examples:
        >>> validate_image_format(mime_type="image/png")
        True
        >>> validate_image_format(file_name="produto.JPG")
        True
        >>> validate_image_format(file_name="catalogo.pdf")
        False
    """
    # Check MIME type first (more reliable)
    if mime_type:
        if mime_type.lower() in SUPPORTED_MIME_TYPES:
            return True

    # Fall back to file extension check
    if file_name:
        file_name_lower = file_name.lower()
        for ext in SUPPORTED_EXTENSIONS:
            if file_name_lower.endswith(ext):
                return True

    return False


def guess_mime_type(file_name: Optional[str], mime_type: Optional[str]) -> str:
    """Pick the MIME type to send upstream, defaulting to JPEG."""
    if mime_type and mime_type.lower() in SUPPORTED_MIME_TYPES:
        return "image/jpeg" if mime_type.lower() == "image/jpg" else mime_type.lower()
    if file_name:
        lowered = file_name.lower()
        if lowered.endswith(".png"):
            return "image/png"
        if lowered.endswith(".webp"):
            return "image/webp"
    return "image/jpeg"


def get_supported_formats_text() -> str:
    return "JPG, PNG, WEBP"


# =============================================================================
# TEXT NORMALIZATION
# =============================================================================

def normalize_text(text: str) -> str:
    """
    Lower-case the text and strip diacritics.

    Examples:
        >>> normalize_text("Bolo de Pote de MORANGO")
        'bolo de pote de morango'
        >>> normalize_text("Tênis Açaí")
        'tenis acai'
    """
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def is_blank(value: Optional[str]) -> bool:
    """True for None or whitespace-only strings."""
    return value is None or not value.strip()


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate text to a maximum length, appending suffix if cut."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


# =============================================================================
# PRICE FORMATTING
# =============================================================================

def format_price_brl(raw: str) -> str:
    """
    Format user input as a BRL amount, reading the digits as cents.

    Every non-digit character is dropped first, so the user can type the
    price however they like.

    Examples:
        >>> format_price_brl("2590")
        'R$ 25,90'
        >>> format_price_brl("R$ 1.234,56")
        'R$ 1.234,56'
        >>> format_price_brl("abc")
        ''
    """
    digits = re.sub(r"\D", "", raw or "")
    if not digits:
        return ""

    reais, cents = divmod(int(digits), 100)
    grouped = f"{reais:,}".replace(",", ".")
    return f"R$ {grouped},{cents:02d}"


# =============================================================================
# PROGRESS RENDERING
# =============================================================================

def build_progress_bar(progress: float, total_blocks: int = 10) -> str:
    """
    Render progress as a row of filled and empty blocks.

    Examples:
        >>> build_progress_bar(50)
        '🟩🟩🟩🟩🟩⬜⬜⬜⬜⬜'
    """
    clamped = max(0.0, min(100.0, progress))
    filled_blocks = int((clamped / 100) * total_blocks)
    return "🟩" * filled_blocks + "⬜" * (total_blocks - filled_blocks)
