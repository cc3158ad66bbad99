"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class Config:
    """Application configuration."""

    # Telegram Bot
    bot_token: str
    webhook_url: str
    webhook_secret_token: str
    disable_webhook: bool

    # OpenAI
    openai_api_key: str
    text_model: str
    search_model: str
    image_model: str
    openai_timeout: float

    # Wizard timing
    progress_tick_seconds: float
    completion_hold_seconds: float
    progress_render_seconds: float
    session_ttl_seconds: float

    # App settings
    log_level: str


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def load_config() -> Config:
    """Load configuration from environment variables."""
    return Config(
        bot_token=os.getenv("BOT_TOKEN", ""),
        webhook_url=os.getenv("WEBHOOK_URL", "").rstrip("/"),
        webhook_secret_token=os.getenv("WEBHOOK_SECRET_TOKEN", ""),
        disable_webhook=_env_flag("DISABLE_WEBHOOK"),
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        text_model=os.getenv("TEXT_MODEL", "gpt-4o-mini"),
        search_model=os.getenv("SEARCH_MODEL", "gpt-4o-mini"),
        image_model=os.getenv("IMAGE_MODEL", "gpt-image-1"),
        openai_timeout=float(os.getenv("OPENAI_TIMEOUT", "120")),
        progress_tick_seconds=float(os.getenv("PROGRESS_TICK_SECONDS", "0.15")),
        completion_hold_seconds=float(os.getenv("COMPLETION_HOLD_SECONDS", "0.5")),
        progress_render_seconds=float(os.getenv("PROGRESS_RENDER_SECONDS", "2.0")),
        session_ttl_seconds=float(os.getenv("SESSION_TTL_SECONDS", "3600")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


# Global config instance
config = load_config()
