"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

API_KEY_ENV_VAR = "API_KEY"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_key: str | None = None
    ai_provider: str = "gemini"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_analysis_model: str = "gemini-3-pro-preview"
    gemini_image_model: str = "gemini-2.5-flash-image"
    openai_analysis_model: str = "gpt-5.2"
    openai_image_model: str = "gpt-5.2"
    request_timeout_seconds: float = 120.0
    camera_enabled: bool = True
    camera_index: int = 0
    camera_width: int = 1280
    camera_height: int = 720
    camera_mirror: bool = True
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def provider_models(self) -> tuple[str, str]:
        """Return the (analysis, image) model names for the active provider."""
        if self.ai_provider == "openai":
            return self.openai_analysis_model, self.openai_image_model
        return self.gemini_analysis_model, self.gemini_image_model


def resolve_api_key(settings: Settings) -> str | None:
    """Read the model API key at call time, preferring the live environment."""
    raw = os.getenv(API_KEY_ENV_VAR) or settings.api_key
    if raw is None:
        return None
    cleaned = raw.strip()
    return cleaned or None
