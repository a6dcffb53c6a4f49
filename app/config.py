"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly typed application configuration."""

    gemini_api_key: str | None = Field(default=None, alias="GEMINI_API_KEY")
    api_endpoint: str = Field(
        default="https://generativelanguage.googleapis.com", alias="API_ENDPOINT"
    )
    gemini_model: str = Field(default="gemini-2.5-flash", alias="MODEL")
    gemini_timeout: float = Field(default=20.0, alias="GEMINI_TIMEOUT")
    fallback_delay: float = Field(
        default=1.5, alias="FALLBACK_DELAY", description="Seconds"
    )
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", alias="LOG_LEVEL"
    )
    port: int = Field(default=8000, alias="PORT")
    max_theme_length: int = Field(default=200, alias="MAX_THEME_LENGTH")
    ws_inactivity_timeout: float = Field(
        default=300.0, alias="WS_INACTIVITY_TIMEOUT", description="Seconds"
    )

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    @property
    def api_configured(self) -> bool:
        return bool(self.gemini_api_key)


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of settings."""

    return Settings()
