"""Application configuration."""

import os
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    ``jwt_secret`` has no default: the app refuses to start without one.
    """

    jwt_secret: str = Field(min_length=16)
    jwt_expiry_days: int = Field(default=7, ge=1)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    user_store: Literal["mongo", "supabase"] = "mongo"
    mongo_uri: str | None = None
    mongo_db: str = "nutrition_planner"
    mongo_timeout_ms: int = 5000
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1-mini"
    cors_origins: str = "http://localhost:5173,http://localhost:3000"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_store_settings(self) -> "Settings":
        if self.user_store == "mongo" and not self.mongo_uri:
            raise ValueError("MONGO_URI is required when USER_STORE=mongo")
        if self.user_store == "supabase" and not (
            self.supabase_url and self.supabase_service_key
        ):
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required "
                "when USER_STORE=supabase"
            )
        return self


def parse_cors_origins(raw: str | None) -> list[str]:
    """Parse allowed CORS origins from env."""
    if raw is None:
        return []
    cleaned = raw.strip()
    if cleaned == "*":
        return ["*"]
    return [chunk.strip() for chunk in cleaned.split(",") if chunk.strip()]
