"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTEPLANNER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Route Planner API"
    api_prefix: str = "/api"

    # Gemini configuration
    gemini_api_key: Optional[str] = Field(
        default=None,
        description="Access key for the Gemini generateContent API.",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the Gemini REST API.",
    )
    extraction_model: str = Field(
        default="gemini-3-pro-preview",
        description="Model used to read client records out of PDF documents.",
    )
    sequencing_model: str = Field(
        default="gemini-3-flash-preview",
        description="Model used to order selected clients into a visiting sequence.",
    )
    llm_timeout_seconds: float = Field(
        default=60.0,
        gt=0.0,
        description="Deadline for a whole Gemini call, retries and backoff included.",
    )
    llm_max_retries: int = Field(default=2, ge=0)
    llm_backoff_seconds: float = Field(default=1.0, ge=0.0)

    max_pdf_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1,
        description="Largest PDF accepted for extraction.",
    )

    # Defaults applied to extracted records
    default_neighborhood: str = "Centro"
    default_city: str = "Natal"
    default_state: str = "RN"
    default_country: str = "Brasil"
    whatsapp_default_area_code: str = Field(default="84", pattern=r"^\d*$")
    whatsapp_country_code: str = Field(default="55", pattern=r"^\d*$")

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            # Try comma-separated
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            # Single value
            if value.strip():
                return (value.strip(),)
        return tuple()

    @property
    def has_gemini_credential(self) -> bool:
        key = (self.gemini_api_key or "").strip()
        return bool(key) and key != "undefined"


settings = Settings()
