"""
Configuration management for the Anatomy Guru evaluator.

Uses Pydantic Settings for type-safe configuration loading from environment variables.
The API key is optional at load time so the application can start without it;
every evaluation request fails until it is provided.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Values can also come from a local `.env` file. Invalid values
    raise clear validation errors at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Model Provider Configuration
    # ==========================================================================
    api_key: str | None = Field(
        default=None,
        description="API key for the model provider (OpenAI-compatible endpoint)",
    )

    api_base_url: str = Field(
        default="https://zenmux.ai/api/v1",
        description="Base URL for the OpenAI-compatible API",
    )

    model: str = Field(
        default="google/gemini-3-flash-preview",
        description="Multimodal model used to generate evaluation reports",
    )

    llm_temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Temperature for LLM generation (0.0 = deterministic)",
    )

    max_output_tokens: int = Field(
        default=16384,
        ge=256,
        description="Maximum tokens in the generated report",
    )

    # ==========================================================================
    # File Processing Configuration
    # ==========================================================================
    min_pdf_text_length: int = Field(
        default=150,
        ge=0,
        description="Extracted PDF text must be longer than this to be sent as text",
    )

    max_file_size_mb: float = Field(
        default=20.0,
        ge=0.1,
        le=100.0,
        description="Maximum allowed upload size in megabytes",
    )

    # ==========================================================================
    # Output Configuration
    # ==========================================================================
    output_directory: Path = Field(
        default=Path("./output"),
        description="Directory for exported reports",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level for diagnostics",
    )

    @field_validator("api_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensure base URL doesn't have trailing slash."""
        return v.rstrip("/")

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str | None) -> str | None:
        """Treat a blank key the same as a missing one."""
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @property
    def max_file_size_bytes(self) -> int:
        """Upload size limit in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once.
    """
    return Settings()
