"""Application configuration.

Configuration is loaded from environment variables. For local development, you can provide a
`.env` file and set `OUTLINEWRITER_ENV_FILE` to point to it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DetailLevel = Literal["brief", "standard", "detailed"]


class Settings(BaseSettings):
    """OutlineWriter settings.

    All fields are environment-configurable. Prefix is `OUTLINEWRITER_`.
    """

    model_config = SettingsConfigDict(
        env_prefix="OUTLINEWRITER_",
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    app_env: Literal["dev", "prod"] = Field(default="dev")
    log_level: str = Field(default="INFO")

    # LLM
    openai_api_key: str | None = Field(default=None)
    openai_base_url: str | None = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")
    # Hard per-call timeout; a hung request fails the point/batch instead of stalling the run.
    openai_timeout_s: float = Field(default=120.0, ge=1.0, le=600.0)
    openai_temperature: float = Field(default=0.7, ge=0.0, le=2.0)

    # Generation pipeline
    batch_size: int = Field(default=5, ge=1, le=50)
    batch_delay_s: float = Field(default=0.2, ge=0.0, le=30.0)
    look_ahead_count: int = Field(default=3, ge=0, le=20)
    context_tail_chars: int = Field(default=2000, ge=0, le=100000)

    # GenerationConfig defaults (seeded once at process start)
    default_language: str = Field(default="Tiếng Việt")
    default_tones: list[str] = Field(default_factory=lambda: ["Chuyên nghiệp, học thuật"], min_length=1)
    default_detail_level: DetailLevel = Field(default="standard")


def load_settings() -> Settings:
    """Load settings from env.

    Returns:
        Settings: Parsed settings.
    """

    env_file_override = os.getenv("OUTLINEWRITER_ENV_FILE")
    if env_file_override:
        env_path = Path(env_file_override)
        return Settings(_env_file=env_path)

    default_env = Path.cwd() / ".env"
    if default_env.exists():
        return Settings(_env_file=default_env)

    return Settings()
