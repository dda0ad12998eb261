"""
Purpose: Runtime configuration read from the environment (and an optional .env).

AI_PROVIDER picks the backend ("openai" or anything else -> Gemini). API keys
are optional here on purpose: an adapter raises ConfigurationError at
construction if the key it needs is absent.
"""

from __future__ import annotations
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _clean_str(v) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip().strip('"').strip("'").rstrip("\r")
    return s or None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    AI_PROVIDER: str = "gemini"
    GEMINI_API_KEY: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    OPENAI_MODEL: str = "gpt-4o-mini"
    TURN_TIMEOUT_SECONDS: float = 60.0
    LOG_LEVEL: str = "INFO"

    @field_validator("GEMINI_API_KEY", "OPENAI_API_KEY", mode="before")
    @classmethod
    def _strip_keys(cls, v):
        return _clean_str(v)

    @field_validator("AI_PROVIDER", mode="before")
    @classmethod
    def _normalize_provider(cls, v):
        return (_clean_str(v) or "gemini").lower()

    @field_validator("TURN_TIMEOUT_SECONDS", mode="before")
    @classmethod
    def _empty_timeout(cls, v):
        # "" or unset in .env means "no timeout"
        if v is None or str(v).strip() == "":
            return 0.0
        return v

    @property
    def turn_timeout(self) -> Optional[float]:
        """Timeout for one streamed turn, or None when disabled."""
        return self.TURN_TIMEOUT_SECONDS if self.TURN_TIMEOUT_SECONDS > 0 else None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
