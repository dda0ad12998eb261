"""
Purpose: Pick exactly one AIService adapter from configuration.

resolve_provider() is a pure mapping from a provider name to an adapter class;
build_ai_service() constructs the instance once at application start. Callers
keep that instance and pass it to the controllers; there is no module-level
singleton and no switching after startup.
"""

from __future__ import annotations
import logging
from typing import Optional

from ..config import Settings
from ..interfaces import AIService
from .llm_gemini import GeminiAIService
from .llm_openai import OpenAIAIService

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "gemini"

_PROVIDERS = {
    "gemini": GeminiAIService,
    "openai": OpenAIAIService,
}


def resolve_provider(name: Optional[str]) -> type[AIService]:
    """'openai' (any case) -> OpenAI adapter; everything else -> Gemini."""
    key = (name or "").strip().lower() or DEFAULT_PROVIDER
    if key not in _PROVIDERS:
        logger.warning(
            "Unknown AI_PROVIDER %r; falling back to %s", name, DEFAULT_PROVIDER
        )
        key = DEFAULT_PROVIDER
    return _PROVIDERS[key]


def build_ai_service(
    settings: Settings, *, provider: Optional[str] = None
) -> AIService:
    """
    Construct the single adapter for this process.
    Raises ConfigurationError if the chosen provider has no API key.
    """
    adapter_cls = resolve_provider(provider or settings.AI_PROVIDER)
    service = adapter_cls.from_settings(settings)
    logger.info("AI provider bound: %s", adapter_cls.provider)
    return service
