"""
Purpose: AIService adapter for OpenAI (async chat completions).
One place for auth, retries, model options, schema encoding and error mapping.

- Session: an in-adapter message history seeded with the system instruction.
  A turn is committed to history only after its stream completes.
- Turns: chat.completions with stream=True, yielding delta content.
- Evaluation/roadmap: response_format json_schema (strict). Strict schemas
  need an object root, so the roadmap travels as {"items": [...]}.

Testing: Mock SDK calls; assert it maps schemas and errors correctly.
"""

from __future__ import annotations
import asyncio
import logging
from typing import AsyncIterator, Optional, Sequence

import httpx
from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AsyncOpenAI,
    InternalServerError,
    RateLimitError,
)

from ..errors import BackendError, ConfigurationError, MalformedResponse, UninitializedSession
from ..interfaces import PromptFactory
from ..models import Evaluation, InterviewType, Level, RoadmapStep, TranscriptMessage
from ..prompts import DefaultPromptFactory
from ..utils.llm_json import parse_evaluation, parse_roadmap, require_object

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

# httpx errors escape the SDK while the SSE body is being read
_TRANSPORT_ERRORS = (APIError, httpx.HTTPError)
_TRANSIENT_ERRORS = (RateLimitError, APITimeoutError, APIConnectionError, InternalServerError)

EVALUATION_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {
            "type": "string",
            "description": "A brief overall summary of the candidate performance.",
        },
        "knowledge": {
            "type": "string",
            "description": "Assessment of technical knowledge.",
        },
        "skills": {
            "type": "string",
            "description": "Assessment of problem-solving skills.",
        },
        "confidence": {
            "type": "string",
            "description": "Assessment of confidence inferred from the answers.",
        },
        "communication": {
            "type": "string",
            "description": "Feedback on communication style, including clarity, "
            "filler words, and overall fluency.",
        },
        "level": {
            "type": "string",
            "enum": [lvl.value for lvl in Level],
        },
    },
    "required": ["summary", "knowledge", "skills", "confidence", "communication", "level"],
    "additionalProperties": False,
}

_RESOURCE_SCHEMA = {
    "type": "object",
    "properties": {
        "type": {"type": "string", "enum": ["article", "video", "docs", "interactive"]},
        "title": {"type": "string"},
        "url": {"type": "string"},
    },
    "required": ["type", "title", "url"],
    "additionalProperties": False,
}

ROADMAP_SCHEMA = {
    "type": "object",
    "properties": {
        "items": {
            "type": "array",
            "description": "5-7 roadmap steps.",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "keyConcepts": {
                        "type": "array",
                        "description": "3-5 concepts.",
                        "items": {"type": "string"},
                    },
                    "project": {"type": "string"},
                    "resources": {
                        "type": "array",
                        "description": "2-3 resources.",
                        "items": _RESOURCE_SCHEMA,
                    },
                },
                "required": ["title", "description", "keyConcepts", "project", "resources"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["items"],
    "additionalProperties": False,
}


class OpenAIAIService:
    provider = "openai"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = DEFAULT_MODEL,
        prompts: Optional[PromptFactory] = None,
        retry_delays: Sequence[float] = (0.5, 1.0, 2.0),
    ):
        if not api_key:
            raise ConfigurationError("Missing OPENAI_API_KEY")
        self.model = model
        self.prompts: PromptFactory = prompts or DefaultPromptFactory()
        self.retry_delays = tuple(retry_delays)
        self.client = AsyncOpenAI(api_key=api_key)
        self._history: Optional[list[dict[str, str]]] = None

    @classmethod
    def from_settings(cls, settings) -> "OpenAIAIService":
        return cls(settings.OPENAI_API_KEY, model=settings.OPENAI_MODEL)

    async def _with_retries(self, fn):
        for delay in self.retry_delays:
            try:
                return await fn()
            except _TRANSIENT_ERRORS as e:
                logger.warning("OpenAI call failed (%s); retrying in %.1fs", e, delay)
                await asyncio.sleep(delay)
        return await fn()

    def start_session(
        self, goal: str, interview_types: Sequence[InterviewType]
    ) -> None:
        system = self.prompts.build_interviewer_system(
            goal=goal, interview_types=interview_types
        )
        self._history = [{"role": "system", "content": system}]
        logger.info("OpenAI interview session started (model=%s)", self.model)

    def stream_next_turn(self, user_message: str) -> AsyncIterator[str]:
        return self._stream(self._history, user_message)

    async def _stream(
        self, history: Optional[list[dict[str, str]]], user_message: str
    ) -> AsyncIterator[str]:
        if history is None:
            raise UninitializedSession(
                "Chat not initialized. Call start_session first."
            )
        user_turn = {"role": "user", "content": user_message}
        parts: list[str] = []
        try:
            stream = await self.client.chat.completions.create(
                model=self.model,
                messages=[*history, user_turn],
                stream=True,
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    parts.append(delta)
                    yield delta
        except _TRANSPORT_ERRORS as e:
            logger.warning("OpenAI streaming turn failed: %s", e)
            raise BackendError(f"OpenAI streaming call failed: {e}") from e

        history.append(user_turn)
        history.append({"role": "assistant", "content": "".join(parts)})

    async def _complete_json(self, prompt: str, name: str, schema: dict) -> str:
        messages = [
            {"role": "system", "content": self.prompts.build_structured_system()},
            {"role": "user", "content": prompt},
        ]

        async def call():
            return await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": name, "strict": True, "schema": schema},
                },
            )

        try:
            cc = await self._with_retries(call)
        except _TRANSPORT_ERRORS as e:
            logger.warning("OpenAI structured call failed: %s", e)
            raise BackendError(f"OpenAI call failed: {e}") from e

        text = (cc.choices[0].message.content or "").strip() if cc.choices else ""
        if not text:
            raise MalformedResponse("OpenAI returned an empty response.")
        return text

    async def generate_evaluation(
        self, transcript: Sequence[TranscriptMessage], goal: str
    ) -> Evaluation:
        prompt = self.prompts.evaluation_instruction(transcript=transcript, goal=goal)
        text = await self._complete_json(prompt, "evaluation", EVALUATION_SCHEMA)
        return parse_evaluation(
            require_object(text, "OpenAI evaluation is not a JSON object.")
        )

    async def generate_roadmap(self, level: Level, goal: str) -> list[RoadmapStep]:
        prompt = self.prompts.roadmap_instruction(level=level, goal=goal)
        text = await self._complete_json(prompt, "roadmap", ROADMAP_SCHEMA)
        return parse_roadmap(
            require_object(text, "OpenAI roadmap is not a JSON object.")
        )
