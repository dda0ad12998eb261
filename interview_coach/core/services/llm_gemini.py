"""
Purpose: AIService adapter for Google Gemini (google-genai SDK, async API).
One place for auth, retries, model options, schema encoding and error mapping.

- Session: an `aio.chats` chat seeded with the interviewer system instruction.
- Turns: `send_message_stream`, yielding chunk text as it arrives.
- Evaluation/roadmap: `generate_content` with response_mime_type JSON and a
  Gemini response_schema.

Testing: Mock the SDK client; assert schemas, error mapping and that a missing
key fails before a client is built.
"""

from __future__ import annotations
import asyncio
import logging
from typing import AsyncIterator, Optional, Sequence

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from ..errors import BackendError, ConfigurationError, MalformedResponse, UninitializedSession
from ..interfaces import PromptFactory
from ..models import Evaluation, InterviewType, Level, RoadmapStep, TranscriptMessage
from ..prompts import DefaultPromptFactory
from ..utils.llm_json import parse_evaluation, parse_roadmap, require_array, require_object

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

_TRANSPORT_ERRORS = (genai_errors.APIError, httpx.HTTPError)

EVALUATION_SCHEMA = genai_types.Schema(
    type=genai_types.Type.OBJECT,
    properties={
        "summary": genai_types.Schema(
            type=genai_types.Type.STRING,
            description="A brief overall summary of the candidate performance.",
        ),
        "knowledge": genai_types.Schema(
            type=genai_types.Type.STRING,
            description="Assessment of technical knowledge.",
        ),
        "skills": genai_types.Schema(
            type=genai_types.Type.STRING,
            description="Assessment of problem-solving skills.",
        ),
        "confidence": genai_types.Schema(
            type=genai_types.Type.STRING,
            description="Assessment of confidence inferred from the answers.",
        ),
        "communication": genai_types.Schema(
            type=genai_types.Type.STRING,
            description=(
                "Feedback on communication style, including clarity, "
                "filler words, and overall fluency."
            ),
        ),
        "level": genai_types.Schema(
            type=genai_types.Type.STRING,
            enum=[lvl.value for lvl in Level],
            description="The overall level of the candidate: Beginner, Intermediate, or Advanced.",
        ),
    },
    required=["summary", "knowledge", "skills", "confidence", "communication", "level"],
)

ROADMAP_SCHEMA = genai_types.Schema(
    type=genai_types.Type.ARRAY,
    min_items=5,
    max_items=7,
    items=genai_types.Schema(
        type=genai_types.Type.OBJECT,
        properties={
            "title": genai_types.Schema(type=genai_types.Type.STRING),
            "description": genai_types.Schema(type=genai_types.Type.STRING),
            "keyConcepts": genai_types.Schema(
                type=genai_types.Type.ARRAY,
                min_items=3,
                max_items=5,
                items=genai_types.Schema(type=genai_types.Type.STRING),
            ),
            "project": genai_types.Schema(type=genai_types.Type.STRING),
            "resources": genai_types.Schema(
                type=genai_types.Type.ARRAY,
                min_items=2,
                max_items=3,
                items=genai_types.Schema(
                    type=genai_types.Type.OBJECT,
                    properties={
                        "type": genai_types.Schema(
                            type=genai_types.Type.STRING,
                            enum=["article", "video", "docs", "interactive"],
                        ),
                        "title": genai_types.Schema(type=genai_types.Type.STRING),
                        "url": genai_types.Schema(type=genai_types.Type.STRING),
                    },
                    required=["type", "title", "url"],
                ),
            ),
        },
        required=["title", "description", "keyConcepts", "project", "resources"],
    ),
)


def _is_transient(e: Exception) -> bool:
    if isinstance(e, genai_errors.ServerError):
        return True
    return isinstance(e, genai_errors.ClientError) and getattr(e, "code", None) == 429


class GeminiAIService:
    provider = "gemini"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = DEFAULT_MODEL,
        prompts: Optional[PromptFactory] = None,
        retry_delays: Sequence[float] = (0.5, 1.0, 2.0),
    ):
        if not api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY environment variable not set. "
                "Set it (or AI_PROVIDER=openai with OPENAI_API_KEY)."
            )
        self.model = model
        self.prompts: PromptFactory = prompts or DefaultPromptFactory()
        self.retry_delays = tuple(retry_delays)
        self.client = genai.Client(api_key=api_key)
        self._chat = None

    @classmethod
    def from_settings(cls, settings) -> "GeminiAIService":
        return cls(settings.GEMINI_API_KEY, model=settings.GEMINI_MODEL)

    async def _with_retries(self, fn):
        for delay in self.retry_delays:
            try:
                return await fn()
            except genai_errors.APIError as e:
                if not _is_transient(e):
                    raise
                logger.warning("Gemini call failed (%s); retrying in %.1fs", e, delay)
                await asyncio.sleep(delay)
        return await fn()

    def start_session(
        self, goal: str, interview_types: Sequence[InterviewType]
    ) -> None:
        system = self.prompts.build_interviewer_system(
            goal=goal, interview_types=interview_types
        )
        self._chat = self.client.aio.chats.create(
            model=self.model,
            config=genai_types.GenerateContentConfig(system_instruction=system),
        )
        logger.info("Gemini interview session started (model=%s)", self.model)

    def stream_next_turn(self, user_message: str) -> AsyncIterator[str]:
        return self._stream(self._chat, user_message)

    async def _stream(self, chat, user_message: str) -> AsyncIterator[str]:
        if chat is None:
            raise UninitializedSession(
                "Chat not initialized. Call start_session first."
            )
        try:
            stream = await chat.send_message_stream(user_message)
            async for chunk in stream:
                text = chunk.text
                if text:
                    yield text
        except _TRANSPORT_ERRORS as e:
            logger.warning("Gemini streaming turn failed: %s", e)
            raise BackendError(f"Gemini streaming call failed: {e}") from e

    async def _generate_json(self, prompt: str, schema: genai_types.Schema) -> str:
        config = genai_types.GenerateContentConfig(
            system_instruction=self.prompts.build_structured_system(),
            response_mime_type="application/json",
            response_schema=schema,
        )

        async def call():
            return await self.client.aio.models.generate_content(
                model=self.model, contents=prompt, config=config
            )

        try:
            response = await self._with_retries(call)
        except _TRANSPORT_ERRORS as e:
            logger.warning("Gemini structured call failed: %s", e)
            raise BackendError(f"Gemini call failed: {e}") from e

        text = (response.text or "").strip()
        if not text:
            raise MalformedResponse("Gemini returned an empty response.")
        return text

    async def generate_evaluation(
        self, transcript: Sequence[TranscriptMessage], goal: str
    ) -> Evaluation:
        prompt = self.prompts.evaluation_instruction(transcript=transcript, goal=goal)
        text = await self._generate_json(prompt, EVALUATION_SCHEMA)
        return parse_evaluation(
            require_object(text, "Gemini evaluation is not a JSON object.")
        )

    async def generate_roadmap(self, level: Level, goal: str) -> list[RoadmapStep]:
        prompt = self.prompts.roadmap_instruction(level=level, goal=goal)
        text = await self._generate_json(prompt, ROADMAP_SCHEMA)
        return parse_roadmap(require_array(text, "Gemini roadmap is not a JSON array."))
