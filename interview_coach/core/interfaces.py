"""
Abstractions for pluggable services. Inversion of control: controllers depend
on these protocols, never on a concrete backend. Enables fakes in tests and
swapping Gemini/OpenAI through configuration only.

Common protocols:
- AIService.start_session / stream_next_turn / generate_evaluation / generate_roadmap
- PromptFactory.build_interviewer_system(...) / evaluation_instruction(...) / ...
- SpeechInput.start_listening() / stop_listening()
- SpeechOutput.speak(text, on_complete)

Testing: Use simple fake implementations to test the controllers without
network calls.
"""

from __future__ import annotations
from typing import AsyncIterator, Callable, Protocol, Sequence

from .models import (
    Evaluation,
    InterviewType,
    Level,
    RoadmapStep,
    TranscriptMessage,
)


class AIService(Protocol):
    def start_session(
        self, goal: str, interview_types: Sequence[InterviewType]
    ) -> None:
        """Reset backend-side conversation state with a new system instruction."""
        ...

    def stream_next_turn(self, user_message: str) -> AsyncIterator[str]:
        """
        Send one user message and return the reply as a lazy, finite,
        single-consumer async iterator of text fragments.
        Raises UninitializedSession (before start_session) or BackendError.
        """
        ...

    async def generate_evaluation(
        self, transcript: Sequence[TranscriptMessage], goal: str
    ) -> Evaluation: ...

    async def generate_roadmap(self, level: Level, goal: str) -> list[RoadmapStep]: ...


class PromptFactory(Protocol):
    def build_interviewer_system(
        self, *, goal: str, interview_types: Sequence[InterviewType]
    ) -> str: ...

    def build_structured_system(self) -> str: ...

    def evaluation_instruction(
        self, *, transcript: Sequence[TranscriptMessage], goal: str
    ) -> str: ...

    def roadmap_instruction(self, *, level: Level, goal: str) -> str: ...


class SpeechInput(Protocol):
    def start_listening(self) -> None: ...

    def stop_listening(self) -> None: ...


class SpeechOutput(Protocol):
    def speak(self, text: str, on_complete: Callable[[], None]) -> None:
        """Speak text; a new call cancels any utterance still in progress."""
        ...
