import asyncio
from typing import Optional

import pytest

from interview_coach.core.models import (
    Evaluation,
    InterviewType,
    Level,
    RoadmapStep,
)
from interview_coach.core.persistence.session_store import InMemorySessionStore


def make_step(n: int = 0) -> RoadmapStep:
    return RoadmapStep.model_validate(
        {
            "title": f"Topic {n}",
            "description": "Why it matters.",
            "keyConcepts": ["a", "b", "c"],
            "project": "Build a thing.",
            "resources": [
                {"type": "article", "title": "Read", "url": "https://example.com/a"},
                {"type": "video", "title": "Watch", "url": "https://example.com/v"},
            ],
        }
    )


def make_evaluation(level: Level = Level.INTERMEDIATE) -> Evaluation:
    return Evaluation(
        summary="Solid.",
        knowledge="Good.",
        skills="Fine.",
        confidence="Calm.",
        communication="Clear.",
        level=level,
    )


class FakeAIService:
    """Scripted AIService. Each turn is a list of fragments and/or exceptions."""

    def __init__(
        self,
        turns=None,
        *,
        evaluation=None,
        roadmap=None,
        gate: Optional[asyncio.Event] = None,
    ):
        self.turns = list(turns or [])
        self.evaluation = evaluation if evaluation is not None else make_evaluation()
        self.roadmap = roadmap if roadmap is not None else [make_step(i) for i in range(5)]
        self.gate = gate
        self.sessions: list[tuple[str, list[InterviewType]]] = []
        self.messages: list[str] = []
        self.evaluation_calls: list[tuple[list, str]] = []
        self.roadmap_calls: list[tuple[Level, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def start_session(self, goal, interview_types):
        self.sessions.append((goal, list(interview_types)))

    def stream_next_turn(self, user_message):
        self.messages.append(user_message)
        script = self.turns.pop(0) if self.turns else ["OK"]
        return self._stream(script)

    async def _stream(self, script):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            for item in script:
                if isinstance(item, BaseException):
                    raise item
                yield item
        finally:
            self.in_flight -= 1

    async def generate_evaluation(self, transcript, goal):
        self.evaluation_calls.append((list(transcript), goal))
        if isinstance(self.evaluation, BaseException):
            raise self.evaluation
        return self.evaluation

    async def generate_roadmap(self, level, goal):
        self.roadmap_calls.append((level, goal))
        if isinstance(self.roadmap, BaseException):
            raise self.roadmap
        return self.roadmap


class ImmediateSpeech:
    def __init__(self):
        self.spoken: list[str] = []

    def speak(self, text, on_complete):
        self.spoken.append(text)
        on_complete()


class ManualSpeech:
    """Holds completion callbacks until complete() is called."""

    def __init__(self):
        self.spoken: list[str] = []
        self._pending = []

    def speak(self, text, on_complete):
        self.spoken.append(text)
        self._pending = [on_complete]

    def complete(self):
        pending, self._pending = self._pending, []
        for cb in pending:
            cb()


class RecordingSpeechInput:
    def __init__(self):
        self.events: list[str] = []

    def start_listening(self):
        self.events.append("start")

    def stop_listening(self):
        self.events.append("stop")


@pytest.fixture
def store():
    s = InMemorySessionStore()
    s.login("Jane", "Backend Engineer", [InterviewType.BEHAVIORAL, InterviewType.TECHNICAL])
    return s
