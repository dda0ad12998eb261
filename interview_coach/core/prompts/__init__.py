"""Facade that exposes the prompt modules through the PromptFactory API."""

from __future__ import annotations
from typing import Sequence

from ..models import InterviewType, Level, TranscriptMessage
from . import evaluation as _evaluation
from . import interview as _interview
from . import roadmap as _roadmap


class DefaultPromptFactory:
    # INTERVIEW
    def build_interviewer_system(
        self, *, goal: str, interview_types: Sequence[InterviewType]
    ) -> str:
        return _interview.build_interviewer_system(
            goal=goal, interview_types=interview_types
        )

    # EVALUATION
    def build_structured_system(self) -> str:
        return _evaluation.build_structured_system()

    def evaluation_instruction(
        self, *, transcript: Sequence[TranscriptMessage], goal: str
    ) -> str:
        return _evaluation.evaluation_instruction(transcript=transcript, goal=goal)

    # ROADMAP
    def roadmap_instruction(self, *, level: Level, goal: str) -> str:
        return _roadmap.roadmap_instruction(level=level, goal=goal)
