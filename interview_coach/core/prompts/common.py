"""Shared prompt helpers used across prompt modules."""

from __future__ import annotations
from typing import Sequence

from ..models import InterviewType, Level, TranscriptMessage


def rounds_text(interview_types: Sequence[InterviewType]) -> str:
    return " and ".join(getattr(t, "value", str(t)) for t in interview_types)


def render_transcript(transcript: Sequence[TranscriptMessage]) -> str:
    """One `speaker: text` line per message, in order."""
    return "\n".join(
        f"{getattr(m.speaker, 'value', m.speaker)}: {m.text}" for m in transcript
    )


def level_focus(level: Level) -> str:
    if level == Level.BEGINNER:
        return "Focus on fundamental concepts."
    if level == Level.INTERMEDIATE:
        return "Focus on deepening knowledge and practical skills."
    return "Focus on specialized topics, system design, and leadership."
