"""Evaluation prompts: grading the whole transcript into a fixed schema."""

from __future__ import annotations
from textwrap import dedent
from typing import Sequence

from ..models import TranscriptMessage
from .common import render_transcript


def build_structured_system() -> str:
    return (
        "You are an interview evaluation assistant and career coach.\n"
        "Rules:\n"
        "- Be objective and concise.\n"
        "- Never invent facts absent from the transcript.\n"
        "- When asked to return JSON, return EXACTLY the requested JSON and nothing else."
    )


def evaluation_instruction(*, transcript: Sequence[TranscriptMessage], goal: str) -> str:
    return dedent(
        f"""\
        Based on the following interview transcript for a candidate aspiring to be a '{goal}', please evaluate their performance.

        Transcript:
        {{transcript}}

        Provide a detailed evaluation based on the candidate's answers. Assess their technical knowledge, problem-solving skills, and confidence.
        In addition to the above, please provide specific feedback on the candidate's communication style. Analyze their clarity, conciseness, and any noticeable use of filler words (e.g., "um", "like", "so").
        Finally, assign a level: 'Beginner', 'Intermediate', or 'Advanced'.

        Output ONLY a JSON object with the string fields "summary", "knowledge", "skills", "confidence", "communication" and "level".
        """  # noqa: E501
    ).replace("{transcript}", render_transcript(transcript))
