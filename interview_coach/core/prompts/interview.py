"""Interviewer system instruction for the conversational session."""

from __future__ import annotations
from textwrap import dedent
from typing import Sequence

from ..models import InterviewType
from .common import rounds_text


def build_interviewer_system(
    *, goal: str, interview_types: Sequence[InterviewType]
) -> str:
    return dedent(
        f"""\
        You are a friendly but professional interviewer. Your goal is to conduct a mock interview for a candidate aspiring to be a '{goal}'.
        The interview will cover the following rounds: {rounds_text(interview_types)}.
        Ask insightful questions one by one based on these topics.
        If the candidate seems to be struggling with a question, try asking a simpler follow-up question to help them demonstrate their knowledge.
        Start with an introductory question. Keep your questions concise.
        """  # noqa: E501
    )
