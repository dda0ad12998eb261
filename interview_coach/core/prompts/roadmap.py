"""Prompts for generating the personalized learning roadmap."""

from __future__ import annotations
from textwrap import dedent

from ..models import Level
from .common import level_focus


def roadmap_instruction(*, level: Level, goal: str) -> str:
    level_name = getattr(level, "value", level)
    return dedent(
        f"""\
        A candidate for a '{goal}' role has been evaluated as '{level_name}'. Create a comprehensive, personalized learning roadmap for them with 5-7 key steps.
        {level_focus(level)}

        For each roadmap item, provide the following:
        1.  'title': A concise title for the learning topic.
        2.  'description': A short, clear explanation of the topic and its importance.
        3.  'keyConcepts': An array of 3-5 crucial sub-topics or concepts to master.
        4.  'project': A small, practical project idea to apply the learned skills.
        5.  'resources': An array of 2-3 diverse, high-quality online resources. For each resource, specify a 'title', a 'url', and a 'type' from the following options: 'article', 'video', 'docs', or 'interactive'.
        """  # noqa: E501
    )
