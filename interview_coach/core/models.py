"""
Canonical data shapes, shared truth for typing/validation between layers.

Typical contents:
- Enums for interview types, speakers, levels, turn states.
- TranscriptMessage / RoadmapItem: session-owned records (dataclasses).
- Evaluation / Resource / RoadmapStep: shapes returned by an AI backend,
  validated with pydantic so schema violations surface as errors.

Testing: Trivial; mostly types. Validation is covered via utils.llm_json.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InterviewType(str, Enum):
    BEHAVIORAL = "behavioral"
    TECHNICAL = "technical"


class Speaker(str, Enum):
    AI = "ai"
    USER = "user"


class Level(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class ResourceType(str, Enum):
    ARTICLE = "article"
    VIDEO = "video"
    DOCS = "docs"
    INTERACTIVE = "interactive"


class TurnState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    THINKING = "thinking"
    SPEAKING = "speaking"
    FINISHED = "finished"


@dataclass(frozen=True)
class TranscriptMessage:
    speaker: Speaker
    text: str


@dataclass(frozen=True)
class UserProfile:
    name: str
    goal: str


class Evaluation(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: str
    knowledge: str
    skills: str
    confidence: str
    communication: str
    level: Level

    @field_validator("level", mode="before")
    @classmethod
    def _level_case(cls, v):
        # models sometimes answer "intermediate" despite the enum
        if isinstance(v, str):
            return v.strip().capitalize()
        return v


class Resource(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ResourceType
    title: str
    url: str

    @field_validator("type", mode="before")
    @classmethod
    def _type_case(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class RoadmapStep(BaseModel):
    """One roadmap entry as produced by a backend (no id, no completion flag)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    description: str
    key_concepts: list[str] = Field(alias="keyConcepts", min_length=3, max_length=5)
    project: str
    resources: list[Resource] = Field(min_length=2, max_length=3)


class RoadmapPlan(BaseModel):
    items: list[RoadmapStep] = Field(min_length=5, max_length=7)


@dataclass
class RoadmapItem:
    id: str
    title: str
    description: str
    key_concepts: list[str]
    project: str
    resources: list[Resource]
    completed: bool = False

    @classmethod
    def from_step(cls, step: RoadmapStep, *, item_id: str) -> "RoadmapItem":
        return cls(
            id=item_id,
            title=step.title,
            description=step.description,
            key_concepts=list(step.key_concepts),
            project=step.project,
            resources=list(step.resources),
        )


@dataclass(frozen=True)
class RoadmapProgress:
    completed: int
    total: int

    @property
    def percentage(self) -> int:
        if self.total <= 0:
            return 0
        return round(self.completed / self.total * 100)


@dataclass
class SessionState:
    user: Optional[UserProfile] = None
    interview_types: list[InterviewType] = field(default_factory=list)
    transcript: list[TranscriptMessage] = field(default_factory=list)
    evaluation: Optional[Evaluation] = None
    roadmap: list[RoadmapItem] = field(default_factory=list)
