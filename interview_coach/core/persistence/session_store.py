"""
Purpose: In-memory state of the single interview session in this process.
Holds user, goal, interview types, transcript, evaluation and roadmap.

What is inside:
InMemorySessionStore with login / add_message / set_evaluation /
set_roadmap / toggle_item / progress / reset.

Nothing is persisted; reset() returns to the initial empty state.

Testing: simple state tests (ids, toggling, progress, reset).
"""

from __future__ import annotations
import uuid
from typing import Optional, Sequence

from ..models import (
    Evaluation,
    InterviewType,
    RoadmapItem,
    RoadmapProgress,
    RoadmapStep,
    SessionState,
    TranscriptMessage,
    UserProfile,
)


class InMemorySessionStore:
    def __init__(self) -> None:
        self.state = SessionState()

    @property
    def user(self) -> Optional[UserProfile]:
        return self.state.user

    @property
    def interview_types(self) -> tuple[InterviewType, ...]:
        return tuple(self.state.interview_types)

    @property
    def transcript(self) -> tuple[TranscriptMessage, ...]:
        """Read-only view; append through add_message()."""
        return tuple(self.state.transcript)

    @property
    def evaluation(self) -> Optional[Evaluation]:
        return self.state.evaluation

    @property
    def roadmap(self) -> list[RoadmapItem]:
        return self.state.roadmap

    def login(
        self, name: str, goal: str, interview_types: Sequence[InterviewType]
    ) -> None:
        """Fix user, goal and interview rounds for a new session."""
        name, goal = (name or "").strip(), (goal or "").strip()
        if not name or not goal:
            raise ValueError("Name and goal are required.")
        types: list[InterviewType] = []
        for t in interview_types:
            t = InterviewType(t)
            if t not in types:
                types.append(t)
        if not types:
            raise ValueError("Select at least one interview type.")

        self.state = SessionState(user=UserProfile(name=name, goal=goal))
        self.state.interview_types = types

    def interview_title(self) -> str:
        if not self.state.interview_types:
            return "Interview"
        return (
            " & ".join(t.value.capitalize() for t in self.state.interview_types)
            + " Interview"
        )

    def add_message(self, message: TranscriptMessage) -> None:
        self.state.transcript.append(message)

    def set_evaluation(self, evaluation: Optional[Evaluation]) -> None:
        self.state.evaluation = evaluation

    def set_roadmap(self, steps: Sequence[RoadmapStep]) -> list[RoadmapItem]:
        """Assign fresh ids and completed=False to backend-produced steps."""
        batch = uuid.uuid4().hex
        self.state.roadmap = [
            RoadmapItem.from_step(step, item_id=f"todo-{i}-{batch}")
            for i, step in enumerate(steps)
        ]
        return self.state.roadmap

    def toggle_item(self, item_id: str) -> RoadmapItem:
        for item in self.state.roadmap:
            if item.id == item_id:
                item.completed = not item.completed
                return item
        raise KeyError(item_id)

    def progress(self) -> RoadmapProgress:
        items = self.state.roadmap
        return RoadmapProgress(
            completed=sum(1 for i in items if i.completed), total=len(items)
        )

    def reset(self) -> None:
        self.state = SessionState()
