"""
Controller for the results stage: evaluation first, then the roadmap for the
evaluated level. Results are committed to the session only when both calls
succeed; a failure leaves nothing behind and the next fetch starts over.
"""

from __future__ import annotations
import logging
from typing import Optional

from .errors import ResultsUnavailable
from .interfaces import AIService
from .models import Evaluation, RoadmapItem, RoadmapProgress
from .persistence.session_store import InMemorySessionStore

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No interview data found. Please start a new interview."
FAILURE_MESSAGE = (
    "Sorry, there was an error generating your results. Please try again later."
)


class ResultsController:
    def __init__(self, ai: AIService, *, store: InMemorySessionStore):
        self.ai: AIService = ai
        self.store = store
        self.error: Optional[str] = None

    async def fetch_results(self) -> tuple[Evaluation, list[RoadmapItem]]:
        """Return (evaluation, roadmap), generating them if not cached yet."""
        self.error = None
        user = self.store.user
        transcript = self.store.transcript
        if user is None or not transcript:
            self.error = NO_DATA_MESSAGE
            raise ResultsUnavailable(NO_DATA_MESSAGE)

        if self.store.evaluation is not None:
            return self.store.evaluation, self.store.roadmap

        try:
            evaluation = await self.ai.generate_evaluation(list(transcript), user.goal)
            steps = await self.ai.generate_roadmap(evaluation.level, user.goal)
        except Exception as e:
            logger.exception("Failed to generate results")
            self.error = FAILURE_MESSAGE
            raise ResultsUnavailable(FAILURE_MESSAGE) from e

        self.store.set_evaluation(evaluation)
        roadmap = self.store.set_roadmap(steps)
        logger.info(
            "Results ready: level=%s, %d roadmap items",
            evaluation.level.value,
            len(roadmap),
        )
        return evaluation, roadmap

    def toggle(self, item_id: str) -> RoadmapItem:
        return self.store.toggle_item(item_id)

    def progress(self) -> RoadmapProgress:
        return self.store.progress()
