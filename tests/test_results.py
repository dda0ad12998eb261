import pytest

from interview_coach.core.controller_results import (
    FAILURE_MESSAGE,
    NO_DATA_MESSAGE,
    ResultsController,
)
from interview_coach.core.errors import BackendError, MalformedResponse, ResultsUnavailable
from interview_coach.core.models import Level, Speaker, TranscriptMessage
from interview_coach.core.persistence.session_store import InMemorySessionStore

from conftest import FakeAIService, make_evaluation, make_step


def _two_turns(store):
    store.add_message(TranscriptMessage(Speaker.AI, "Tell me about yourself"))
    store.add_message(TranscriptMessage(Speaker.USER, "I am a backend engineer"))


@pytest.mark.asyncio
async def test_evaluation_receives_exact_transcript_and_goal(store):
    _two_turns(store)
    ai = FakeAIService(evaluation=make_evaluation(Level.ADVANCED))
    results = ResultsController(ai, store=store)

    evaluation, roadmap = await results.fetch_results()

    assert ai.evaluation_calls == [
        (
            [
                TranscriptMessage(Speaker.AI, "Tell me about yourself"),
                TranscriptMessage(Speaker.USER, "I am a backend engineer"),
            ],
            "Backend Engineer",
        )
    ]
    assert ai.roadmap_calls == [(Level.ADVANCED, "Backend Engineer")]
    assert evaluation.level == Level.ADVANCED
    assert store.evaluation == evaluation
    assert len(roadmap) == 5
    assert len({item.id for item in roadmap}) == 5
    assert all(item.completed is False for item in roadmap)


@pytest.mark.asyncio
async def test_cached_results_skip_backend(store):
    _two_turns(store)
    ai = FakeAIService()
    results = ResultsController(ai, store=store)
    await results.fetch_results()
    await results.fetch_results()

    assert len(ai.evaluation_calls) == 1
    assert len(ai.roadmap_calls) == 1


@pytest.mark.asyncio
async def test_roadmap_failure_keeps_nothing(store):
    _two_turns(store)
    ai = FakeAIService(roadmap=MalformedResponse("bad roadmap"))
    results = ResultsController(ai, store=store)

    with pytest.raises(ResultsUnavailable) as exc:
        await results.fetch_results()

    assert str(exc.value) == FAILURE_MESSAGE
    assert isinstance(exc.value.__cause__, MalformedResponse)
    assert results.error == FAILURE_MESSAGE
    assert store.evaluation is None
    assert store.roadmap == []

    # retry starts from scratch
    ai.roadmap = [make_step(i) for i in range(6)]
    _, roadmap = await results.fetch_results()
    assert len(ai.evaluation_calls) == 2
    assert len(roadmap) == 6
    assert results.error is None


@pytest.mark.asyncio
async def test_evaluation_failure_skips_roadmap(store):
    _two_turns(store)
    ai = FakeAIService(evaluation=BackendError("503"))
    results = ResultsController(ai, store=store)

    with pytest.raises(ResultsUnavailable):
        await results.fetch_results()

    assert ai.roadmap_calls == []


@pytest.mark.asyncio
async def test_no_interview_data():
    results = ResultsController(FakeAIService(), store=InMemorySessionStore())

    with pytest.raises(ResultsUnavailable) as exc:
        await results.fetch_results()

    assert str(exc.value) == NO_DATA_MESSAGE


@pytest.mark.asyncio
async def test_toggle_and_progress(store):
    _two_turns(store)
    results = ResultsController(FakeAIService(), store=store)
    _, roadmap = await results.fetch_results()

    results.toggle(roadmap[0].id)
    results.toggle(roadmap[1].id)
    progress = results.progress()

    assert (progress.completed, progress.total, progress.percentage) == (2, 5, 40)
