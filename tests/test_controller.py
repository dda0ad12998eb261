import asyncio

import pytest

from interview_coach.core.controller import (
    APOLOGY_MESSAGE,
    OPENING_MESSAGE,
    InterviewSessionController,
)
from interview_coach.core.errors import (
    BackendError,
    InterviewFinished,
    TurnInProgress,
    UninitializedSession,
)
from interview_coach.core.models import InterviewType, Speaker, TranscriptMessage, TurnState

from conftest import FakeAIService, ImmediateSpeech, ManualSpeech, RecordingSpeechInput


def _controller(ai, store, speech=None, **kwargs):
    return InterviewSessionController(ai, speech or ImmediateSpeech(), store=store, **kwargs)


async def _settle():
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_begin_starts_session_and_opening_turn(store):
    ai = FakeAIService([["Tell me ", "about ", "yourself"]])
    speech = ImmediateSpeech()
    controller = _controller(ai, store, speech)

    await controller.begin()

    assert ai.sessions == [
        ("Backend Engineer", [InterviewType.BEHAVIORAL, InterviewType.TECHNICAL])
    ]
    assert ai.messages == [OPENING_MESSAGE]
    assert controller.transcript == (
        TranscriptMessage(Speaker.AI, "Tell me about yourself"),
    )
    assert speech.spoken == ["Tell me about yourself"]
    assert controller.display_buffer == ""
    assert controller.state == TurnState.IDLE


@pytest.mark.asyncio
async def test_begin_with_existing_transcript_sends_nothing(store):
    store.add_message(TranscriptMessage(Speaker.AI, "Hello"))
    ai = FakeAIService()
    controller = _controller(ai, store)

    await controller.begin()

    assert ai.sessions == []
    assert ai.messages == []
    assert controller.state == TurnState.IDLE


@pytest.mark.asyncio
async def test_buffer_tracks_prefix_concatenation(store):
    fragments = ["I ", "see", ". Why", " Python?"]
    ai = FakeAIService([["Hi"], fragments])
    seen: list[str] = []
    controller = _controller(ai, store, on_update=seen.append)
    await controller.begin()
    seen.clear()

    await controller.handle_utterance("I write services")

    assert seen == ["I ", "I see", "I see. Why", "I see. Why Python?"]
    assert ai.messages[-1] == "I write services"
    assert controller.transcript[-2:] == (
        TranscriptMessage(Speaker.USER, "I write services"),
        TranscriptMessage(Speaker.AI, "".join(fragments)),
    )


@pytest.mark.asyncio
async def test_failure_mid_stream_leaves_only_apology(store):
    ai = FakeAIService([["Tell ", "me", BackendError("connection reset")]])
    speech = ImmediateSpeech()
    controller = _controller(ai, store, speech)

    await controller.begin()

    assert controller.transcript == (TranscriptMessage(Speaker.AI, APOLOGY_MESSAGE),)
    assert speech.spoken == [APOLOGY_MESSAGE]
    assert controller.display_buffer == ""
    assert controller.state == TurnState.IDLE


@pytest.mark.asyncio
async def test_session_continues_after_failed_turn(store):
    ai = FakeAIService([["Q1"], [UninitializedSession("nope")], ["Q2"]])
    controller = _controller(ai, store)
    await controller.begin()

    await controller.handle_utterance("first answer")
    assert controller.transcript[-1].text == APOLOGY_MESSAGE

    await controller.handle_utterance("first answer again")
    assert controller.transcript[-1] == TranscriptMessage(Speaker.AI, "Q2")
    assert [m.speaker for m in controller.transcript] == [
        Speaker.AI,
        Speaker.USER,
        Speaker.AI,
        Speaker.USER,
        Speaker.AI,
    ]


@pytest.mark.asyncio
async def test_second_utterance_rejected_while_thinking(store):
    gate = asyncio.Event()
    gate.set()
    ai = FakeAIService([["Q1"], ["Q2"]], gate=gate)
    controller = _controller(ai, store)
    await controller.begin()

    gate.clear()
    first = asyncio.create_task(controller.handle_utterance("answer one"))
    await _settle()
    assert controller.state == TurnState.THINKING

    with pytest.raises(TurnInProgress):
        await controller.handle_utterance("answer two")

    gate.set()
    await first
    assert ai.max_in_flight == 1
    assert ai.messages == [OPENING_MESSAGE, "answer one"]
    assert [m.text for m in controller.transcript] == ["Q1", "answer one", "Q2"]


@pytest.mark.asyncio
async def test_input_rejected_while_speaking(store):
    speech = ManualSpeech()
    ai = FakeAIService([["Q1"], ["Q2"]])
    controller = _controller(ai, store, speech)
    await controller.begin()
    assert controller.state == TurnState.SPEAKING

    with pytest.raises(TurnInProgress):
        await controller.handle_utterance("too early")

    speech.complete()
    assert controller.state == TurnState.IDLE
    await controller.handle_utterance("now")
    assert controller.transcript[-1].text == "Q2"


@pytest.mark.asyncio
async def test_blank_utterance_ignored(store):
    ai = FakeAIService([["Q1"]])
    controller = _controller(ai, store)
    await controller.begin()

    await controller.handle_utterance("   ")

    assert len(controller.transcript) == 1
    assert ai.messages == [OPENING_MESSAGE]


@pytest.mark.asyncio
async def test_turn_timeout_recovers_with_apology(store):
    gate = asyncio.Event()
    ai = FakeAIService([["never"]], gate=gate)
    controller = _controller(ai, store, turn_timeout=0.05)

    await controller.begin()

    assert controller.transcript == (TranscriptMessage(Speaker.AI, APOLOGY_MESSAGE),)
    assert ai.in_flight == 0
    assert controller.state == TurnState.IDLE


@pytest.mark.asyncio
async def test_cancel_turn(store):
    gate = asyncio.Event()
    gate.set()
    ai = FakeAIService([["Q1"], ["Q2"]], gate=gate)
    controller = _controller(ai, store)
    await controller.begin()
    assert controller.cancel_turn() is False

    gate.clear()
    task = asyncio.create_task(controller.handle_utterance("answer"))
    await _settle()
    assert controller.cancel_turn() is True
    await task

    assert controller.transcript[-1].text == APOLOGY_MESSAGE
    assert controller.state == TurnState.IDLE


@pytest.mark.asyncio
async def test_listening_and_finish(store):
    mic = RecordingSpeechInput()
    ai = FakeAIService([["Q1"], ["Q2"]])
    controller = _controller(ai, store, speech_in=mic)
    await controller.begin()
    assert controller.can_finish is False

    controller.start_listening()
    assert controller.state == TurnState.LISTENING
    await controller.handle_utterance("answer")
    assert mic.events == ["start", "stop"]
    assert controller.can_finish is True

    controller.finish()
    assert controller.state == TurnState.FINISHED
    with pytest.raises(InterviewFinished):
        await controller.handle_utterance("one more")


@pytest.mark.asyncio
async def test_finish_rejected_while_thinking(store):
    gate = asyncio.Event()
    ai = FakeAIService([["Q1"]], gate=gate)
    controller = _controller(ai, store)
    task = asyncio.create_task(controller.begin())
    await _settle()

    with pytest.raises(TurnInProgress):
        controller.finish()

    gate.set()
    await task
    controller.finish()
    assert controller.state == TurnState.FINISHED
