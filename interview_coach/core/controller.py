"""
Purpose: The single orchestration point for the conversational part of a
session. Drives the turn loop and owns the turn state machine:

    idle -> listening -> (utterance) -> thinking -> speaking -> idle
                                                  any -> finished

Key responsibilities:
- Start the backend session and issue the opening turn.
- Send the latest user utterance, accumulate streamed fragments into a
  display buffer, then commit the full reply to the transcript as one message.
- Hand the reply to speech output; speech completion returns to idle.
- Recover from any turn failure with a fixed apology (session continues).
- Enforce at most one in-flight turn: input is rejected while thinking/speaking.

Testing: Pure unit tests with a fake AIService and a fake SpeechOutput.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Callable, Optional

from .errors import InterviewFinished, TurnInProgress
from .interfaces import AIService, SpeechInput, SpeechOutput
from .models import Speaker, TranscriptMessage, TurnState
from .persistence.session_store import InMemorySessionStore

logger = logging.getLogger(__name__)

OPENING_MESSAGE = "Start the interview."
APOLOGY_MESSAGE = "I'm sorry, I encountered an error. Let's try that again."


class InterviewSessionController:
    def __init__(
        self,
        ai: AIService,
        speech_out: SpeechOutput,
        *,
        store: InMemorySessionStore,
        speech_in: Optional[SpeechInput] = None,
        turn_timeout: Optional[float] = 60.0,
        on_update: Optional[Callable[[str], None]] = None,
    ):
        self.ai: AIService = ai
        self.speech_out: SpeechOutput = speech_out
        self.speech_in: Optional[SpeechInput] = speech_in
        self.store = store
        self.turn_timeout = turn_timeout
        self.on_update = on_update

        self.state: TurnState = TurnState.THINKING
        self.display_buffer: str = ""
        self._turn_task: Optional[asyncio.Task] = None
        self._cancel_requested = False

    @property
    def transcript(self) -> tuple[TranscriptMessage, ...]:
        return self.store.transcript

    @property
    def can_finish(self) -> bool:
        """True once there is at least one question and one answer."""
        return len(self.store.transcript) >= 2

    def _set_state(self, state: TurnState) -> None:
        if state != self.state:
            logger.debug("Turn state %s -> %s", self.state.value, state.value)
        self.state = state

    async def begin(self) -> None:
        """Start the backend session and get the first question (once)."""
        if self.store.transcript:
            self._set_state(TurnState.IDLE)
            return
        user = self.store.user
        if user is None:
            raise ValueError("No user logged in; call store.login() first.")
        self.ai.start_session(user.goal, self.store.interview_types)
        await self._run_turn(OPENING_MESSAGE)

    def start_listening(self) -> None:
        if self.state != TurnState.IDLE:
            return
        self._set_state(TurnState.LISTENING)
        if self.speech_in is not None:
            self.speech_in.start_listening()

    def stop_listening(self) -> None:
        if self.state != TurnState.LISTENING:
            return
        if self.speech_in is not None:
            self.speech_in.stop_listening()
        self._set_state(TurnState.IDLE)

    async def handle_utterance(self, text: str) -> None:
        """Sink for a finalized utterance from speech input."""
        if self.state == TurnState.FINISHED:
            raise InterviewFinished("The interview has already finished.")
        if self.state in (TurnState.THINKING, TurnState.SPEAKING):
            raise TurnInProgress(
                f"Cannot accept input while the interviewer is {self.state.value}."
            )
        utterance = (text or "").strip()
        if not utterance:
            return
        if self.state == TurnState.LISTENING and self.speech_in is not None:
            self.speech_in.stop_listening()
        self.store.add_message(TranscriptMessage(Speaker.USER, utterance))
        await self._run_turn(utterance)

    def cancel_turn(self) -> bool:
        """Cancel the in-flight turn, if any. It then ends with the apology."""
        task = self._turn_task
        if task is None or task.done():
            return False
        self._cancel_requested = True
        task.cancel()
        return True

    def finish(self) -> None:
        if self.state == TurnState.THINKING:
            raise TurnInProgress("Wait for the interviewer to reply before finishing.")
        if self.state == TurnState.LISTENING and self.speech_in is not None:
            self.speech_in.stop_listening()
        self._set_state(TurnState.FINISHED)
        logger.info(
            "Interview finished after %d messages", len(self.store.transcript)
        )

    async def _collect_reply(self, message: str) -> str:
        parts: list[str] = []
        stream = self.ai.stream_next_turn(message)
        try:
            async for fragment in stream:
                parts.append(fragment)
                self.display_buffer += fragment
                if self.on_update is not None:
                    self.on_update(self.display_buffer)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
        return "".join(parts)

    async def _run_turn(self, message: str) -> None:
        self._set_state(TurnState.THINKING)
        self.display_buffer = ""
        self._cancel_requested = False
        task = asyncio.ensure_future(self._collect_reply(message))
        self._turn_task = task
        try:
            reply = await asyncio.wait_for(task, timeout=self.turn_timeout)
        except asyncio.CancelledError:
            if not self._cancel_requested:
                raise
            logger.info("Turn cancelled by request")
            self._recover()
            return
        except Exception:
            logger.exception("Error getting next AI message")
            self._recover()
            return
        finally:
            self._turn_task = None

        self.store.add_message(TranscriptMessage(Speaker.AI, reply))
        self.display_buffer = ""
        self._speak(reply)

    def _recover(self) -> None:
        # partial fragments never reach the transcript
        self.display_buffer = ""
        self.store.add_message(TranscriptMessage(Speaker.AI, APOLOGY_MESSAGE))
        self._speak(APOLOGY_MESSAGE)

    def _speak(self, text: str) -> None:
        self._set_state(TurnState.SPEAKING)
        self.speech_out.speak(text, self._on_speech_complete)

    def _on_speech_complete(self) -> None:
        if self.state == TurnState.SPEAKING:
            self._set_state(TurnState.IDLE)
