"""
Purpose: console stand-ins for the speech collaborators. Typed lines play the
role of finalized utterances; "speaking" prints the interviewer's text.

ConsoleSpeechOutput also renders the display buffer while a reply streams in,
so a streamed reply is not printed twice when it is then spoken.
"""

from __future__ import annotations
import sys
from typing import Callable, Optional, TextIO


class ConsoleSpeechInput:
    def __init__(self) -> None:
        self.listening = False

    def start_listening(self) -> None:
        self.listening = True

    def stop_listening(self) -> None:
        self.listening = False


class ConsoleSpeechOutput:
    def __init__(self, out: Optional[TextIO] = None, *, label: str = "Interviewer"):
        self.out = out or sys.stdout
        self.label = label
        self._shown = ""

    def show_partial(self, buffer: str) -> None:
        """on_update hook: print only what was added since the last call."""
        if not self._shown:
            self.out.write(f"{self.label}: ")
        if buffer.startswith(self._shown):
            self.out.write(buffer[len(self._shown):])
        self.out.flush()
        self._shown = buffer

    def speak(self, text: str, on_complete: Callable[[], None]) -> None:
        if self._shown and self._shown == text:
            self.out.write("\n")
        else:
            if self._shown:
                # a partial reply was abandoned
                self.out.write("\n")
            self.out.write(f"{self.label}: {text}\n")
        self.out.flush()
        self._shown = ""
        on_complete()
