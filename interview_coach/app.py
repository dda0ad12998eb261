"""
Console front end.
Purpose: thin glue that collects the interview setup from the command line,
reads typed answers as utterances, prints results and runs the roadmap
checklist. All work is delegated to the controllers so the core can be
tested without a terminal.
"""

from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from .core.config import Settings, get_settings
from .core.controller import InterviewSessionController
from .core.controller_results import ResultsController
from .core.errors import ConfigurationError, ResultsUnavailable
from .core.interfaces import AIService
from .core.models import Evaluation, InterviewType, RoadmapItem, TurnState
from .core.persistence.session_store import InMemorySessionStore
from .core.services.provider import build_ai_service
from .core.services.speech import ConsoleSpeechInput, ConsoleSpeechOutput

logger = logging.getLogger(__name__)

FINISH_COMMAND = "/finish"
QUIT_COMMAND = "/quit"
DONE_COMMAND = "/done"
PROGRESS_COMMAND = "/progress"
NEW_COMMAND = "/new"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        stream=sys.stderr,
        format="[%(asctime)s] %(lineno)d %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, str(level).upper(), logging.INFO),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="interview-coach",
        description="Voice-style mock interview with an AI interviewer (console).",
    )
    parser.add_argument("--name", required=True, help="Your name")
    parser.add_argument("--goal", required=True, help="Target role, e.g. 'Backend Engineer'")
    parser.add_argument(
        "--type",
        dest="types",
        action="append",
        choices=[t.value for t in InterviewType],
        help="Interview round (repeatable). Default: behavioral",
    )
    parser.add_argument(
        "--provider",
        default=None,
        help="Override AI_PROVIDER (gemini | openai)",
    )
    return parser


def render_evaluation(evaluation: Evaluation) -> str:
    return "\n".join(
        [
            f"Overall level: {evaluation.level.value}",
            evaluation.summary,
            "",
            f"Knowledge: {evaluation.knowledge}",
            f"Skills: {evaluation.skills}",
            f"Confidence: {evaluation.confidence}",
            f"Communication: {evaluation.communication}",
        ]
    )


def render_roadmap(items: Sequence[RoadmapItem], start: int = 1) -> str:
    lines: list[str] = []
    for n, item in enumerate(items, start=start):
        mark = "x" if item.completed else " "
        lines.append(f"{n}. [{mark}] {item.title}")
        lines.append(f"   {item.description}")
        lines.append(f"   Key concepts: {', '.join(item.key_concepts)}")
        lines.append(f"   Project: {item.project}")
        for r in item.resources:
            lines.append(f"   - ({r.type.value}) {r.title}: {r.url}")
    return "\n".join(lines)


async def _read_line(prompt: str) -> Optional[str]:
    try:
        return await asyncio.to_thread(input, prompt)
    except EOFError:
        return None


async def _conduct(
    ai: AIService, store: InMemorySessionStore, settings: Settings
) -> bool:
    """Run the turn loop. Returns False if the user quit before finishing."""
    speech_out = ConsoleSpeechOutput()
    controller = InterviewSessionController(
        ai,
        speech_out,
        store=store,
        speech_in=ConsoleSpeechInput(),
        turn_timeout=settings.turn_timeout,
        on_update=speech_out.show_partial,
    )

    print(f"{store.interview_title()} for: {store.user.goal}")
    print(f"Type your answers. {FINISH_COMMAND} to get results, {QUIT_COMMAND} to exit.\n")
    await controller.begin()

    while controller.state != TurnState.FINISHED:
        controller.start_listening()
        line = await _read_line("You: ")
        controller.stop_listening()
        if line is None or line.strip() == QUIT_COMMAND:
            return False
        if line.strip() == FINISH_COMMAND:
            if not controller.can_finish:
                print("Answer at least one question before finishing.")
                continue
            controller.finish()
            break
        await controller.handle_utterance(line)
    return True


async def _review_roadmap(results: ResultsController) -> bool:
    """Roadmap checklist loop. Returns True when a new interview was requested."""
    print(
        f"\n{DONE_COMMAND} N toggles step N, {PROGRESS_COMMAND} shows progress, "
        f"{NEW_COMMAND} starts over, {QUIT_COMMAND} exits."
    )
    while True:
        line = await _read_line("> ")
        if line is None:
            return False
        command, _, arg = line.strip().partition(" ")
        if command == QUIT_COMMAND:
            return False
        if command == NEW_COMMAND:
            return True
        if command == PROGRESS_COMMAND:
            p = results.progress()
            print(f"{p.completed}/{p.total} ({p.percentage}%)")
        elif command == DONE_COMMAND:
            roadmap = results.store.roadmap
            try:
                n = int(arg)
            except ValueError:
                n = 0
            if not 1 <= n <= len(roadmap):
                print(f"No roadmap step {arg.strip() or '?'}; pick 1-{len(roadmap)}.")
                continue
            item = results.toggle(roadmap[n - 1].id)
            print(render_roadmap([item], start=n))
        else:
            print(f"Unknown command: {line.strip()}")


async def run_interview(
    settings: Settings,
    *,
    name: str,
    goal: str,
    interview_types: Sequence[InterviewType],
    provider: Optional[str] = None,
) -> int:
    ai = build_ai_service(settings, provider=provider)
    store = InMemorySessionStore()

    while True:
        store.login(name, goal, interview_types)
        if not await _conduct(ai, store, settings):
            return 0

        print("\nAnalyzing your interview and generating your roadmap...\n")
        results = ResultsController(ai, store=store)
        try:
            evaluation, roadmap = await results.fetch_results()
        except ResultsUnavailable as e:
            print(str(e), file=sys.stderr)
            return 1

        print(render_evaluation(evaluation))
        print("\nYour personalized roadmap:\n")
        print(render_roadmap(roadmap))

        if not await _review_roadmap(results):
            return 0
        store.reset()
        print("\nStarting a new interview.\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    types = [InterviewType(t) for t in (args.types or [InterviewType.BEHAVIORAL.value])]
    try:
        return asyncio.run(
            run_interview(
                settings,
                name=args.name,
                goal=args.goal,
                interview_types=types,
                provider=args.provider,
            )
        )
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130
