"""
Error taxonomy shared by adapters, controllers and the CLI.

- ConfigurationError: missing/invalid configuration (e.g. no API key). Fatal,
  raised at construction time.
- UninitializedSession: a turn was requested before start_session().
- BackendError: network/transport/backend failure. Recoverable.
- MalformedResponse: the backend answered, but not in the requested schema.
- TurnInProgress / InterviewFinished: input arrived in a state that cannot
  accept it.
- ResultsUnavailable: evaluation/roadmap stage failed; message is user-facing.
"""

from __future__ import annotations


class InterviewCoachError(Exception):
    """Base class for all application errors."""


class ConfigurationError(InterviewCoachError, RuntimeError):
    pass


class UninitializedSession(InterviewCoachError):
    pass


class BackendError(InterviewCoachError):
    pass


class MalformedResponse(InterviewCoachError, ValueError):
    pass


class TurnInProgress(InterviewCoachError):
    pass


class InterviewFinished(InterviewCoachError):
    pass


class ResultsUnavailable(InterviewCoachError):
    pass
