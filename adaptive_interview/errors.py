# adaptive_interview/errors.py
from __future__ import annotations


class InterviewEngineError(Exception):
    """Base class for engine errors."""


class ModelUnavailable(InterviewEngineError):
    """The model is disabled, unreachable, or timed out."""


class ModelParseError(InterviewEngineError):
    """The model replied, but without the integer or id we asked for."""


class NoQuestionsAvailable(InterviewEngineError):
    """
    Every relaxation step came up empty for this role.
    Not a failure: it tells the caller to end the session.
    """
