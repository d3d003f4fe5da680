"""Domain errors raised by the interview orchestrator."""
from __future__ import annotations


class InterviewError(Exception):
    """Base class for interview orchestration errors."""


class InvalidInputError(InterviewError, ValueError):
    pass


class InvalidVisaTypeError(InvalidInputError):
    def __init__(self, visa_type: str, allowed: tuple):
        super().__init__(f"Invalid visa type. Must be one of: {', '.join(allowed)}")
        self.visa_type = visa_type


class SessionNotFoundError(InterviewError, LookupError):
    def __init__(self, session_id: str):
        super().__init__("Session not found or expired")
        self.session_id = session_id


class SessionCompleteError(InterviewError):
    def __init__(self, session_id: str):
        super().__init__("All questions have been answered; end the interview to see results")
        self.session_id = session_id


__all__ = [
    "InterviewError",
    "InvalidInputError",
    "InvalidVisaTypeError",
    "SessionCompleteError",
    "SessionNotFoundError",
]
