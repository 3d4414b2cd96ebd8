"""Summarizer error classes."""

from __future__ import annotations

from typing import Optional


class SummarizationError(Exception):
    """Base exception for summarization errors."""

    pass


class SummarizerUnavailableError(SummarizationError):
    """Raised when no summarizer backend is configured or reachable."""

    pass


class SummarizerResponseError(SummarizationError):
    """Raised when the summarizer backend answers with a failure.

    Attributes:
        status_code: HTTP status returned by the backend, when known.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
