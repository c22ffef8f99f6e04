"""
Exception hierarchy for the query pipeline.
"""

from typing import Optional


class FundbotError(Exception):
    """Base class for all fundbot errors"""


class CompletionError(FundbotError):
    """The upstream completion call failed (transport, quota, empty reply)."""


class StoreError(FundbotError):
    """The backing record store is unreachable or timed out."""


class ExtractionError(FundbotError):
    """No usable operation directive could be extracted from model output."""


class NoDirectiveFound(ExtractionError):
    """
    Model output contains no operation directive.

    When the model already answered the question itself (a general response
    envelope), the answer is carried so the caller can reuse it.
    """

    def __init__(self, message: str = "no action present", answer: Optional[str] = None):
        super().__init__(message)
        self.answer = answer


class DirectiveParseError(ExtractionError):
    """A directive was found but its payload could not be parsed or validated."""


class UnsupportedOperationError(FundbotError):
    """Operation name outside the closed set. Never recovered."""

    def __init__(self, operation: str):
        super().__init__(f"Unsupported operation: {operation}")
        self.operation = operation
