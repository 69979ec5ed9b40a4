"""
creditmemo.exceptions
~~~~~~~~~~~~~~~~~~~~~
Exception hierarchy for the creditmemo service.
"""

from __future__ import annotations


class CreditMemoError(Exception):
    """Base exception for all creditmemo errors."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
        self.message = message

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by {type(self.cause).__name__}: {self.cause})"
        return self.message


class CreditMemoGenerationError(CreditMemoError):
    """
    Raised when the language model cannot produce a usable reply.

    Covers transport errors, timeouts, non-200 responses, empty replies and
    replies that cannot be coerced into the requested structure. The
    original failure is available as ``cause``.
    """


__all__ = ["CreditMemoError", "CreditMemoGenerationError"]
