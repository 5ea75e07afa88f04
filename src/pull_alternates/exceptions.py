"""Exceptions raised while loading mirror policy or computing alternates."""

from __future__ import annotations

from typing import Optional


class PullAlternatesError(Exception):
    """Base class for all pull-alternates errors."""


class InvalidReferenceError(PullAlternatesError, ValueError):
    """
    An image reference could not be parsed.

    The first argument is the reference given by the caller.
    """

    def __init__(self, reference: str, reason: str = ""):
        super().__init__(reference, reason)
        self.reference = reference
        self.reason = reason

    def __str__(self) -> str:
        if self.reason:
            return f"Invalid image reference {self.reference!r}: {self.reason}"
        return f"Invalid image reference: {self.reference!r}"


class ConfigLoadError(PullAlternatesError):
    """
    Mirror policy could not be loaded.

    Raised for unreadable files, malformed documents, lister failures and
    cancelled loads. Never cached: a later call will attempt the load again.

    Attributes:
        source: Description of the policy source that failed (file path or lister)
    """

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source

    def __str__(self) -> str:
        message = super().__str__()
        if self.source:
            return f"{message} (source: {self.source})"
        return message


class PolicyFormatError(ConfigLoadError):
    """A policy document does not match the mirror policy schema."""


class LoadCancelledError(ConfigLoadError):
    """The policy load was cancelled or ran past its deadline."""
