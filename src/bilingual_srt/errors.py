"""Error types shared across the translator."""

from __future__ import annotations

from typing import Optional


class SrtTranslateError(Exception):
    """
    Base error.

    ``message`` is meant for users; ``detail`` keeps the technical cause
    for logging.
    """

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


class ValidationError(SrtTranslateError):
    """Malformed or missing request input."""


class RemoteError(SrtTranslateError):
    """A translation vendor call failed (timeout, bad status, bad payload)."""


class ConfigurationError(SrtTranslateError):
    """Vendor credentials or tooling missing, or engine not implemented."""


class DocumentBusyError(SrtTranslateError):
    """A translation run is already in flight for this document."""
