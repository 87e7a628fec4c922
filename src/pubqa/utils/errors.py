"""Base error types shared across the pipeline."""
from __future__ import annotations

from typing import Optional


class PubQAError(Exception):
    """Base class for request-fatal pipeline errors.

    ``code`` is the machine-readable value returned in the structured
    error body; ``status_code`` is the HTTP status the API maps it to.
    """

    code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(PubQAError):
    """Missing backend credentials or endpoints."""

    code = "CONFIGURATION_ERROR"


class QuestionValidationError(PubQAError):
    """Question is missing, blank or too long."""

    code = "INVALID_QUESTION"
    status_code = 400
