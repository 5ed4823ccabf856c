"""Failure taxonomy for the resume pipeline.

Every error carries a ``kind`` drawn from a closed enum. Callers dispatch on
``kind``; the message is for humans only.
"""

from __future__ import annotations

from enum import Enum


class ExtractionFailure(str, Enum):
    INSUFFICIENT_CONTENT = "insufficient-content"
    CORRUPT_SOURCE = "corrupt-source"
    BACKEND_UNAVAILABLE = "backend-unavailable"


class EvaluatorFailure(str, Enum):
    CREDENTIALS_MISSING = "credentials-missing"
    EMPTY_RESPONSE = "empty-response"
    MALFORMED_JSON = "malformed-json"
    CONTENT_POLICY_BLOCK = "content-policy-block"
    GENERIC = "generic"


class UploadFailure(str, Enum):
    TRANSPORT_FAILURE = "transport-failure"


class PersistenceFailure(str, Enum):
    WRITE_FAILURE = "write-failure"


class ConfigurationFailure(str, Enum):
    MISSING_CREDENTIALS = "missing-credentials"
    SINK_UNAVAILABLE = "sink-unavailable"


class PipelineError(Exception):
    """Base class for pipeline errors."""

    kind: Enum

    def __init__(self, kind: Enum, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return self.message


class ExtractionError(PipelineError):
    """Raised when a document cannot be turned into usable text."""

    kind: ExtractionFailure

    def __init__(
        self,
        kind: ExtractionFailure,
        message: str,
        *,
        causes: tuple["ExtractionError", ...] = (),
    ):
        super().__init__(kind, message)
        self.causes = causes

    @classmethod
    def combined(cls, primary: "ExtractionError", fallback: "ExtractionError") -> "ExtractionError":
        """Build the error raised when both backends failed."""
        return cls(
            fallback.kind,
            f"Both extraction backends failed. primary: {primary}; fallback: {fallback}",
            causes=(primary, fallback),
        )


class EvaluatorError(PipelineError):
    """Raised by evaluator services; the adapter turns it into data."""

    kind: EvaluatorFailure

    def __init__(self, kind: EvaluatorFailure, message: str):
        super().__init__(kind, message)


class UploadError(PipelineError):
    kind: UploadFailure

    def __init__(self, message: str, kind: UploadFailure = UploadFailure.TRANSPORT_FAILURE):
        super().__init__(kind, message)


class PersistenceError(PipelineError):
    kind: PersistenceFailure

    def __init__(self, message: str, kind: PersistenceFailure = PersistenceFailure.WRITE_FAILURE):
        super().__init__(kind, message)


class ConfigurationError(PipelineError):
    """Fatal, run-level error detected before any item is processed."""

    kind: ConfigurationFailure

    def __init__(self, kind: ConfigurationFailure, message: str):
        super().__init__(kind, message)


__all__ = [
    "ConfigurationError",
    "ConfigurationFailure",
    "EvaluatorError",
    "EvaluatorFailure",
    "ExtractionError",
    "ExtractionFailure",
    "PersistenceError",
    "PersistenceFailure",
    "PipelineError",
    "UploadError",
    "UploadFailure",
]
