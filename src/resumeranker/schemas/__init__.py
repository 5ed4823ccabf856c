"""Pydantic schema definitions shared across the pipeline."""

from __future__ import annotations

from .candidate import (
    EMAIL_PATTERN,
    NO_SUMMARY,
    NOT_AVAILABLE,
    UNKNOWN_NAME,
    UPLOAD_FAILED,
    BatchRunResult,
    CandidateRecord,
)
from .document import PDF_MEDIA_TYPE, DocumentItem

__all__ = [
    "BatchRunResult",
    "CandidateRecord",
    "DocumentItem",
    "EMAIL_PATTERN",
    "NO_SUMMARY",
    "NOT_AVAILABLE",
    "PDF_MEDIA_TYPE",
    "UNKNOWN_NAME",
    "UPLOAD_FAILED",
]
