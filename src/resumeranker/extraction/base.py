from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class ExtractionBackend(Protocol):
    """Backend contract: turn a document into plain text or raise ExtractionError."""

    name: str

    def extract(self, path: Path, display_name: str) -> str:
        """Return the document text."""


@dataclass(slots=True)
class ExtractionResult:
    """Text accepted by the selector and the backend that produced it."""

    text: str
    backend: str
    fallback_used: bool = False
