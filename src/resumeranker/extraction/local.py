"""Primary extraction backend: local PDF parsing with pymupdf4llm."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import pymupdf4llm
import structlog

from ..errors import ExtractionError, ExtractionFailure


@dataclass
class LocalPdfConfig:
    """Configuration for local extraction."""

    # Substrings whose lines are dropped from the output (headers, watermarks).
    exclude_patterns: list[str] = field(default_factory=list)


class LocalPdfBackend:
    """Fast, local PDF-to-markdown extraction."""

    name = "local"

    def __init__(self, *, config: LocalPdfConfig | None = None) -> None:
        self._config = config or LocalPdfConfig()
        self._patterns = _build_patterns(self._config.exclude_patterns)
        self._logger = structlog.get_logger(__name__)

    def extract(self, path: Path, display_name: str) -> str:
        """Return markdown text extracted from a PDF, removing boilerplate lines.

        Raises ``ExtractionError(CORRUPT_SOURCE)`` when the file is missing or
        the PDF cannot be parsed.
        """

        path = Path(path)
        if not path.exists():
            raise ExtractionError(
                ExtractionFailure.CORRUPT_SOURCE,
                f"Source document for {display_name} not found: {path}",
            )

        try:
            markdown = pymupdf4llm.to_markdown(str(path))
        except Exception as exc:  # noqa: BLE001
            raise ExtractionError(
                ExtractionFailure.CORRUPT_SOURCE,
                f"Invalid or corrupted PDF file {display_name}: {exc}",
            ) from exc

        text = self._strip_boilerplate(markdown or "")
        self._logger.debug("extraction.local_done", filename=display_name, chars=len(text))
        return text

    def _strip_boilerplate(self, markdown: str) -> str:
        if not self._patterns:
            return markdown
        cleaned_lines: list[str] = []
        for line in markdown.splitlines():
            if line.strip() and any(pattern.search(line) for pattern in self._patterns):
                continue
            cleaned_lines.append(line)
        return "\n".join(cleaned_lines)


def _build_patterns(excludes: Iterable[str]) -> list[re.Pattern[str]]:
    patterns: list[re.Pattern[str]] = []
    for text in excludes:
        escaped = re.escape(text)
        # Allow optional whitespace and page counter suffix like " 1 / 63".
        patterns.append(re.compile(rf"{escaped}(?:\s+\d+\s*/\s*\d+)?"))
    return patterns


__all__ = ["LocalPdfBackend", "LocalPdfConfig"]
