"""Choose and sequence extraction backends per document."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import pendulum
import structlog

from ..errors import ExtractionError, ExtractionFailure
from .base import ExtractionBackend, ExtractionResult

if TYPE_CHECKING:
    from ..sinks import FailureLog

PRIMARY_FAILED_REASON = "pdf-parse failed"
FALLBACK_FAILED_REASON = "fallback extraction failed"
INSUFFICIENT_TEXT_REASON = "insufficient text extracted"


@dataclass
class ExtractionConfig:
    """Selector thresholds."""

    min_text_chars: int = 50


class ExtractionStrategySelector:
    """Primary backend first; the fallback backend only for the enhanced tier."""

    def __init__(
        self,
        *,
        primary: ExtractionBackend,
        fallback: ExtractionBackend | None = None,
        failure_log: "FailureLog | None" = None,
        config: ExtractionConfig | None = None,
    ) -> None:
        self._primary = primary
        self._fallback = fallback
        self._failure_log = failure_log
        self._config = config or ExtractionConfig()
        self._logger = structlog.get_logger(__name__)

    def extract(self, path: Path, display_name: str, *, enhanced: bool = False) -> ExtractionResult:
        """Return accepted text for a document or raise ``ExtractionError``."""

        try:
            text = self._run(self._primary, path, display_name)
        except ExtractionError as primary_error:
            self._report(display_name, primary_error, PRIMARY_FAILED_REASON)
            if not enhanced or self._fallback is None:
                self._logger.info(
                    "extraction.no_fallback",
                    filename=display_name,
                    enhanced=enhanced,
                    error=str(primary_error),
                )
                raise

            self._logger.info(
                "extraction.fallback",
                filename=display_name,
                backend=self._fallback.name,
                reason=primary_error.kind.value,
            )
            try:
                text = self._run(self._fallback, path, display_name)
            except ExtractionError as fallback_error:
                self._report(display_name, fallback_error, FALLBACK_FAILED_REASON)
                raise ExtractionError.combined(primary_error, fallback_error) from fallback_error
            return ExtractionResult(text=text, backend=self._fallback.name, fallback_used=True)

        return ExtractionResult(text=text, backend=self._primary.name)

    def _run(self, backend: ExtractionBackend, path: Path, display_name: str) -> str:
        try:
            raw = backend.extract(path, display_name)
        except ExtractionError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ExtractionError(
                ExtractionFailure.BACKEND_UNAVAILABLE,
                f"{backend.name} extraction failed for {display_name}: {exc}",
            ) from exc

        text = (raw or "").strip()
        if len(text) < self._config.min_text_chars:
            raise ExtractionError(
                ExtractionFailure.INSUFFICIENT_CONTENT,
                f"Insufficient text extracted from {display_name}: {len(text)} chars "
                f"(minimum {self._config.min_text_chars})",
            )
        return text

    def _report(self, display_name: str, exc: ExtractionError, reason: str) -> None:
        if exc.kind is ExtractionFailure.INSUFFICIENT_CONTENT:
            reason = INSUFFICIENT_TEXT_REASON
        self._logger.warning("extraction.failed", filename=display_name, reason=reason, error=str(exc))
        if self._failure_log is None:
            return
        try:
            self._failure_log.log_failure(display_name, reason, pendulum.now("UTC"))
        except Exception as log_error:  # noqa: BLE001
            self._logger.warning("failure_log.write_failed", filename=display_name, error=str(log_error))


__all__ = [
    "ExtractionConfig",
    "ExtractionStrategySelector",
    "FALLBACK_FAILED_REASON",
    "INSUFFICIENT_TEXT_REASON",
    "PRIMARY_FAILED_REASON",
]
