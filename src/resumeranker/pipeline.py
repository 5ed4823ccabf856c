"""Batch orchestration: extraction, evaluation, upload and persistence per item."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Literal, Sequence, TypeVar

import pendulum
import structlog

from . import __version__
from .aggregator import RunCounters, aggregate_results
from .errors import (
    ConfigurationError,
    ConfigurationFailure,
    ExtractionError,
    ExtractionFailure,
    PersistenceError,
    UploadError,
)
from .evaluation import EvaluatorAdapter, extract_email
from .extraction import ExtractionStrategySelector
from .normalizer import NormalizerConfig, normalize_candidate
from .schemas import (
    NOT_AVAILABLE,
    PDF_MEDIA_TYPE,
    UPLOAD_FAILED,
    BatchRunResult,
    CandidateRecord,
    DocumentItem,
)
from .sinks import FailureLog, ObjectStorage, RecordStore

T = TypeVar("T")

WRONG_TYPE_REASON = "non-pdf file type"
UPLOAD_FAILED_REASON = "upload failed"
PERSISTENCE_FAILED_REASON = "persistence failed"
SERVICE_UNAVAILABLE_REASON = "service unavailable"

_UPLOAD_NOTE_CHARS = 200
INVALID_TYPE_POLICIES = ("log", "record")


class RunState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    PROCESSING = "processing"
    COOLING_DOWN = "cooling_down"
    AGGREGATING = "aggregating"
    DONE = "done"


@dataclass
class PipelineConfig:
    """Batching and type-filter settings."""

    batch_size: int = 5
    cooldown_seconds: float = 5.0
    expected_media_type: str = PDF_MEDIA_TYPE
    # "log": wrong-type items only reach the failure log; "record": they also get a record.
    invalid_type_policy: Literal["log", "record"] = "log"

    def __post_init__(self) -> None:
        if self.invalid_type_policy not in INVALID_TYPE_POLICIES:
            raise ValueError(
                f"invalid_type_policy must be one of {INVALID_TYPE_POLICIES}, got {self.invalid_type_policy!r}"
            )
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    if size < 1:
        raise ValueError("batch size must be at least 1")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class BatchOrchestrator:
    """Run a set of documents through the pipeline in rate-limited batches.

    Items inside a batch are processed one at a time and a cooldown separates
    consecutive batches. A failure in any stage only affects its own item,
    which still yields a record.
    """

    def __init__(
        self,
        *,
        selector: ExtractionStrategySelector,
        evaluator: EvaluatorAdapter,
        storage: ObjectStorage,
        store: RecordStore,
        failure_log: FailureLog,
        config: PipelineConfig | None = None,
        normalizer_config: NormalizerConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._selector = selector
        self._evaluator = evaluator
        self._storage = storage
        self._store = store
        self._failure_log = failure_log
        self._config = config or PipelineConfig()
        self._normalizer_config = normalizer_config or NormalizerConfig()
        self._sleep = sleep
        self._state = RunState.IDLE
        self._logger = structlog.get_logger(__name__)

    @property
    def state(self) -> RunState:
        return self._state

    def run(
        self,
        items: Sequence[DocumentItem],
        *,
        job_requirement: str = "",
        recruiter_notes: str = "",
        enhanced: bool = False,
    ) -> BatchRunResult:
        with structlog.contextvars.bound_contextvars(run_id=uuid.uuid4().hex):
            return self._run(
                items,
                job_requirement=job_requirement,
                recruiter_notes=recruiter_notes,
                enhanced=enhanced,
            )

    def _run(
        self,
        items: Sequence[DocumentItem],
        *,
        job_requirement: str,
        recruiter_notes: str,
        enhanced: bool,
    ) -> BatchRunResult:
        started_at = pendulum.now("UTC").to_iso8601_string()
        counters = RunCounters(received=len(items))
        self._logger.info("pipeline.run_started", received=len(items), enhanced=enhanced)

        expected = self._config.expected_media_type
        matching = [item for item in items if item.media_type == expected]
        wrong_type = [item for item in items if item.media_type != expected]
        counters.recognized = len(matching)
        counters.skipped_wrong_type = len(wrong_type)

        self._set_state(RunState.VALIDATING)
        config_error = self._validate()
        if config_error is not None:
            records = self._short_circuit(items, config_error, counters)
            return self._finish(
                records,
                counters,
                started_at,
                success=False,
                message=f"Processing aborted: {config_error}",
            )

        if not items:
            return self._finish([], counters, started_at, message="No files were provided for processing.")

        records: list[CandidateRecord] = []
        if wrong_type:
            self._logger.warning("pipeline.wrong_type_skipped", count=len(wrong_type), expected=expected)
        for item in wrong_type:
            record = self._handle_wrong_type(item, counters)
            if record is not None:
                records.append(record)

        if not matching:
            return self._finish(
                records,
                counters,
                started_at,
                message="No valid PDF files were provided for processing.",
            )

        batches = chunked(matching, self._config.batch_size)
        for index, batch in enumerate(batches, start=1):
            self._set_state(RunState.PROCESSING)
            self._logger.info("pipeline.batch_started", batch=index, total=len(batches), size=len(batch))
            for item in batch:
                records.append(
                    self._process_item(
                        item,
                        job_requirement=job_requirement,
                        recruiter_notes=recruiter_notes,
                        enhanced=enhanced,
                        counters=counters,
                    )
                )
            if index < len(batches) and self._config.cooldown_seconds > 0:
                self._set_state(RunState.COOLING_DOWN)
                self._logger.info("pipeline.cooldown", seconds=self._config.cooldown_seconds)
                self._sleep(self._config.cooldown_seconds)

        return self._finish(records, counters, started_at)

    def _set_state(self, state: RunState) -> None:
        self._state = state
        self._logger.debug("run.state", state=state.value)

    def _validate(self) -> ConfigurationError | None:
        if not self._evaluator.configured:
            return ConfigurationError(
                ConfigurationFailure.MISSING_CREDENTIALS,
                "Evaluation service API key is not configured.",
            )
        if not self._storage.available() or not self._store.available():
            return ConfigurationError(
                ConfigurationFailure.SINK_UNAVAILABLE,
                "Storage or record store failed to initialize.",
            )
        return None

    def _short_circuit(
        self,
        items: Sequence[DocumentItem],
        error: ConfigurationError,
        counters: RunCounters,
    ) -> list[CandidateRecord]:
        self._logger.error("pipeline.configuration_error", kind=error.kind.value, error=str(error))
        label = "API Key Missing" if error.kind is ConfigurationFailure.MISSING_CREDENTIALS else "Service Error"
        records: list[CandidateRecord] = []
        for item in items:
            try:
                record = self._normalize(
                    {
                        "name": label,
                        "parsedText": f"Processing skipped: {error} File: {item.display_name}",
                        "jobTitle": "Error",
                        "resumeUrl": f"File received: {item.display_name}",
                    },
                    uuid.uuid4().hex,
                    label_name=True,
                )
                if error.kind is not ConfigurationFailure.SINK_UNAVAILABLE:
                    self._persist(record, item)
                self._report(item, SERVICE_UNAVAILABLE_REASON)
                counters.failed_items.append(item.display_name)
                records.append(record)
            finally:
                self._release(item)
        return records

    def _handle_wrong_type(self, item: DocumentItem, counters: RunCounters) -> CandidateRecord | None:
        try:
            counters.failed_items.append(item.display_name)
            self._report(item, WRONG_TYPE_REASON)
            if self._config.invalid_type_policy != "record":
                return None
            record = self._normalize(
                {
                    "name": "Invalid File Type",
                    "parsedText": (
                        f"Skipped {item.display_name}: unsupported file type {item.media_type!r}; "
                        f"only {self._config.expected_media_type} documents are processed."
                    ),
                    "jobTitle": "Invalid File Type",
                },
                uuid.uuid4().hex,
                label_name=True,
            )
            self._persist(record, item)
            return record
        finally:
            self._release(item)

    def _process_item(
        self,
        item: DocumentItem,
        *,
        job_requirement: str,
        recruiter_notes: str,
        enhanced: bool,
        counters: RunCounters,
    ) -> CandidateRecord:
        record_id = uuid.uuid4().hex
        log = self._logger.bind(filename=item.display_name, candidate_id=record_id)
        known: dict[str, Any] = {}
        log.info("pipeline.item_started", size=item.size)
        try:
            try:
                extraction = self._selector.extract(item.path, item.display_name, enhanced=enhanced)
            except ExtractionError as exc:
                # The selector already reported this failure to the failure log.
                log.warning("pipeline.extraction_failed", kind=exc.kind.value, error=str(exc))
                counters.failed_items.append(item.display_name)
                record = self._extraction_failure_record(exc, record_id)
                self._persist(record, item)
                return record

            if extraction.fallback_used:
                counters.fallback_used += 1
            scanned_email = extract_email(extraction.text)
            if scanned_email:
                known["email"] = scanned_email

            outcome = self._evaluator.evaluate(extraction.text, job_requirement, recruiter_notes)
            if outcome.truncated:
                log.warning("pipeline.text_truncated", chars=len(extraction.text))
            if not outcome.ok:
                log.warning(
                    "pipeline.evaluation_failed",
                    kind=outcome.failure.value,
                    label=outcome.label,
                    detail=outcome.detail,
                )
                counters.failed_items.append(item.display_name)
                self._report(item, f"evaluator error: {outcome.label}")
                record = self._normalize(outcome.fields, record_id, label_name=True)
                self._persist(record, item)
                return record

            record = self._normalize(
                {**outcome.fields, "approved": False, "resumeUrl": NOT_AVAILABLE},
                record_id,
            )
            known.update(name=record.name, email=record.email)
            log.info("pipeline.evaluated", name=record.name, score=record.score)

            record = self._upload(record, item)
            self._persist(record, item)
            log.info("pipeline.item_finished", score=record.score, resume_url=record.resume_url)
            return record
        except Exception as exc:  # noqa: BLE001
            log.exception("pipeline.item_failed", error=str(exc))
            counters.failed_items.append(item.display_name)
            self._report(item, str(exc) or type(exc).__name__)
            record = self._normalize(
                {
                    **known,
                    "name": known.get("name") or "Processing Failed",
                    "parsedText": f"Processing failed: {exc}",
                    "jobTitle": "Processing Failed",
                },
                record_id,
                label_name="name" not in known,
            )
            self._persist(record, item)
            return record
        finally:
            self._release(item)

    def _upload(self, record: CandidateRecord, item: DocumentItem) -> CandidateRecord:
        try:
            url = self._storage.upload(item.path, item.display_name, record.id)
        except Exception as exc:  # noqa: BLE001
            error = exc if isinstance(exc, UploadError) else UploadError(str(exc))
            self._logger.error("pipeline.upload_failed", filename=item.display_name, error=str(error))
            self._report(item, UPLOAD_FAILED_REASON)
            message = str(error)
            return self._amend(
                record,
                resumeUrl=UPLOAD_FAILED,
                parsedText=(
                    f"{record.parsed_text}\n\nNote: Failed to upload resume file: "
                    f"{message[:_UPLOAD_NOTE_CHARS]}..."
                ),
            )
        return self._amend(record, resumeUrl=url)

    def _persist(self, record: CandidateRecord, item: DocumentItem) -> None:
        try:
            self._store.put(record)
        except Exception as exc:  # noqa: BLE001
            error = exc if isinstance(exc, PersistenceError) else PersistenceError(str(exc))
            self._logger.error(
                "pipeline.persist_failed",
                filename=item.display_name,
                candidate_id=record.id,
                kind=error.kind.value,
                error=str(error),
            )
            self._report(item, PERSISTENCE_FAILED_REASON)

    def _extraction_failure_record(self, exc: ExtractionError, record_id: str) -> CandidateRecord:
        label = (
            "Insufficient Content"
            if exc.kind is ExtractionFailure.INSUFFICIENT_CONTENT
            else "Extraction Failed"
        )
        return self._normalize(
            {
                "name": label,
                "parsedText": f"Text extraction failed: {exc}",
                "jobTitle": label,
            },
            record_id,
            label_name=True,
        )

    def _normalize(self, payload: dict[str, Any], record_id: str, *, label_name: bool = False) -> CandidateRecord:
        return normalize_candidate(payload, record_id, config=self._normalizer_config, label_name=label_name)

    def _amend(self, record: CandidateRecord, **changes: Any) -> CandidateRecord:
        return self._normalize({**record.to_payload(), **changes}, record.id)

    def _report(self, item: DocumentItem, reason: str) -> None:
        try:
            self._failure_log.log_failure(item.display_name, reason, pendulum.now("UTC"))
        except Exception as exc:  # noqa: BLE001
            self._logger.warning("failure_log.write_failed", filename=item.display_name, error=str(exc))

    def _release(self, item: DocumentItem) -> None:
        if not item.temporary:
            return
        try:
            Path(item.path).unlink(missing_ok=True)
            self._logger.debug("pipeline.temp_released", path=str(item.path))
        except OSError as exc:
            self._logger.error("pipeline.temp_release_failed", path=str(item.path), error=str(exc))

    def _finish(
        self,
        records: list[CandidateRecord],
        counters: RunCounters,
        started_at: str,
        *,
        success: bool = True,
        message: str = "Processing complete.",
    ) -> BatchRunResult:
        self._set_state(RunState.AGGREGATING)
        result = aggregate_results(
            records,
            counters,
            success=success,
            message=message,
            started_at=started_at,
            finished_at=pendulum.now("UTC").to_iso8601_string(),
            app_version=__version__,
        )
        self._set_state(RunState.DONE)
        self._logger.info(
            "pipeline.run_finished",
            success=success,
            records=len(result.records),
            failed=len(result.failed_items),
            fallback_used=result.fallback_used,
        )
        return result


__all__ = ["BatchOrchestrator", "PipelineConfig", "RunState", "chunked"]
