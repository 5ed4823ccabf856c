"""Rank per-item records and assemble the run result."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .schemas import BatchRunResult, CandidateRecord


@dataclass(slots=True)
class RunCounters:
    """Run-level counters collected by the orchestrator."""

    received: int = 0
    recognized: int = 0
    skipped_wrong_type: int = 0
    fallback_used: int = 0
    failed_items: list[str] = field(default_factory=list)


def rank_records(records: Iterable[CandidateRecord]) -> list[CandidateRecord]:
    """Sort by descending score; equal scores keep processing order."""
    return sorted(records, key=lambda record: record.score, reverse=True)


def aggregate_results(
    records: Iterable[CandidateRecord],
    counters: RunCounters,
    *,
    success: bool = True,
    message: str = "Processing complete.",
    started_at: str | None = None,
    finished_at: str | None = None,
    app_version: str | None = None,
) -> BatchRunResult:
    return BatchRunResult(
        success=success,
        message=message,
        received=counters.received,
        recognized=counters.recognized,
        skipped_wrong_type=counters.skipped_wrong_type,
        fallback_used=counters.fallback_used,
        records=rank_records(records),
        failed_items=list(counters.failed_items),
        started_at=started_at,
        finished_at=finished_at,
        app_version=app_version,
    )


__all__ = ["RunCounters", "aggregate_results", "rank_records"]
