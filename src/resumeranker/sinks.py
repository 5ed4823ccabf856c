"""Collaborators the pipeline writes to: object storage, record store, failure log."""

from __future__ import annotations

import json
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import quote

import pendulum
import structlog

from .errors import PersistenceError, UploadError
from .schemas import CandidateRecord


@runtime_checkable
class ObjectStorage(Protocol):
    def available(self) -> bool:
        """Return True when uploads can be accepted."""

    def upload(self, path: Path, display_name: str, owner_id: str) -> str:
        """Store the document and return its public URL, or raise UploadError."""


@runtime_checkable
class RecordStore(Protocol):
    def available(self) -> bool:
        """Return True when records can be written."""

    def put(self, record: CandidateRecord) -> None:
        """Write a record, replacing any previous one with the same id."""


@runtime_checkable
class FailureLog(Protocol):
    def log_failure(self, display_name: str, reason: str, timestamp: pendulum.DateTime) -> None:
        """Append a failure entry. Must not raise."""


@dataclass
class StorageConfig:
    """File-system locations for the bundled collaborators."""

    root: str = "var/storage"
    records_dir: str = "var/records"
    failure_log: str = "var/failed_pdf_parse.jsonl"
    public_base_url: str | None = None
    key_prefix: str = "Resume"


_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.\-_]")


def sanitize_filename(name: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", name)


class LocalObjectStorage:
    """Copy documents into a bucket-like directory tree."""

    def __init__(self, *, config: StorageConfig | None = None) -> None:
        self._config = config or StorageConfig()
        self._root = Path(self._config.root)
        self._logger = structlog.get_logger(__name__)

    def available(self) -> bool:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self._logger.error("storage.unavailable", root=str(self._root), error=str(exc))
            return False
        return True

    def object_key(self, display_name: str, owner_id: str) -> str:
        original = display_name or f"resume-{owner_id}.pdf"
        millis = int(pendulum.now("UTC").timestamp() * 1000)
        return f"{self._config.key_prefix}/{owner_id}_{millis}_{sanitize_filename(original)}"

    def upload(self, path: Path, display_name: str, owner_id: str) -> str:
        key = self.object_key(display_name, owner_id)
        target = self._root / key
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(path, target)
        except OSError as exc:
            raise UploadError(f"Failed to upload file '{display_name}': {exc}") from exc

        if self._config.public_base_url:
            url = f"{self._config.public_base_url.rstrip('/')}/{quote(key, safe='')}"
        else:
            url = target.resolve().as_uri()
        self._logger.info("storage.uploaded", filename=display_name, url=url)
        return url


class JsonRecordStore:
    """One JSON document per candidate id."""

    def __init__(self, *, config: StorageConfig | None = None) -> None:
        self._config = config or StorageConfig()
        self._dir = Path(self._config.records_dir)

    def available(self) -> bool:
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            return False
        return True

    def path_for(self, record_id: str) -> Path:
        return self._dir / f"{record_id}.json"

    def put(self, record: CandidateRecord) -> None:
        payload = record.to_payload()
        payload["processedAt"] = pendulum.now("UTC").to_iso8601_string()
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            self.path_for(record.id).write_text(
                json.dumps(payload, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        except OSError as exc:
            raise PersistenceError(f"Error saving candidate {record.id}: {exc}") from exc

    def get(self, record_id: str) -> dict | None:
        path = self.path_for(record_id)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))


class JsonlFailureLog:
    """Append-only failure log writing JSON lines."""

    def __init__(self, path: Path | str):
        self._path = Path(path)
        self._logger = structlog.get_logger(__name__)

    def log_failure(self, display_name: str, reason: str, timestamp: pendulum.DateTime) -> None:
        entry = {
            "filename": display_name,
            "reason": reason,
            "timestamp": timestamp.to_iso8601_string(),
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(entry, ensure_ascii=False))
                handle.write("\n")
        except OSError as exc:
            self._logger.warning("failure_log.write_failed", filename=display_name, error=str(exc))


class OutputWriter:
    """Persist a run result as JSON."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


__all__ = [
    "FailureLog",
    "JsonRecordStore",
    "JsonlFailureLog",
    "LocalObjectStorage",
    "ObjectStorage",
    "OutputWriter",
    "RecordStore",
    "StorageConfig",
    "sanitize_filename",
]
