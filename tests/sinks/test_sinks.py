from __future__ import annotations

import json
from pathlib import Path

import pendulum
import pytest

from resumeranker.errors import PersistenceError, UploadError
from resumeranker.normalizer import normalize_candidate
from resumeranker.sinks import (
    JsonlFailureLog,
    JsonRecordStore,
    LocalObjectStorage,
    OutputWriter,
    StorageConfig,
    sanitize_filename,
)


def make_config(tmp_path: Path, **overrides) -> StorageConfig:
    values = {
        "root": str(tmp_path / "bucket"),
        "records_dir": str(tmp_path / "records"),
        "failure_log": str(tmp_path / "failed.jsonl"),
    }
    values.update(overrides)
    return StorageConfig(**values)


def test_sanitize_filename_replaces_unsafe_characters() -> None:
    assert sanitize_filename("Jane Doe (final) v2.pdf") == "Jane_Doe__final__v2.pdf"
    assert sanitize_filename("résumé.pdf") == "r_sum_.pdf"


def test_object_key_embeds_owner_and_timestamp(tmp_path: Path) -> None:
    storage = LocalObjectStorage(config=make_config(tmp_path))

    key = storage.object_key("My CV.pdf", "abc123")

    prefix, name = key.split("/", 1)
    owner, millis, original = name.split("_", 2)
    assert prefix == "Resume"
    assert owner == "abc123"
    assert millis.isdigit()
    assert original == "My_CV.pdf"


def test_upload_copies_file_and_returns_public_url(tmp_path: Path) -> None:
    source = tmp_path / "cv.pdf"
    source.write_bytes(b"%PDF-1.4 body")
    storage = LocalObjectStorage(
        config=make_config(tmp_path, public_base_url="https://files.example.test/bucket/")
    )

    assert storage.available() is True
    url = storage.upload(source, "cv.pdf", "abc123")

    assert url.startswith("https://files.example.test/bucket/Resume%2Fabc123_")
    copies = list((tmp_path / "bucket" / "Resume").iterdir())
    assert len(copies) == 1
    assert copies[0].read_bytes() == b"%PDF-1.4 body"


def test_upload_without_public_base_returns_file_uri(tmp_path: Path) -> None:
    source = tmp_path / "cv.pdf"
    source.write_bytes(b"%PDF")
    storage = LocalObjectStorage(config=make_config(tmp_path))

    url = storage.upload(source, "cv.pdf", "abc123")

    assert url.startswith("file://")
    assert url.endswith("_cv.pdf")


def test_upload_of_missing_source_raises_upload_error(tmp_path: Path) -> None:
    storage = LocalObjectStorage(config=make_config(tmp_path))

    with pytest.raises(UploadError):
        storage.upload(tmp_path / "missing.pdf", "missing.pdf", "abc123")


def test_record_store_replaces_by_id(tmp_path: Path) -> None:
    store = JsonRecordStore(config=make_config(tmp_path))
    first = normalize_candidate({"name": "Jane Doe", "score": 40}, "cand-1")
    second = normalize_candidate({"name": "Jane Doe", "score": 75}, "cand-1")

    store.put(first)
    store.put(second)

    files = list((tmp_path / "records").iterdir())
    assert [item.name for item in files] == ["cand-1.json"]
    stored = store.get("cand-1")
    assert stored["score"] == 75
    assert stored["parsedText"] == "No summary provided."
    assert "processedAt" in stored
    assert store.get("unknown") is None


def test_record_store_write_failure_raises_persistence_error(tmp_path: Path) -> None:
    blocker = tmp_path / "records"
    blocker.write_text("not a directory", encoding="utf-8")
    store = JsonRecordStore(config=make_config(tmp_path))

    assert store.available() is False
    with pytest.raises(PersistenceError):
        store.put(normalize_candidate({"name": "Jane Doe"}, "cand-1"))


def test_failure_log_appends_json_lines(tmp_path: Path) -> None:
    path = tmp_path / "logs" / "failed.jsonl"
    log = JsonlFailureLog(path)
    when = pendulum.datetime(2024, 5, 1, 12, 0, 0, tz="UTC")

    log.log_failure("a.pdf", "pdf-parse failed", when)
    log.log_failure("b.docx", "non-pdf file type", when)

    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert lines == [
        {"filename": "a.pdf", "reason": "pdf-parse failed", "timestamp": "2024-05-01T12:00:00Z"},
        {"filename": "b.docx", "reason": "non-pdf file type", "timestamp": "2024-05-01T12:00:00Z"},
    ]


def test_failure_log_swallows_write_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "logs"
    blocker.write_text("file in the way", encoding="utf-8")
    log = JsonlFailureLog(blocker / "failed.jsonl")

    log.log_failure("a.pdf", "pdf-parse failed", pendulum.now("UTC"))


def test_output_writer_creates_parent_directories(tmp_path: Path) -> None:
    target = tmp_path / "out" / "nested" / "result.json"

    OutputWriter().write(target, {"records": [], "message": "Résumé"})

    assert json.loads(target.read_text(encoding="utf-8")) == {"records": [], "message": "Résumé"}
