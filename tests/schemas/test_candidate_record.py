from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from resumeranker.schemas import BatchRunResult, CandidateRecord, DocumentItem


def test_candidate_record_defaults_and_aliases():
    record = CandidateRecord(id="cand-1", email="jane@example.org")

    assert record.name == "Unknown"
    assert record.phone == "N/A"
    assert record.parsed_text == "No summary provided."
    assert record.skills == []
    assert record.approved is False

    payload = record.to_payload()
    assert payload["parsedText"] == "No summary provided."
    assert payload["jobTitle"] == "N/A"
    assert payload["resumeUrl"] == "N/A"
    assert "parsed_text" not in payload


def test_candidate_record_accepts_wire_keys():
    record = CandidateRecord.model_validate(
        {"id": "cand-2", "email": "jane@example.org", "parsedText": "Summary", "jobTitle": "Engineer"}
    )

    assert record.parsed_text == "Summary"
    assert record.job_title == "Engineer"


def test_candidate_record_id_is_frozen():
    record = CandidateRecord(id="cand-1", email="jane@example.org")

    with pytest.raises(ValidationError):
        record.id = "other"


@pytest.mark.parametrize(
    "overrides",
    [
        {"score": 101},
        {"score": -1},
        {"experience": -2},
        {"email": "not-an-email"},
        {"id": ""},
        {"unexpected": "value"},
    ],
)
def test_candidate_record_rejects_out_of_range_values(overrides):
    values = {"id": "cand-1", "email": "jane@example.org", **overrides}

    with pytest.raises(ValidationError):
        CandidateRecord(**values)


def test_batch_run_result_payload_uses_record_aliases():
    result = BatchRunResult(
        received=1,
        recognized=1,
        records=[CandidateRecord(id="cand-1", email="jane@example.org", score=70)],
    )

    payload = result.to_payload()

    assert payload["records"][0]["parsedText"] == "No summary provided."
    assert payload["records"][0]["score"] == 70
    assert payload["received"] == 1


def test_document_item_from_path_guesses_media_type(tmp_path: Path):
    pdf = tmp_path / "cv.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    unknown = tmp_path / "cv.unknownext"
    unknown.write_bytes(b"??")

    pdf_item = DocumentItem.from_path(pdf, temporary=True)
    unknown_item = DocumentItem.from_path(unknown)

    assert pdf_item.media_type == "application/pdf"
    assert pdf_item.display_name == "cv.pdf"
    assert pdf_item.size == 8
    assert pdf_item.temporary is True
    assert unknown_item.media_type == "application/octet-stream"
