from __future__ import annotations

import json

from resumeranker.evaluation import clean_json_response, extract_email


def test_clean_strips_json_fence_and_trailing_prose() -> None:
    raw = (
        "```json\n"
        '{"name": "Jane Doe", "score": 87}\n'
        "```\n"
        "Let me know if you need anything else {really}."
    )

    cleaned = clean_json_response(raw)

    assert cleaned == '{"name": "Jane Doe", "score": 87}'
    assert json.loads(cleaned)["score"] == 87


def test_clean_strips_plain_fence() -> None:
    assert clean_json_response('```\n{"a": 1}\n```') == '{"a": 1}'


def test_clean_isolates_object_inside_prose() -> None:
    raw = 'Here is the evaluation: {"a": {"b": 2}} Hope this helps.'

    assert clean_json_response(raw) == '{"a": {"b": 2}}'


def test_clean_without_braces_returns_text() -> None:
    assert clean_json_response("  I cannot evaluate this resume.  ") == "I cannot evaluate this resume."


def test_clean_unterminated_fence_keeps_body() -> None:
    assert clean_json_response('```json\n{"a": 1}') == '{"a": 1}'


def test_extract_email_returns_first_match_lowercased() -> None:
    text = "Contact: Jane.Doe@Example.ORG or jd@backup.example.com"

    assert extract_email(text) == "jane.doe@example.org"


def test_extract_email_none_when_absent() -> None:
    assert extract_email("no contact details here") is None
    assert extract_email("") is None
