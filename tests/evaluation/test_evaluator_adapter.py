from __future__ import annotations

import json

import pytest

from resumeranker.errors import EvaluatorError, EvaluatorFailure
from resumeranker.evaluation import EvaluatorAdapter, PromptBudget

RESUME_TEXT = (
    "Jane Doe\nSenior Python Engineer\njane.doe@real-mail.example.org\n"
    "Eight years building data platforms with Python and PostgreSQL."
)


class StubService:
    def __init__(self, reply: str | None = None, *, error: Exception | None = None, configured: bool = True):
        self._reply = reply
        self._error = error
        self.configured = configured
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str | None:
        self.prompts.append(prompt)
        if self._error is not None:
            raise self._error
        return self._reply


def evaluator_reply(**overrides) -> str:
    payload = {
        "name": "Jane Doe",
        "email": "jane@hallucinated.example.com",
        "phone": "+1 555 0100",
        "location": "Berlin, Germany",
        "score": 87,
        "summary": "Strong Python background; meets the recruiter's stability preference.",
        "skills": ["Python", "PostgreSQL"],
        "experienceYears": 8,
        "jobTitle": "Senior Python Engineer",
        "education": "MSc Computer Science",
    }
    payload.update(overrides)
    return json.dumps(payload)


def test_successful_evaluation_maps_fields() -> None:
    service = StubService("```json\n" + evaluator_reply() + "\n```\nThanks!")
    adapter = EvaluatorAdapter(service)

    outcome = adapter.evaluate(RESUME_TEXT, "Python engineer", "Prefers long tenures")

    assert outcome.ok
    assert outcome.failure is None
    assert outcome.fields["score"] == 87
    assert outcome.fields["parsedText"].startswith("Strong Python")
    assert outcome.fields["experienceYears"] == 8
    assert outcome.fields["skills"] == ["Python", "PostgreSQL"]
    assert "Python engineer" in service.prompts[0]
    assert "Prefers long tenures" in service.prompts[0]


def test_email_from_resume_text_overrides_evaluator_email() -> None:
    adapter = EvaluatorAdapter(StubService(evaluator_reply()))

    outcome = adapter.evaluate(RESUME_TEXT, "jd", "rs")

    assert outcome.fields["email"] == "jane.doe@real-mail.example.org"


def test_evaluator_email_used_when_text_has_none() -> None:
    adapter = EvaluatorAdapter(StubService(evaluator_reply()))

    outcome = adapter.evaluate("Jane Doe, engineer, no contact details in this document at all.", "jd", "rs")

    assert outcome.fields["email"] == "jane@hallucinated.example.com"


def test_missing_credentials_skips_call() -> None:
    service = StubService(evaluator_reply(), configured=False)
    adapter = EvaluatorAdapter(service)

    outcome = adapter.evaluate(RESUME_TEXT, "jd", "rs")

    assert outcome.failure is EvaluatorFailure.CREDENTIALS_MISSING
    assert outcome.label == "API Key Missing"
    assert outcome.fields["email"] == "jane.doe@real-mail.example.org"
    assert service.prompts == []


@pytest.mark.parametrize("reply", [None, "", "   ", "```json\n```"])
def test_empty_reply(reply) -> None:
    outcome = EvaluatorAdapter(StubService(reply)).evaluate(RESUME_TEXT, "jd", "rs")

    assert outcome.failure is EvaluatorFailure.EMPTY_RESPONSE
    assert outcome.fields["name"] == "Empty AI Response"


def test_malformed_json() -> None:
    outcome = EvaluatorAdapter(StubService('{"name": "Jane", "score": }')).evaluate(RESUME_TEXT, "jd", "rs")

    assert outcome.failure is EvaluatorFailure.MALFORMED_JSON
    assert outcome.label == "JSON Parse Failed"
    assert "Raw (partial)" in outcome.fields["parsedText"]
    assert outcome.extracted_email == "jane.doe@real-mail.example.org"


def test_non_object_json_is_malformed() -> None:
    outcome = EvaluatorAdapter(StubService("[1, 2, 3]")).evaluate(RESUME_TEXT, "jd", "rs")

    assert outcome.failure is EvaluatorFailure.MALFORMED_JSON


def test_content_policy_block_from_service_error() -> None:
    service = StubService(error=EvaluatorError(EvaluatorFailure.CONTENT_POLICY_BLOCK, "blocked"))

    outcome = EvaluatorAdapter(service).evaluate(RESUME_TEXT, "jd", "rs")

    assert outcome.failure is EvaluatorFailure.CONTENT_POLICY_BLOCK
    assert outcome.fields["name"] == "Content Blocked"


def test_safety_message_is_treated_as_block() -> None:
    service = StubService(error=RuntimeError("Response was blocked due to safety ratings"))

    outcome = EvaluatorAdapter(service).evaluate(RESUME_TEXT, "jd", "rs")

    assert outcome.failure is EvaluatorFailure.CONTENT_POLICY_BLOCK


def test_generic_call_failure_never_raises() -> None:
    service = StubService(error=ConnectionError("socket closed"))

    outcome = EvaluatorAdapter(service).evaluate(RESUME_TEXT, "jd", "rs")

    assert outcome.failure is EvaluatorFailure.GENERIC
    assert outcome.label == "Parsing Failed"
    assert "socket closed" in outcome.fields["parsedText"]
    assert outcome.fields["email"] == "jane.doe@real-mail.example.org"


@pytest.mark.parametrize(
    "reply",
    [
        '{"score": 1' + "0" * 5000 + "}",
        '{"skills": ' + "[" * 100_000 + "]" * 100_000 + "}",
    ],
    ids=["oversized-integer", "deep-nesting"],
)
def test_unparseable_json_is_reported_not_raised(reply) -> None:
    outcome = EvaluatorAdapter(StubService(reply)).evaluate(RESUME_TEXT, "jd", "rs")

    assert outcome.failure is EvaluatorFailure.MALFORMED_JSON
    assert outcome.label == "JSON Parse Failed"
    assert outcome.detail == outcome.fields["parsedText"]


def test_oversized_resume_is_truncated_and_flagged() -> None:
    service = StubService(evaluator_reply())
    adapter = EvaluatorAdapter(service, budget=PromptBudget(max_input_tokens=2_000, safety_margin_tokens=0))

    outcome = adapter.evaluate("Jane Doe " + "x" * 20_000, "jd", "rs")

    assert outcome.ok
    assert outcome.truncated is True
    assert outcome.detail is None
    assert "x" * 20_000 not in service.prompts[0]


def test_short_resume_is_not_truncated() -> None:
    outcome = EvaluatorAdapter(StubService(evaluator_reply())).evaluate(RESUME_TEXT, "jd", "rs")

    assert outcome.truncated is False
