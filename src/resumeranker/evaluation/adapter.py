"""Evaluator adapter: prompt in, structured evaluation (or failure data) out."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import structlog

from ..errors import EvaluatorError, EvaluatorFailure
from .cleaning import clean_json_response, extract_email
from .prompt import PromptBudget, build_prompt


@runtime_checkable
class EvaluatorService(Protocol):
    """External scoring service contract."""

    @property
    def configured(self) -> bool:
        """Return True when credentials are available."""

    def generate(self, prompt: str) -> str | None:
        """Return the raw reply text; may raise EvaluatorError."""


FAILURE_LABELS: dict[EvaluatorFailure, str] = {
    EvaluatorFailure.CREDENTIALS_MISSING: "API Key Missing",
    EvaluatorFailure.EMPTY_RESPONSE: "Empty AI Response",
    EvaluatorFailure.MALFORMED_JSON: "JSON Parse Failed",
    EvaluatorFailure.CONTENT_POLICY_BLOCK: "Content Blocked",
    EvaluatorFailure.GENERIC: "Parsing Failed",
}

_RAW_PREVIEW_CHARS = 200


@dataclass(slots=True)
class EvaluationOutcome:
    """Evaluator result; ``failure`` is set when the call did not succeed.

    ``fields`` always holds a payload the normalizer understands, so a failure
    still produces a usable record.
    """

    fields: dict[str, Any] = field(default_factory=dict)
    failure: EvaluatorFailure | None = None
    detail: str | None = None
    extracted_email: str | None = None
    truncated: bool = False

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def label(self) -> str | None:
        return FAILURE_LABELS[self.failure] if self.failure else None


class EvaluatorAdapter:
    """Score resume text with the external evaluation service.

    ``evaluate`` never raises: every failure mode is returned as an
    ``EvaluationOutcome`` carrying the failure kind, a label, and the email
    scanned from the resume text.
    """

    def __init__(self, service: EvaluatorService, *, budget: PromptBudget | None = None) -> None:
        self._service = service
        self._budget = budget or PromptBudget()
        self._logger = structlog.get_logger(__name__)

    @property
    def configured(self) -> bool:
        return bool(self._service.configured)

    def evaluate(self, text: str, job_requirement: str, recruiter_notes: str) -> EvaluationOutcome:
        extracted_email = extract_email(text)
        if not self.configured:
            return self._failure(
                EvaluatorFailure.CREDENTIALS_MISSING,
                "Evaluation service API key is not configured. Parsing skipped.",
                extracted_email,
            )

        prompt, truncated = build_prompt(
            text,
            job_requirement or "",
            recruiter_notes or "",
            budget=self._budget,
        )
        if truncated:
            self._logger.warning("evaluation.text_truncated", original_chars=len(text))

        try:
            raw = self._service.generate(prompt)
        except EvaluatorError as exc:
            return self._failure(exc.kind, self._describe(exc.kind, str(exc)), extracted_email, truncated)
        except Exception as exc:  # noqa: BLE001
            kind = EvaluatorFailure.CONTENT_POLICY_BLOCK if "safety" in str(exc).lower() else EvaluatorFailure.GENERIC
            self._logger.error("evaluation.call_failed", error=str(exc), kind=kind.value)
            return self._failure(kind, self._describe(kind, str(exc)), extracted_email, truncated)

        cleaned = clean_json_response(raw or "")
        if not cleaned.strip():
            self._logger.error("evaluation.empty_response", raw=(raw or "")[:_RAW_PREVIEW_CHARS])
            return self._failure(
                EvaluatorFailure.EMPTY_RESPONSE,
                "Evaluation service returned empty content.",
                extracted_email,
                truncated,
            )

        try:
            parsed = json.loads(cleaned)
        except (ValueError, RecursionError) as exc:
            # ValueError also covers oversized integer literals, not only JSONDecodeError.
            self._logger.error("evaluation.malformed_json", error=str(exc), raw=cleaned[:500])
            return self._failure(
                EvaluatorFailure.MALFORMED_JSON,
                f"Failed to parse evaluator output as JSON: {exc}. "
                f"Raw (partial): {cleaned[:_RAW_PREVIEW_CHARS]}...",
                extracted_email,
                truncated,
            )
        if not isinstance(parsed, dict):
            return self._failure(
                EvaluatorFailure.MALFORMED_JSON,
                f"Evaluator output is not a JSON object: {cleaned[:_RAW_PREVIEW_CHARS]}",
                extracted_email,
                truncated,
            )

        fields = {
            "name": parsed.get("name"),
            # The evaluator can hallucinate contact details; the resume text wins.
            "email": extracted_email or parsed.get("email"),
            "phone": parsed.get("phone"),
            "location": parsed.get("location"),
            "score": parsed.get("score"),
            "parsedText": parsed.get("summary", parsed.get("parsedText")),
            "skills": parsed.get("skills"),
            "experienceYears": parsed.get("experienceYears", parsed.get("experience")),
            "jobTitle": parsed.get("jobTitle"),
            "education": parsed.get("education"),
        }
        return EvaluationOutcome(fields=fields, extracted_email=extracted_email, truncated=truncated)

    @staticmethod
    def _describe(kind: EvaluatorFailure, message: str) -> str:
        if kind is EvaluatorFailure.CONTENT_POLICY_BLOCK:
            return "The evaluation service blocked the resume content due to its safety policy."
        if kind is EvaluatorFailure.CREDENTIALS_MISSING:
            return "Evaluation service API key is not configured. Parsing skipped."
        if kind is EvaluatorFailure.EMPTY_RESPONSE:
            return "Evaluation service returned no response."
        return f"Automatic parsing failed: {message}."

    def _failure(
        self,
        kind: EvaluatorFailure,
        summary: str,
        extracted_email: str | None,
        truncated: bool = False,
    ) -> EvaluationOutcome:
        label = FAILURE_LABELS[kind]
        self._logger.warning("evaluation.failed", kind=kind.value, label=label)
        return EvaluationOutcome(
            fields={
                "name": label,
                "email": extracted_email,
                "score": 0,
                "parsedText": summary,
                "jobTitle": label,
            },
            failure=kind,
            detail=summary,
            extracted_email=extracted_email,
            truncated=truncated,
        )


__all__ = ["EvaluationOutcome", "EvaluatorAdapter", "EvaluatorService", "FAILURE_LABELS"]
