"""External evaluation: prompt building, reply cleaning and the adapter."""

from __future__ import annotations

from .adapter import FAILURE_LABELS, EvaluationOutcome, EvaluatorAdapter, EvaluatorService
from .cleaning import clean_json_response, extract_email
from .gemini import GeminiConfig, GeminiEvaluatorService
from .prompt import PromptBudget, build_prompt

__all__ = [
    "EvaluationOutcome",
    "EvaluatorAdapter",
    "EvaluatorService",
    "FAILURE_LABELS",
    "GeminiConfig",
    "GeminiEvaluatorService",
    "PromptBudget",
    "build_prompt",
    "clean_json_response",
    "extract_email",
]
