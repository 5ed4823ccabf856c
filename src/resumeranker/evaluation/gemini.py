"""Gemini-backed evaluation service."""

from __future__ import annotations

from dataclasses import dataclass

import google.generativeai as genai
import structlog

from ..errors import EvaluatorError, EvaluatorFailure


@dataclass
class GeminiConfig:
    model: str = "gemini-1.5-flash"
    temperature: float = 0.2


class GeminiEvaluatorService:
    """Send a prompt to Gemini and return the raw reply text."""

    def __init__(self, api_key: str | None = None, *, config: GeminiConfig | None = None) -> None:
        self._api_key = api_key
        self._config = config or GeminiConfig()
        self._model: genai.GenerativeModel | None = None
        self._logger = structlog.get_logger(__name__)

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _load_model(self) -> genai.GenerativeModel:
        if self._model is None:
            genai.configure(api_key=self._api_key)
            self._model = genai.GenerativeModel(
                self._config.model,
                generation_config=genai.GenerationConfig(
                    temperature=self._config.temperature,
                    response_mime_type="application/json",
                ),
            )
        return self._model

    def generate(self, prompt: str) -> str | None:
        if not self.configured:
            raise EvaluatorError(
                EvaluatorFailure.CREDENTIALS_MISSING,
                "Gemini API key is not configured",
            )

        model = self._load_model()
        try:
            response = model.generate_content(prompt)
        except (genai.types.BlockedPromptException, genai.types.StopCandidateException) as exc:
            raise EvaluatorError(EvaluatorFailure.CONTENT_POLICY_BLOCK, str(exc)) from exc

        if response is None:
            return None
        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None)
        if block_reason:
            raise EvaluatorError(
                EvaluatorFailure.CONTENT_POLICY_BLOCK,
                f"Prompt blocked by safety ratings: {block_reason}",
            )
        if not getattr(response, "candidates", None):
            return None
        try:
            return response.text
        except ValueError as exc:
            # Raised when every candidate was stopped by the safety filters.
            raise EvaluatorError(EvaluatorFailure.CONTENT_POLICY_BLOCK, str(exc)) from exc


__all__ = ["GeminiConfig", "GeminiEvaluatorService"]
