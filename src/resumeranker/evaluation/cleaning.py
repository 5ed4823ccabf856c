"""Helpers for cleaning evaluator replies and scanning resume text."""

from __future__ import annotations

import re

_EMAIL_SCAN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")


def clean_json_response(raw: str) -> str:
    """Isolate the JSON object in a model reply.

    Strips a leading Markdown code fence (```json or ```) up to its closing
    fence, then keeps the text between the first ``{`` and the last ``}``.
    When no such bounds exist the stripped text is returned unchanged.
    """

    cleaned = (raw or "").strip()
    for fence in ("```json", "```"):
        if cleaned.startswith(fence):
            closing = cleaned.find("```", len(fence))
            body = cleaned[len(fence):closing] if closing != -1 else cleaned[len(fence):]
            cleaned = body.strip()
            break

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        cleaned = cleaned[start : end + 1]
    return cleaned


def extract_email(text: str) -> str | None:
    """Return the first email address found in ``text``, lower-cased."""
    match = _EMAIL_SCAN.search(text or "")
    return match.group(0).lower() if match else None


__all__ = ["clean_json_response", "extract_email"]
