"""Candidate normalizer: any payload in, one invariant-respecting record out."""

from __future__ import annotations

import math
import re
import unicodedata
import uuid
from dataclasses import dataclass
from typing import Any, Mapping

from .schemas import (
    EMAIL_PATTERN,
    NO_SUMMARY,
    NOT_AVAILABLE,
    UNKNOWN_NAME,
    CandidateRecord,
)

NOT_APPLICABLE_TOKENS = frozenset({"n/a", "na", "none", "null", "not applicable"})

_EMAIL_RE = re.compile(EMAIL_PATTERN)
_SLUG_DROP = re.compile(r"[^a-z0-9]")
_INT_LIMIT = 10**6


@dataclass
class NormalizerConfig:
    fallback_email_domain: str = "example.com"


def normalize_candidate(
    payload: Mapping[str, Any] | None,
    candidate_id: str | None = None,
    *,
    config: NormalizerConfig | None = None,
    label_name: bool = False,
) -> CandidateRecord:
    """Build a fully populated ``CandidateRecord`` from a raw payload.

    Accepts evaluator output, failure placeholders, and already-normalized
    record payloads (re-normalizing a record yields the same record). Missing,
    blank, non-string, or "not applicable" text becomes a sentinel; numbers are
    rounded half-up and clamped; an invalid email is replaced by a fallback
    address built from the name and id. With ``label_name`` the name is a
    status label such as "JSON Parse Failed" and never seeds the address.
    """

    config = config or NormalizerConfig()
    data: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}

    record_id = candidate_id or _clean_text(data.get("id")) or uuid.uuid4().hex
    name = _clean_text(data.get("name"))
    summary = data.get("parsedText", data.get("summary"))
    experience = data.get("experience", data.get("experienceYears"))

    return CandidateRecord(
        id=record_id,
        name=name or UNKNOWN_NAME,
        email=_normalize_email(data.get("email"), None if label_name else name, record_id, config),
        phone=_clean_text(data.get("phone")) or NOT_AVAILABLE,
        location=_clean_text(data.get("location")) or NOT_AVAILABLE,
        score=_normalize_score(data.get("score")),
        parsed_text=_clean_text(summary, allow_na=True) or NO_SUMMARY,
        skills=_normalize_skills(data.get("skills")),
        experience=_normalize_experience(experience),
        job_title=_clean_text(data.get("jobTitle")) or NOT_AVAILABLE,
        education=_clean_text(data.get("education")) or NOT_AVAILABLE,
        approved=data.get("approved") if isinstance(data.get("approved"), bool) else False,
        resume_url=_clean_text(data.get("resumeUrl")) or NOT_AVAILABLE,
    )


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value))


def slugify(value: str) -> str:
    ascii_only = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _SLUG_DROP.sub("", ascii_only.lower())


def _clean_text(value: Any, *, allow_na: bool = False) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    if not stripped:
        return None
    if not allow_na and stripped.lower() in NOT_APPLICABLE_TOKENS:
        return None
    return stripped


def _normalize_email(
    value: Any,
    name: str | None,
    record_id: str,
    config: NormalizerConfig,
) -> str:
    if isinstance(value, str):
        candidate = value.strip().lower()
        if candidate and is_valid_email(candidate):
            return candidate

    domain = config.fallback_email_domain.strip().lower()
    if not is_valid_email(f"x@{domain}"):
        domain = NormalizerConfig.fallback_email_domain

    slug = slugify(name) if name and name.lower() != UNKNOWN_NAME.lower() else ""
    if slug:
        suffix = slugify(record_id)[:8]
        local = f"{slug}.{suffix}" if suffix else slug
        return f"{local}@{domain}"
    return f"unknown_{uuid.uuid4().hex}@{domain}"


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        # float() overflows on very large ints.
        number = float(max(-_INT_LIMIT, min(_INT_LIMIT, value)))
    elif isinstance(value, float):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _normalize_score(value: Any) -> int:
    number = _as_number(value)
    if number is None:
        return 0
    return max(0, min(100, _round_half_up(number)))


def _normalize_experience(value: Any) -> int:
    number = _as_number(value)
    if number is None or number < 0:
        return 0
    return _round_half_up(number)


def _normalize_skills(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


__all__ = ["NOT_APPLICABLE_TOKENS", "NormalizerConfig", "is_valid_email", "normalize_candidate", "slugify"]
