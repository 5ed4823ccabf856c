"""Evaluation prompt construction and input-size budgeting."""

from __future__ import annotations

import math
from dataclasses import dataclass

RESPONSE_FIELDS: tuple[str, ...] = (
    "name",
    "email",
    "phone",
    "location",
    "score",
    "summary",
    "skills",
    "experienceYears",
    "jobTitle",
    "education",
)

_TEMPLATE = """You are a resume evaluator working for a recruiter.

Score the resume below against two inputs of EQUAL weight:
  1. the job description (JD), worth 50% of the score;
  2. the recruiter suggestions (RS), worth 50% of the score.

Job description (50%):
```
{job_requirement}
```

Recruiter suggestions (50%):
```
{recruiter_notes}
```

Resume text:
```
{resume_text}
```

How to score:
- JD fit (0-100): required skills, tools, responsibilities, years and type of
  experience, and education named in the JD.
- RS fit (0-100): the recruiter's priorities, preferred attributes and red flags.
- Final score = round(JD fit * 0.5 + RS fit * 0.5).

Reply with exactly one JSON object and nothing else, using these keys:
{{
  "name": "candidate full name",
  "email": "candidate email",
  "phone": "candidate phone number",
  "location": "city, region or country",
  "score": 0,
  "summary": "short explanation of the score naming concrete strengths and gaps against the JD and RS",
  "skills": ["skills from the resume relevant to the JD or RS"],
  "experienceYears": 0,
  "jobTitle": "most recent relevant job title",
  "education": "highest relevant degree or qualification"
}}
Use "N/A" for any text field the resume does not contain.
"""


@dataclass
class PromptBudget:
    """Input-size budget for the evaluation service.

    Token counts are estimated from character counts: the fixed part of the
    prompt at ``prompt_chars_per_token`` and the resume text at the more
    conservative ``text_chars_per_token``.
    """

    max_input_tokens: int = 1_000_000
    safety_margin_tokens: int = 5_000
    prompt_chars_per_token: int = 4
    text_chars_per_token: int = 3

    def max_text_chars(self, overhead_chars: int) -> int:
        overhead_tokens = math.ceil(overhead_chars / self.prompt_chars_per_token)
        remaining = self.max_input_tokens - overhead_tokens - self.safety_margin_tokens
        return max(remaining, 0) * self.text_chars_per_token


def render_prompt(resume_text: str, job_requirement: str, recruiter_notes: str) -> str:
    return _TEMPLATE.format(
        job_requirement=job_requirement,
        recruiter_notes=recruiter_notes,
        resume_text=resume_text,
    )


def build_prompt(
    resume_text: str,
    job_requirement: str,
    recruiter_notes: str,
    *,
    budget: PromptBudget | None = None,
) -> tuple[str, bool]:
    """Return the prompt and whether the resume text had to be truncated.

    Truncation keeps the beginning of the resume.
    """

    budget = budget or PromptBudget()
    overhead = len(render_prompt("", job_requirement, recruiter_notes))
    limit = budget.max_text_chars(overhead)
    truncated = len(resume_text) > limit
    if truncated:
        resume_text = resume_text[:limit]
    return render_prompt(resume_text, job_requirement, recruiter_notes), truncated


__all__ = ["PromptBudget", "RESPONSE_FIELDS", "build_prompt", "render_prompt"]
