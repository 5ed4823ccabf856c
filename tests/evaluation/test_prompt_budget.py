from __future__ import annotations

from resumeranker.evaluation import PromptBudget, build_prompt
from resumeranker.evaluation.prompt import RESPONSE_FIELDS, render_prompt


def test_prompt_mentions_equal_weighting_and_fields() -> None:
    prompt, truncated = build_prompt("resume body", "Python developer", "No job hoppers")

    assert truncated is False
    assert "50%" in prompt
    assert "Python developer" in prompt
    assert "No job hoppers" in prompt
    assert "resume body" in prompt
    for key in RESPONSE_FIELDS:
        assert f'"{key}"' in prompt


def test_max_text_chars_uses_conservative_ratio() -> None:
    budget = PromptBudget(max_input_tokens=1_000, safety_margin_tokens=100)

    # 400 overhead chars -> 100 tokens; (1000 - 100 - 100) tokens * 3 chars.
    assert budget.max_text_chars(400) == 2_400


def test_max_text_chars_never_negative() -> None:
    budget = PromptBudget(max_input_tokens=10, safety_margin_tokens=100)

    assert budget.max_text_chars(1_000) == 0


def test_long_text_is_truncated_keeping_prefix() -> None:
    jd, rs = "JD", "RS"
    overhead = len(render_prompt("", jd, rs))
    budget = PromptBudget(
        max_input_tokens=-(-overhead // 4) + 10 + 50,
        safety_margin_tokens=10,
    )
    text = "A" * 150 + "B" * 500

    prompt, truncated = build_prompt(text, jd, rs, budget=budget)

    assert truncated is True
    assert "A" * 150 in prompt
    assert "B" * 100 not in prompt
