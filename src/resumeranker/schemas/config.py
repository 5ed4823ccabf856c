"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError


class AppConfig(BaseModel):
    pipeline: dict[str, Any] | None = None
    extraction: dict[str, Any] | None = None
    evaluator: dict[str, Any] | None = None
    normalizer: dict[str, Any] | None = None
    storage: dict[str, Any] | None = None
    log_level: str | None = None

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, exclude={"log_level"})


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
