from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

NOT_AVAILABLE = "N/A"
UNKNOWN_NAME = "Unknown"
NO_SUMMARY = "No summary provided."
UPLOAD_FAILED = "Upload Failed"

EMAIL_PATTERN = r"^[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}$"


class CandidateRecord(BaseModel):
    """Canonical, fully populated candidate record."""

    id: str = Field(frozen=True, min_length=1)
    name: str = UNKNOWN_NAME
    email: str = Field(pattern=EMAIL_PATTERN)
    phone: str = NOT_AVAILABLE
    location: str = NOT_AVAILABLE
    score: int = Field(default=0, ge=0, le=100)
    parsed_text: str = Field(default=NO_SUMMARY, alias="parsedText")
    skills: list[str] = Field(default_factory=list)
    experience: int = Field(default=0, ge=0)
    job_title: str = Field(default=NOT_AVAILABLE, alias="jobTitle")
    education: str = NOT_AVAILABLE
    approved: bool = False
    resume_url: str = Field(default=NOT_AVAILABLE, alias="resumeUrl")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Return the wire representation (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)


class BatchRunResult(BaseModel):
    """Aggregate over one pipeline invocation."""

    success: bool = True
    message: str = ""
    received: int = 0
    recognized: int = 0
    skipped_wrong_type: int = 0
    fallback_used: int = 0
    records: list[CandidateRecord] = Field(default_factory=list)
    failed_items: list[str] = Field(default_factory=list)
    started_at: str | None = None
    finished_at: str | None = None
    app_version: str | None = None

    model_config = ConfigDict(extra="forbid")

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json", exclude={"records"})
        payload["records"] = [record.to_payload() for record in self.records]
        return payload
