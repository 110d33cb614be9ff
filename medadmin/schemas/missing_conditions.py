"""Schemas for missing-condition review, proxied to the AI service."""

from pydantic import BaseModel, Field, field_validator

MISSING_CONDITION_STATUSES = ("pending", "reviewed", "resolved")


class MissingConditionUpdate(BaseModel):
    status: str = Field(..., min_length=1)
    admin_notes: str | None = Field(default=None, max_length=10_000)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        s = v.strip().lower()
        if s not in MISSING_CONDITION_STATUSES:
            raise ValueError("Status must be one of: pending, reviewed, resolved")
        return s
