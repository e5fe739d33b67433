from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, Field, field_validator


def _coerce_str_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if item is not None]


class Candidate(BaseModel):
    analysis_id: str = ""
    resume_id: str = ""
    name: str = "Unknown"
    email: str = "N/A"
    score: float = 0
    skills: list[str] = Field(default_factory=list)
    experience: list[str] = Field(default_factory=list)
    education: list[str] = Field(default_factory=list)
    analyzed_at: str = ""
    resume_name: str = ""
    resume_text: str | None = Field(default=None, exclude=True)

    @field_validator("score", mode="before")
    @classmethod
    def _coerce_score(cls, value: Any) -> float:
        try:
            result = float(value)
        except (TypeError, ValueError, OverflowError):
            return 0.0
        return result if math.isfinite(result) else 0.0

    @field_validator("skills", "experience", "education", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> list[str]:
        return _coerce_str_list(value)

    @field_validator("resume_text", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None


class RankedCandidate(Candidate):
    match_score: int | None = None
