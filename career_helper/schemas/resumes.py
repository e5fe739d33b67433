from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from career_helper.parsing.models import ExtractionMethod
from career_helper.ranking.models import RankedCandidate


class ResumeSummary(BaseModel):
    id: str
    name: str
    uploaded_at: str
    file_type: str
    text_length: int = Field(ge=0)


class ResumeDetail(ResumeSummary):
    text: str


class ExtractionInfo(BaseModel):
    method: ExtractionMethod
    page_count: int | None = None
    ocr_pages: int = 0


class UploadResumeResponse(BaseModel):
    resume: ResumeDetail
    extraction: ExtractionInfo


class AtsAnalysisRequest(BaseModel):
    resume_id: str | None = Field(default=None, max_length=64)


class JobMatchRequest(BaseModel):
    job_role: str = Field(min_length=1, max_length=200)
    job_description: str = Field(default="", max_length=20000)
    resume_id: str | None = Field(default=None, max_length=64)


class AnalysisResponse(BaseModel):
    id: str
    resume_id: str
    type: Literal["ats", "job-match"]
    data: dict[str, Any]
    created_at: str


class CandidateSearchResponse(BaseModel):
    job_description: str
    limit: int
    candidates: list[RankedCandidate]
