from __future__ import annotations

import logging
from typing import Any

from career_helper.core.security import SessionContext
from career_helper.parsing import Document, ExtractedText, extract_text, validate_upload
from career_helper.ranking import RankedCandidate, clamp_limit, rank_candidates
from career_helper.storage import db

from .analysis_llm import json_completion_required
from .analysis_prompts import (
    ATS_SYSTEM_PROMPT,
    JOB_MATCH_SYSTEM_PROMPT,
    build_ats_prompt,
    build_job_match_prompt,
)

logger = logging.getLogger(__name__)


class ResumeNotFound(LookupError):
    pass


def _safe_filename(filename: str | None) -> str:
    name = (filename or "").replace("\\", "/").split("/")[-1].strip()
    return name[:255] or "resume"


def upload_resume(
    session: SessionContext,
    *,
    filename: str | None,
    content_type: str | None,
    content: bytes,
) -> tuple[db.StoredResume, ExtractedText]:
    name = _safe_filename(filename)
    media_type = validate_upload(content_type=content_type, content=content, filename=name)
    extracted = extract_text(Document(content=content, media_type=media_type, filename=name))
    logger.info(
        "resume_extracted user=%s method=%s chars=%s pages=%s ocr_pages=%s",
        session.user_id,
        extracted.method,
        len(extracted.text),
        extracted.page_count,
        extracted.ocr_pages,
    )

    db.clear_current_resume(session.user_id)
    resume = db.save_resume(
        user_id=session.user_id,
        name=name,
        text=extracted.text,
        file_type=media_type,
    )
    db.set_current_resume(session.user_id, resume.id)
    return resume, extracted


def resolve_resume(session: SessionContext, resume_id: str | None = None) -> db.StoredResume:
    if resume_id:
        resume = db.get_resume(resume_id, user_id=session.user_id)
    else:
        resume = db.get_current_resume(session.user_id)
    if resume is None:
        raise ResumeNotFound("No resume found. Please upload a resume first.")
    return resume


def analyze_resume(resume_text: str) -> dict[str, Any]:
    return json_completion_required(
        system_prompt=ATS_SYSTEM_PROMPT,
        user_prompt=build_ats_prompt(resume_text),
        tool_slug="ats",
    )


def compare_resume_to_job(resume_text: str, job_role: str, job_description: str = "") -> dict[str, Any]:
    return json_completion_required(
        system_prompt=JOB_MATCH_SYSTEM_PROMPT,
        user_prompt=build_job_match_prompt(resume_text, job_role, job_description),
        tool_slug="job-match",
    )


def analyze_current_resume(session: SessionContext, resume_id: str | None = None) -> db.AnalysisRecord:
    resume = resolve_resume(session, resume_id)
    analysis = analyze_resume(resume.text)
    return db.save_analysis(
        user_id=session.user_id,
        resume_id=resume.id,
        analysis_type="ats",
        data=analysis,
    )


def match_current_resume(
    session: SessionContext,
    *,
    job_role: str,
    job_description: str = "",
    resume_id: str | None = None,
) -> db.AnalysisRecord:
    resume = resolve_resume(session, resume_id)
    analysis = compare_resume_to_job(resume.text, job_role, job_description)
    return db.save_analysis(
        user_id=session.user_id,
        resume_id=resume.id,
        analysis_type="job-match",
        data={**analysis, "jobRole": job_role, "jobDescription": job_description},
    )


def search_candidates(
    session: SessionContext,
    job_description: str = "",
    limit: int = 10,
) -> list[RankedCandidate]:
    candidates = db.load_candidates(session.user_id)
    return rank_candidates(job_description, candidates, clamp_limit(limit))
