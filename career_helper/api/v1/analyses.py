from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from career_helper.core.rate_limit import rate_limit
from career_helper.core.security import SessionContext, get_session
from career_helper.schemas.resumes import AnalysisResponse, AtsAnalysisRequest, JobMatchRequest
from career_helper.services.analysis_llm import AnalysisLLMError
from career_helper.services.resume_service import (
    ResumeNotFound,
    analyze_current_resume,
    match_current_resume,
)
from career_helper.storage import db

router = APIRouter()


def _raise_analysis_http_error(exc: Exception) -> None:
    if isinstance(exc, ResumeNotFound):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, AnalysisLLMError):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    raise exc


def _response(record: db.AnalysisRecord) -> AnalysisResponse:
    return AnalysisResponse(
        id=record.id,
        resume_id=record.resume_id,
        type=record.type,
        data=record.data,
        created_at=record.created_at,
    )


@router.post("/analyses/ats", response_model=AnalysisResponse)
@rate_limit()
def create_ats_analysis(
    request: Request,
    payload: AtsAnalysisRequest,
    session: SessionContext = Depends(get_session),
):
    _ = request
    try:
        record = analyze_current_resume(session, payload.resume_id)
    except (ResumeNotFound, AnalysisLLMError) as exc:
        _raise_analysis_http_error(exc)
    return _response(record)


@router.post("/analyses/job-match", response_model=AnalysisResponse)
@rate_limit()
def create_job_match_analysis(
    request: Request,
    payload: JobMatchRequest,
    session: SessionContext = Depends(get_session),
):
    _ = request
    try:
        record = match_current_resume(
            session,
            job_role=payload.job_role,
            job_description=payload.job_description,
            resume_id=payload.resume_id,
        )
    except (ResumeNotFound, AnalysisLLMError) as exc:
        _raise_analysis_http_error(exc)
    return _response(record)


@router.get("/analyses", response_model=list[AnalysisResponse])
def list_analyses(
    type: Literal["ats", "job-match"] | None = Query(default=None),
    session: SessionContext = Depends(get_session),
):
    return [_response(record) for record in db.list_analyses(session.user_id, type)]
