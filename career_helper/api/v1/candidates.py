from fastapi import APIRouter, Depends, Query

from career_helper.core.security import SessionContext, get_session
from career_helper.ranking import clamp_limit
from career_helper.schemas.resumes import CandidateSearchResponse
from career_helper.services.resume_service import search_candidates

router = APIRouter()


@router.get("/candidates/search", response_model=CandidateSearchResponse)
def search(
    job_description: str = Query(default="", max_length=20000),
    limit: int = Query(default=10),
    session: SessionContext = Depends(get_session),
):
    candidates = search_candidates(session, job_description, limit)
    return CandidateSearchResponse(
        job_description=job_description,
        limit=clamp_limit(limit),
        candidates=candidates,
    )
