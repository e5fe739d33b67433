from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status

from career_helper.core.rate_limit import rate_limit
from career_helper.core.security import SessionContext, get_session
from career_helper.parsing import (
    MAX_UPLOAD_BYTES,
    DocumentError,
    ExtractionFailed,
    UnsupportedType,
    UploadTooLarge,
)
from career_helper.schemas.resumes import (
    ExtractionInfo,
    ResumeDetail,
    ResumeSummary,
    UploadResumeResponse,
)
from career_helper.services.resume_service import upload_resume
from career_helper.storage import db

router = APIRouter()


def _raise_document_http_error(exc: DocumentError) -> None:
    if isinstance(exc, UnsupportedType):
        code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    elif isinstance(exc, UploadTooLarge):
        code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    elif isinstance(exc, ExtractionFailed):
        code = 422
    else:
        code = status.HTTP_400_BAD_REQUEST
    raise HTTPException(status_code=code, detail=str(exc)) from exc


def _detail(resume: db.StoredResume) -> ResumeDetail:
    return ResumeDetail(
        id=resume.id,
        name=resume.name,
        uploaded_at=resume.uploaded_at,
        file_type=resume.file_type,
        text_length=len(resume.text),
        text=resume.text,
    )


def _summary(resume: db.StoredResume) -> ResumeSummary:
    return ResumeSummary(
        id=resume.id,
        name=resume.name,
        uploaded_at=resume.uploaded_at,
        file_type=resume.file_type,
        text_length=len(resume.text),
    )


@router.post("/resumes", response_model=UploadResumeResponse)
@rate_limit()
def create_resume(
    request: Request,
    file: UploadFile = File(...),
    session: SessionContext = Depends(get_session),
):
    _ = request
    # One byte over the cap is enough to reject without buffering huge uploads.
    content = file.file.read(MAX_UPLOAD_BYTES + 1)
    try:
        resume, extracted = upload_resume(
            session,
            filename=file.filename,
            content_type=file.content_type,
            content=content,
        )
    except DocumentError as exc:
        _raise_document_http_error(exc)

    return UploadResumeResponse(
        resume=_detail(resume),
        extraction=ExtractionInfo(
            method=extracted.method,
            page_count=extracted.page_count,
            ocr_pages=extracted.ocr_pages,
        ),
    )


@router.get("/resumes", response_model=list[ResumeSummary])
def list_resumes(session: SessionContext = Depends(get_session)):
    return [_summary(resume) for resume in db.list_resumes(session.user_id)]


@router.get("/resumes/current", response_model=ResumeDetail)
def current_resume(session: SessionContext = Depends(get_session)):
    resume = db.get_current_resume(session.user_id)
    if resume is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No current resume.")
    return _detail(resume)


@router.delete("/resumes/{resume_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resume(resume_id: str, session: SessionContext = Depends(get_session)):
    if not db.delete_resume(resume_id, user_id=session.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resume not found.")
