from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

MIN_TEXT_LENGTH = 50

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME = "application/msword"
TEXT_MIME = "text/plain"

SUPPORTED_MEDIA_TYPES = (PDF_MIME, DOCX_MIME, DOC_MIME, TEXT_MIME)

ExtractionMethod = Literal["passthrough", "docx", "text_layer", "ocr"]


def normalize_media_type(value: str | None) -> str:
    return (value or "").split(";")[0].strip().lower()


class Document(BaseModel):
    content: bytes
    media_type: str
    filename: str = Field(default="", max_length=255)

    @field_validator("media_type")
    @classmethod
    def _normalize_media_type(cls, value: str) -> str:
        return normalize_media_type(value)


class ExtractedText(BaseModel):
    text: str
    method: ExtractionMethod
    page_count: int | None = None
    ocr_pages: int = 0
