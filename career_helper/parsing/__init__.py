from .errors import DocumentError, ExtractionFailed, UnsupportedType, UploadRejected, UploadTooLarge
from .extract import extract_text, extract_text_from_bytes
from .models import MIN_TEXT_LENGTH, SUPPORTED_MEDIA_TYPES, Document, ExtractedText
from .validation import MAX_UPLOAD_BYTES, validate_upload

__all__ = [
    "Document",
    "ExtractedText",
    "MIN_TEXT_LENGTH",
    "SUPPORTED_MEDIA_TYPES",
    "MAX_UPLOAD_BYTES",
    "DocumentError",
    "ExtractionFailed",
    "UnsupportedType",
    "UploadRejected",
    "UploadTooLarge",
    "extract_text",
    "extract_text_from_bytes",
    "validate_upload",
]
