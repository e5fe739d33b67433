from __future__ import annotations


class DocumentError(ValueError):
    """Base error for uploads that cannot be turned into resume text."""

    def __init__(self, message: str, *, code: str = "document_error"):
        super().__init__(message)
        self.code = code


class UnsupportedType(DocumentError):
    def __init__(self, message: str = "Only PDF and DOCX files are allowed"):
        super().__init__(message, code="unsupported_type")


class UploadTooLarge(DocumentError):
    def __init__(self, message: str = "File size must be less than 10MB"):
        super().__init__(message, code="upload_too_large")


class UploadRejected(DocumentError):
    def __init__(self, message: str):
        super().__init__(message, code="upload_rejected")


class ExtractionFailed(DocumentError):
    def __init__(self, message: str):
        super().__init__(message, code="extraction_failed")
