from __future__ import annotations

from io import BytesIO
from zipfile import BadZipFile, ZipFile

from .errors import UnsupportedType, UploadRejected, UploadTooLarge
from .models import (
    DOC_MIME,
    DOCX_MIME,
    PDF_MIME,
    SUPPORTED_MEDIA_TYPES,
    TEXT_MIME,
    normalize_media_type,
)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MB

PDF_MAGIC = b"%PDF-"
OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
ZIP_MAGICS = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")


def _is_zip_payload(content: bytes) -> bool:
    return any(content.startswith(prefix) for prefix in ZIP_MAGICS)


def _zip_has_paths(content: bytes, prefixes: tuple[str, ...]) -> bool:
    try:
        with ZipFile(BytesIO(content)) as archive:
            names = archive.namelist()
    except BadZipFile:
        return False
    return any(any(name.startswith(prefix) for prefix in prefixes) for name in names)


def _is_probably_text_payload(content: bytes) -> bool:
    sample = content[:4096]
    if b"\x00" in sample:
        return False
    try:
        sample.decode("utf-8")
        return True
    except UnicodeDecodeError as exc:
        # A multi-byte sequence cut by the sample window is still text.
        if exc.start >= len(sample) - 3:
            return True
    printable = 0
    for byte in sample:
        if byte in (9, 10, 13) or byte >= 32:
            printable += 1
    return (printable / len(sample)) >= 0.75


def validate_upload_signature(*, media_type: str, content: bytes) -> None:
    if media_type == PDF_MIME:
        if not content.startswith(PDF_MAGIC):
            raise UploadRejected("File signature does not match PDF content.")
        return

    if media_type == DOCX_MIME:
        if not _is_zip_payload(content) or not _zip_has_paths(content, ("word/",)):
            raise UploadRejected("File signature does not match .docx content.")
        return

    if media_type == DOC_MIME:
        # Some tools label .docx uploads as application/msword.
        if content.startswith(OLE2_MAGIC):
            return
        if _is_zip_payload(content) and _zip_has_paths(content, ("word/",)):
            return
        raise UploadRejected("File signature does not match Word document content.")

    if media_type == TEXT_MIME:
        if not _is_probably_text_payload(content):
            raise UploadRejected("File signature does not match text content.")


def validate_upload(*, content_type: str | None, content: bytes, filename: str = "") -> str:
    """Check an upload before any parsing and return its normalized media type."""
    media_type = normalize_media_type(content_type)
    if media_type not in SUPPORTED_MEDIA_TYPES:
        raise UnsupportedType()
    if len(content) > MAX_UPLOAD_BYTES:
        raise UploadTooLarge()
    if not content and media_type != TEXT_MIME:
        raise UploadRejected(f"Uploaded file '{filename or 'resume'}' is empty.")
    validate_upload_signature(media_type=media_type, content=content)
    return media_type
