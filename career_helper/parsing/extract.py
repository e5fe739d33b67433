from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Iterator

import pymupdf
import pytesseract
from docx import Document as DocxDocument
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph
from PIL import Image
from pypdf import PdfReader

from career_helper.core.config import settings

from .errors import ExtractionFailed, UnsupportedType
from .models import (
    DOC_MIME,
    DOCX_MIME,
    MIN_TEXT_LENGTH,
    PDF_MIME,
    TEXT_MIME,
    Document,
    ExtractedText,
    normalize_media_type,
)

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class TextLayerResult:
    text: str
    page_count: int


@dataclass(frozen=True)
class OcrResult:
    text: str
    page_count: int
    ocr_pages: int


def _decode_text(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def _extract_plain_text(content: bytes) -> ExtractedText:
    return ExtractedText(text=_decode_text(content), method="passthrough")


def _word_blocks(document) -> Iterator[str]:
    """Yield paragraph and table-row text in body order."""
    for child in document.element.body.iterchildren():
        if child.tag == qn("w:p"):
            text = Paragraph(child, document).text
            if text.strip():
                yield text
        elif child.tag == qn("w:tbl"):
            for row in Table(child, document).rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    yield " ".join(cells)


def _extract_word(content: bytes) -> ExtractedText:
    try:
        document = DocxDocument(BytesIO(content))
        chunks = list(_word_blocks(document))
    except Exception as exc:
        raise ExtractionFailed(
            "Failed to parse DOCX file. Please ensure it is a valid Word document."
        ) from exc

    text = "\n".join(chunks).strip()
    if len(text) < MIN_TEXT_LENGTH:
        raise ExtractionFailed("Could not extract meaningful text from DOCX file.")
    return ExtractedText(text=text, method="docx")


def _page_text_runs(page) -> str:
    runs: list[str] = []

    def visitor(text, cm, tm, font_dict, font_size):
        cleaned = " ".join(text.split())
        if cleaned:
            runs.append(cleaned)

    page.extract_text(visitor_text=visitor)
    return " ".join(runs)


def _text_layer_pages(content: bytes) -> list[str]:
    reader = PdfReader(BytesIO(content))
    return [_page_text_runs(page) for page in reader.pages]


def _rasterize_pages(content: bytes, scale: float) -> Iterator[Image.Image]:
    with pymupdf.open(stream=content, filetype="pdf") as doc:
        matrix = pymupdf.Matrix(scale, scale)
        for page in doc:
            pixmap = page.get_pixmap(matrix=matrix, alpha=False)
            yield Image.frombytes("RGB", (pixmap.width, pixmap.height), pixmap.samples)


def _recognize(image: Image.Image) -> str:
    return pytesseract.image_to_string(image, lang=settings.ocr_lang)


def _run_text_layer_phase(content: bytes) -> TextLayerResult:
    try:
        pages = _text_layer_pages(content)
    except Exception as exc:
        raise ExtractionFailed(
            "Failed to extract text from PDF. Please ensure the file is a valid PDF."
        ) from exc

    text = PAGE_SEPARATOR.join(page for page in pages if page.strip()).strip()
    return TextLayerResult(text=text, page_count=len(pages))


def _run_ocr_phase(content: bytes, page_count: int) -> OcrResult:
    full_text = ""
    ocr_pages = 0
    try:
        for page_number, image in enumerate(_rasterize_pages(content, settings.ocr_scale), start=1):
            logger.info("resume_ocr_page page=%s of=%s", page_number, page_count)
            full_text += _recognize(image) + PAGE_SEPARATOR
            ocr_pages += 1
    except Exception as exc:
        raise ExtractionFailed(
            "Failed to extract text from scanned PDF. "
            "Please ensure the image quality is clear and readable."
        ) from exc

    return OcrResult(text=full_text.strip(), page_count=page_count, ocr_pages=ocr_pages)


def _extract_pdf(content: bytes) -> ExtractedText:
    text_layer = _run_text_layer_phase(content)
    if len(text_layer.text) >= MIN_TEXT_LENGTH:
        return ExtractedText(
            text=text_layer.text,
            method="text_layer",
            page_count=text_layer.page_count,
        )

    logger.info(
        "resume_extraction_ocr_fallback pages=%s text_layer_chars=%s",
        text_layer.page_count,
        len(text_layer.text),
    )
    ocr = _run_ocr_phase(content, text_layer.page_count)
    if len(ocr.text) < MIN_TEXT_LENGTH:
        raise ExtractionFailed(
            "Could not extract meaningful text from the PDF using OCR. "
            "The image quality might be too low."
        )
    return ExtractedText(
        text=ocr.text,
        method="ocr",
        page_count=ocr.page_count,
        ocr_pages=ocr.ocr_pages,
    )


def extract_text(document: Document) -> ExtractedText:
    media_type = document.media_type
    if media_type == TEXT_MIME:
        return _extract_plain_text(document.content)
    if media_type in {DOCX_MIME, DOC_MIME}:
        return _extract_word(document.content)
    if media_type == PDF_MIME:
        return _extract_pdf(document.content)
    raise UnsupportedType("Unsupported file type. Please upload PDF or DOCX files.")


def extract_text_from_bytes(content: bytes, media_type: str, filename: str = "") -> ExtractedText:
    return extract_text(
        Document(content=content, media_type=normalize_media_type(media_type), filename=filename)
    )
