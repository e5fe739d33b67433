from __future__ import annotations

import argparse
import mimetypes
import sys
from pathlib import Path

from career_helper.parsing import DocumentError, extract_text_from_bytes, validate_upload

_EXTENSION_MEDIA_TYPES = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".doc": "application/msword",
    ".txt": "text/plain",
}


def _guess_media_type(path: Path) -> str:
    explicit = _EXTENSION_MEDIA_TYPES.get(path.suffix.lower())
    if explicit:
        return explicit
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "application/octet-stream"


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract resume text from a PDF, Word or text file.")
    parser.add_argument("path", help="Resume file to extract")
    parser.add_argument("--media-type", default=None, help="Override the media type guessed from the extension")
    parser.add_argument("--out", default=None, help="Write the extracted text to this file instead of stdout")
    args = parser.parse_args()

    path = Path(args.path)
    content = path.read_bytes()
    media_type = args.media_type or _guess_media_type(path)
    try:
        media_type = validate_upload(content_type=media_type, content=content, filename=path.name)
        extracted = extract_text_from_bytes(content, media_type, filename=path.name)
    except DocumentError as exc:
        print(f"error[{exc.code}]: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(
        f"method={extracted.method} chars={len(extracted.text)} "
        f"pages={extracted.page_count} ocr_pages={extracted.ocr_pages}",
        file=sys.stderr,
    )
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(extracted.text, encoding="utf-8")
    else:
        print(extracted.text)


if __name__ == "__main__":
    main()
