from __future__ import annotations

"""Decode uploaded files into plain text."""

import re
from pathlib import Path


class DocumentLoaderError(RuntimeError):
    """Raised when an upload cannot be turned into text."""
    pass


ALLOWED_CONTENT_TYPES = frozenset(
    {
        "application/pdf",
        "text/csv",
        "text/plain",
        "application/vnd.ms-excel",
    }
)
_SUFFIX_TYPES = {
    ".pdf": "application/pdf",
    ".csv": "text/csv",
    ".txt": "text/plain",
    ".text": "text/plain",
    ".xls": "application/vnd.ms-excel",
}
_WHITESPACE_RE = re.compile(r"[ \t]+")


def resolve_content_type(name: str, content_type: str | None) -> str:
    """Prefer the declared MIME type, falling back to the file suffix."""
    declared = (content_type or "").split(";", 1)[0].strip().lower()
    if declared in ALLOWED_CONTENT_TYPES:
        return declared
    return _SUFFIX_TYPES.get(Path(name).suffix.lower(), declared or "application/octet-stream")


def load_text_bytes(data: bytes) -> str:
    """Decode plain text bytes."""
    return data.decode("utf-8", errors="ignore")


def load_csv_bytes(data: bytes) -> str:
    """Decode CSV bytes, replacing undecodable characters."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        text = data.decode("utf-8", errors="replace")
    return text.strip()


def load_pdf_bytes(data: bytes) -> str:
    """Extract text from every page of a PDF."""
    try:
        import fitz
    except ImportError as exc:
        raise DocumentLoaderError("PyMuPDF is required to load PDF files") from exc

    try:
        reader = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:
        raise DocumentLoaderError(f"Unreadable PDF: {exc}") from exc
    text_parts: list[str] = []
    with reader:
        for page in reader:
            text_parts.append(page.get_text() or "")
    text = "\n".join(text_parts).replace("\r\n", "\n")
    return _WHITESPACE_RE.sub(" ", text).strip()


def load_upload(data: bytes, name: str, content_type: str | None) -> tuple[str, str]:
    """Return (resolved content type, text) for an uploaded file."""
    resolved = resolve_content_type(name, content_type)
    if resolved not in ALLOWED_CONTENT_TYPES:
        raise DocumentLoaderError(f"Unsupported file type: {resolved}")
    if resolved == "application/pdf":
        return resolved, load_pdf_bytes(data)
    if resolved in {"text/csv", "application/vnd.ms-excel"}:
        return resolved, load_csv_bytes(data)
    return resolved, load_text_bytes(data)
