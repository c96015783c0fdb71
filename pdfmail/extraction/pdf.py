from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Any

from pdfminer.high_level import extract_text as pdf_extract_text
from pdfminer.pdfdocument import PDFDocument
from pdfminer.pdfpage import PDFPage
from pdfminer.pdfparser import PDFParser

from pdfmail.extraction.types import ExtractionResult
from pdfmail.utils.audit import AuditTrail


def decode_pdf(
    data: bytes,
    display_name: str,
    audit: AuditTrail | None = None,
) -> ExtractionResult:
    """Extract the text layer of a PDF held in memory.

    Decoder failures (corrupt file, encryption, not a PDF at all) never escape:
    the failure is recorded and an empty result carrying ``error`` is returned
    so the caller can move on to the next document.
    """

    try:
        metadata = _collect_pdf_metadata(data)
        text = pdf_extract_text(BytesIO(data))
    except Exception as exc:
        error = f"{type(exc).__name__}: {exc}"
        if audit is not None:
            audit.record("error", "document.failed", document=display_name, error=error)
        return ExtractionResult(text="", error=error)
    if audit is not None:
        audit.record(
            "info",
            "document.decoded",
            document=display_name,
            pages=metadata.get("pages"),
            extractable=metadata.get("is_extractable"),
            characters=len(text),
        )
    return ExtractionResult(text=text, metadata=metadata)


def extract_pdf(path: Path, audit: AuditTrail | None = None) -> ExtractionResult:
    """Read a PDF from disk and decode it."""

    try:
        data = path.read_bytes()
    except OSError as exc:
        error = f"{type(exc).__name__}: {exc}"
        if audit is not None:
            audit.record("error", "document.failed", document=path.name, error=error)
        return ExtractionResult(text="", error=error)
    return decode_pdf(data, path.name, audit=audit)


def _collect_pdf_metadata(data: bytes) -> dict[str, Any]:
    metadata: dict[str, Any] = {}
    parser = PDFParser(BytesIO(data))
    document = PDFDocument(parser)
    metadata["is_extractable"] = bool(document.is_extractable)
    metadata["pages"] = sum(1 for _ in PDFPage.create_pages(document))
    return metadata


__all__ = ["decode_pdf", "extract_pdf"]
