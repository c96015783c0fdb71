from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from io import BytesIO
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pdfmail.api.main import app, get_settings  # noqa: E402
from pdfmail.config import Settings  # noqa: E402
from pdfmail.ingest.service import ExtractionService  # noqa: E402
from pdfmail.utils.audit import AuditTrail  # noqa: E402


def _escape(line: str) -> str:
    return line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_text_pdf(lines: list[str]) -> bytes:
    """Return a one-page PDF whose text layer holds ``lines``."""

    operations = ["BT", "/F1 12 Tf", "14 TL", "72 720 Td"]
    for line in lines:
        operations.append(f"({_escape(line)}) Tj T*")
    operations.append("ET")
    stream = "\n".join(operations).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    buffer = BytesIO()
    buffer.write(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(buffer.tell())
        buffer.write(f"{number} 0 obj\n".encode() + body + b"\nendobj\n")
    xref_offset = buffer.tell()
    buffer.write(f"xref\n0 {len(objects) + 1}\n".encode())
    buffer.write(b"0000000000 65535 f \n")
    for offset in offsets:
        buffer.write(f"{offset:010d} 00000 n \n".encode())
    buffer.write(
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
        f"startxref\n{xref_offset}\n%%EOF\n".encode()
    )
    return buffer.getvalue()


def build_image_pdf() -> bytes:
    """Return a PDF without any text layer."""

    buffer = BytesIO()
    Image.new("RGB", (10, 10), color=(0, 0, 0)).save(buffer, "PDF")
    return buffer.getvalue()


@pytest.fixture()
def text_pdf() -> Callable[[list[str]], bytes]:
    return build_text_pdf


@pytest.fixture()
def image_pdf() -> bytes:
    return build_image_pdf()


@pytest.fixture()
def temp_settings(tmp_path: Path) -> Settings:
    return Settings(
        input_dir=tmp_path / "pdf folder",
        storage_dir=tmp_path / "storage",
        log_dir=tmp_path / "logs",
    )


@pytest.fixture()
def audit(temp_settings: Settings) -> AuditTrail:
    return AuditTrail(temp_settings.log_dir)


@pytest.fixture()
def extraction_service(temp_settings: Settings, audit: AuditTrail) -> ExtractionService:
    return ExtractionService(config=temp_settings, audit=audit)


@pytest.fixture()
def client(temp_settings: Settings) -> Iterator[TestClient]:
    app.dependency_overrides[get_settings] = lambda: temp_settings

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
