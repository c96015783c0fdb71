from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

PDF_SUFFIX = ".pdf"


def timestamped_stem(prefix: str) -> str:
    """Return a safe stem combining prefix, timestamp and a random suffix."""

    now = datetime.now(tz=UTC).strftime("%Y%m%dT%H%M%S")
    return f"{prefix}-{now}-{uuid4().hex[:8]}"


def list_pdf_files(directory: Path) -> list[Path]:
    """Return the PDF files of a directory, ordered by name.

    Raises FileNotFoundError when the directory does not exist.
    """

    if not directory.is_dir():
        msg = f"Input directory not found: {directory}"
        raise FileNotFoundError(msg)
    return sorted(
        (
            entry
            for entry in directory.iterdir()
            if entry.is_file() and entry.suffix.lower() == PDF_SUFFIX
        ),
        key=lambda entry: entry.name,
    )


def safe_filename(name: str) -> str:
    """Strip directory components, quotes and control characters from a user supplied name."""

    printable = "".join(char for char in name if ord(char) >= 0x20 and ord(char) != 0x7F)
    return Path(printable.replace("\\", "/")).name.replace('"', "").strip()


__all__ = ["PDF_SUFFIX", "list_pdf_files", "safe_filename", "timestamped_stem"]
