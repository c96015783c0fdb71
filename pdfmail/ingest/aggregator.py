from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from pdfmail.extraction.emails import fold_address


class DocumentStatus(str, Enum):
    FOUND = "found"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(slots=True)
class FileResult:
    """Unique addresses of one document, in order of first occurrence."""

    display_name: str
    addresses: list[str] = field(default_factory=list)
    status: DocumentStatus = DocumentStatus.EMPTY
    error: str | None = None

    @property
    def count(self) -> int:
        return len(self.addresses)


@dataclass(slots=True)
class BatchResult:
    """Outcome of a batch; ``addresses`` is the sorted union of every file."""

    files: list[FileResult] = field(default_factory=list)
    addresses: list[str] = field(default_factory=list)

    @property
    def files_attempted(self) -> int:
        return len(self.files)

    @property
    def files_with_addresses(self) -> int:
        return sum(1 for item in self.files if item.addresses)

    @property
    def files_failed(self) -> int:
        return sum(1 for item in self.files if item.status is DocumentStatus.FAILED)


class EmailAggregator:
    """Fold candidates from successive documents into per-file and batch sets."""

    def __init__(self) -> None:
        self._seen: set[str] = set()
        self._files: list[FileResult] = []

    def add(
        self,
        display_name: str,
        candidates: Iterable[str],
        error: str | None = None,
    ) -> FileResult:
        """Register the candidates of one document and return its result."""

        unique: dict[str, None] = {}
        for candidate in candidates:
            unique.setdefault(fold_address(candidate), None)
        addresses = list(unique)
        self._seen.update(addresses)

        if error is not None:
            status = DocumentStatus.FAILED
        elif addresses:
            status = DocumentStatus.FOUND
        else:
            status = DocumentStatus.EMPTY
        result = FileResult(
            display_name=display_name,
            addresses=addresses,
            status=status,
            error=error,
        )
        self._files.append(result)
        return result

    def result(self) -> BatchResult:
        return BatchResult(files=list(self._files), addresses=sorted(self._seen))


__all__ = ["BatchResult", "DocumentStatus", "EmailAggregator", "FileResult"]
