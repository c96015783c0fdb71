from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from pdfmail.config import Settings, settings
from pdfmail.extraction.emails import find_candidates
from pdfmail.extraction.pdf import decode_pdf, extract_pdf
from pdfmail.extraction.types import ExtractionResult, RawDocument
from pdfmail.ingest.aggregator import BatchResult, EmailAggregator, FileResult
from pdfmail.storage.sink import SavedOutput, save_addresses
from pdfmail.utils.audit import AuditTrail
from pdfmail.utils.files import list_pdf_files


class ExtractionService:
    """Coordinate decoding, matching and aggregation for one batch at a time."""

    def __init__(
        self,
        config: Settings = settings,
        audit: AuditTrail | None = None,
    ) -> None:
        self.config = config
        self.audit = audit or AuditTrail(config.log_dir)

    def new_batch(self) -> EmailAggregator:
        return EmailAggregator()

    def process_document(
        self,
        document: RawDocument,
        aggregator: EmailAggregator,
    ) -> FileResult:
        """Decode one in-memory document and fold its addresses into ``aggregator``."""

        result = decode_pdf(document.data, document.name, audit=self.audit)
        return self._aggregate(document.name, result, aggregator)

    def process_path(self, path: Path, aggregator: EmailAggregator) -> FileResult:
        """Decode one document from disk and fold its addresses into ``aggregator``."""

        result = extract_pdf(path, audit=self.audit)
        return self._aggregate(path.name, result, aggregator)

    def process_documents(self, documents: Iterable[RawDocument]) -> BatchResult:
        """Run the whole pipeline over in-memory documents, in order."""

        aggregator = self.new_batch()
        self.audit.record("info", "batch.started", source="upload")
        for document in documents:
            self.process_document(document, aggregator)
        return self.finish(aggregator)

    def process_directory(self, directory: Path | None = None) -> BatchResult:
        """Run the whole pipeline over the PDF files of ``directory``."""

        aggregator = self.new_batch()
        target = directory or self.config.input_dir
        paths = self.discover(target)
        for path in paths:
            self.process_path(path, aggregator)
        return self.finish(aggregator)

    def discover(self, directory: Path) -> list[Path]:
        paths = list_pdf_files(directory)
        self.audit.record("info", "batch.started", source=str(directory), files=len(paths))
        return paths

    def save(self, addresses: Iterable[str], filename: str) -> SavedOutput:
        return save_addresses(
            addresses,
            filename,
            self.config.storage_dir,
            suffix=self.config.output_suffix,
            audit=self.audit,
        )

    def _aggregate(
        self,
        name: str,
        result: ExtractionResult,
        aggregator: EmailAggregator,
    ) -> FileResult:
        candidates = find_candidates(result.text)
        return aggregator.add(name, candidates, error=result.error)

    def finish(self, aggregator: EmailAggregator) -> BatchResult:
        batch = aggregator.result()
        self.audit.record(
            "info",
            "batch.completed",
            files=batch.files_attempted,
            files_with_addresses=batch.files_with_addresses,
            failed=batch.files_failed,
            errors=self.audit.count("error"),
            unique_addresses=len(batch.addresses),
        )
        return batch


__all__ = ["ExtractionService"]
