from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import quote

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from pdfmail import __version__
from pdfmail.config import Settings, settings
from pdfmail.extraction.types import RawDocument
from pdfmail.ingest.aggregator import BatchResult, FileResult
from pdfmail.ingest.service import ExtractionService
from pdfmail.storage.sink import ensure_suffix, serialize_addresses
from pdfmail.utils.audit import AuditTrail
from pdfmail.utils.files import safe_filename

PDF_CONTENT_TYPE = "application/pdf"

app = FastAPI(title="PDF Email Extractor", version=__version__)
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_settings() -> Settings:
    return settings


def get_extraction_service(config: Settings = Depends(get_settings)) -> ExtractionService:
    return ExtractionService(config=config, audit=AuditTrail(config.log_dir, prefix="request"))


class FileResultModel(BaseModel):
    filename: str
    status: str
    email_count: int
    emails: list[str]


class SingleUploadResponse(BaseModel):
    success: bool = True
    filename: str
    status: str
    email_count: int
    emails: list[str]


class MultipleUploadResponse(BaseModel):
    success: bool = True
    total_files: int
    files_with_emails: int
    total_unique_emails: int
    all_emails: list[str]
    file_results: list[FileResultModel]


class DownloadRequest(BaseModel):
    emails: list[str]
    filename: str | None = None


def _file_result_to_model(result: FileResult) -> FileResultModel:
    return FileResultModel(
        filename=result.display_name,
        status=result.status.value,
        email_count=result.count,
        emails=result.addresses,
    )


def _batch_to_model(batch: BatchResult) -> MultipleUploadResponse:
    return MultipleUploadResponse(
        total_files=batch.files_attempted,
        files_with_emails=batch.files_with_addresses,
        total_unique_emails=len(batch.addresses),
        all_emails=batch.addresses,
        file_results=[_file_result_to_model(item) for item in batch.files],
    )


def _describe_size(size: int) -> str:
    megabytes, remainder = divmod(size, 1024 * 1024)
    if megabytes and not remainder:
        return f"{megabytes}MB"
    return f"{size} bytes"


def _content_disposition(filename: str) -> str:
    fallback = "".join(char if char.isascii() else "_" for char in filename)
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


async def _read_upload(
    upload: UploadFile,
    config: Settings,
    service: ExtractionService,
) -> RawDocument:
    name = upload.filename or "uploaded file"
    if upload.content_type != PDF_CONTENT_TYPE:
        service.audit.record(
            "warning", "request.rejected", document=name, content_type=upload.content_type
        )
        raise HTTPException(status_code=400, detail="Only PDF files are allowed!")
    data = await upload.read(config.max_upload_bytes + 1)
    if len(data) > config.max_upload_bytes:
        service.audit.record("warning", "request.rejected", document=name, reason="too large")
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size is {_describe_size(config.max_upload_bytes)}.",
        )
    return RawDocument(name=name, data=data)


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    if request.url.path == "/download-emails":
        message = "Invalid email data"
    else:
        message = "Invalid request"
    errors = "; ".join(str(error.get("msg", "")) for error in exc.errors())
    return JSONResponse(status_code=400, content={"error": message, "details": errors})


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    config = get_settings()
    AuditTrail(config.log_dir, prefix="request").record(
        "error", "request.failed", path=request.url.path, error=f"{type(exc).__name__}: {exc}"
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)},
    )


@app.get("/health")
def health(config: Settings = Depends(get_settings)) -> dict[str, Any]:
    return {
        "status": "ok",
        "version": __version__,
        "max_upload_bytes": config.max_upload_bytes,
        "max_upload_files": config.max_upload_files,
    }


@app.get("/", response_class=HTMLResponse)
def ui_home(request: Request, config: Settings = Depends(get_settings)) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "max_upload_size": _describe_size(config.max_upload_bytes),
            "max_upload_files": config.max_upload_files,
            "default_download_name": config.default_download_name,
        },
    )


@app.post("/upload-single", response_model=SingleUploadResponse)
async def upload_single(
    pdf: UploadFile | None = File(default=None),
    config: Settings = Depends(get_settings),
    service: ExtractionService = Depends(get_extraction_service),
) -> SingleUploadResponse:
    if pdf is None:
        raise HTTPException(status_code=400, detail="No PDF file uploaded")

    document = await _read_upload(pdf, config, service)
    batch = service.process_documents([document])
    result = batch.files[0]
    return SingleUploadResponse(
        filename=result.display_name,
        status=result.status.value,
        email_count=len(batch.addresses),
        emails=batch.addresses,
    )


@app.post("/upload-multiple", response_model=MultipleUploadResponse)
async def upload_multiple(
    pdfs: list[UploadFile] | None = File(default=None),
    config: Settings = Depends(get_settings),
    service: ExtractionService = Depends(get_extraction_service),
) -> MultipleUploadResponse:
    if not pdfs:
        raise HTTPException(status_code=400, detail="No PDF files uploaded")
    if len(pdfs) > config.max_upload_files:
        raise HTTPException(
            status_code=400,
            detail=f"Too many files. Maximum is {config.max_upload_files}.",
        )

    documents = [await _read_upload(upload, config, service) for upload in pdfs]
    batch = service.process_documents(documents)
    return _batch_to_model(batch)


@app.post("/download-emails", response_class=PlainTextResponse)
def download_emails(
    payload: DownloadRequest,
    config: Settings = Depends(get_settings),
) -> PlainTextResponse:
    requested = safe_filename(payload.filename or "") or config.default_download_name
    filename = ensure_suffix(requested, config.output_suffix)
    return PlainTextResponse(
        serialize_addresses(payload.emails),
        headers={"Content-Disposition": _content_disposition(filename)},
    )


__all__ = ["app", "get_extraction_service", "get_settings"]
