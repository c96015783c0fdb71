from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
import uvicorn

from pdfmail import __version__
from pdfmail.config import Settings, settings
from pdfmail.ingest.aggregator import DocumentStatus, FileResult
from pdfmail.ingest.service import ExtractionService

app = typer.Typer(help="Extract unique email addresses from PDF files", add_completion=False)

_RULE = "=" * 37


def _version_callback(
    ctx: typer.Context,
    param: Any,
    value: bool,
) -> bool:
    if value:
        typer.echo(__version__)
        raise typer.Exit()
    return value


@app.callback()
def _main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Root entry point."""


def _describe(result: FileResult) -> str:
    if result.status is DocumentStatus.FAILED:
        return f"  Could not read {result.display_name}: {result.error}"
    if result.status is DocumentStatus.EMPTY:
        return f"  No emails found in {result.display_name}"
    return f"  Found {result.count} email(s) in {result.display_name}"


@app.command(help="Extract emails from every PDF of a folder and save them to a text file.")
def extract(
    input_dir: Path | None = typer.Option(
        None, "--input-dir", "-i", help="Folder holding the PDF files."
    ),
    storage_dir: Path | None = typer.Option(
        None, "--storage-dir", "-s", help="Folder receiving the output file."
    ),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Output file name; prompted for when omitted."
    ),
) -> None:
    overrides: dict[str, Any] = {}
    if input_dir is not None:
        overrides["input_dir"] = input_dir
    if storage_dir is not None:
        overrides["storage_dir"] = storage_dir
    config = settings.model_copy(update=overrides) if overrides else settings
    _run_extract(config, output)


def _run_extract(config: Settings, output: str | None) -> None:
    service = ExtractionService(config=config)

    try:
        paths = service.discover(config.input_dir)
    except FileNotFoundError:
        typer.echo(f'PDF folder "{config.input_dir}" does not exist.', err=True)
        raise typer.Exit(code=1) from None
    if not paths:
        typer.echo(f'No PDF files found in "{config.input_dir}".', err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Found {len(paths)} PDF file(s) to process...\n")
    try:
        aggregator = service.new_batch()
        for index, path in enumerate(paths, start=1):
            typer.echo(f"Processing {index}/{len(paths)}: {path.name}...")
            typer.echo(_describe(service.process_path(path, aggregator)))
        batch = service.finish(aggregator)
    except Exception as exc:
        service.audit.record("error", "batch.failed", error=str(exc))
        typer.echo(f"An error occurred: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"\n{_RULE}")
    typer.echo("Processing complete!")
    typer.echo(f"Files processed: {batch.files_with_addresses}/{batch.files_attempted}")
    if batch.files_failed:
        typer.echo(f"Files that could not be read: {batch.files_failed}")
    typer.echo(f"Total unique emails found: {len(batch.addresses)}")
    typer.echo(f"{_RULE}\n")

    if not batch.addresses:
        typer.echo("No emails found in any PDF files.")
        return

    typer.echo("All unique emails found:\n")
    for address in batch.addresses:
        typer.echo(f"  {address}")
    typer.echo("")

    if output is None:
        output = typer.prompt(
            "Enter filename to save the emails (without .txt extension)",
            default="",
            show_default=False,
        )
    filename = output.strip()
    if not filename:
        typer.echo("Invalid filename. Emails not saved.")
        return

    try:
        saved = service.save(batch.addresses, filename)
    except OSError as exc:
        service.audit.record("error", "output.failed", error=str(exc))
        typer.echo(f"An error occurred: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    location = config.storage_dir / saved.name
    if saved.renamed:
        typer.echo(f"File already existed. Emails saved to: {location}")
    else:
        typer.echo(f"Emails saved to: {location}")
    typer.echo("\nEmail extraction completed successfully!")


@app.command(help="Run the upload API and web page (FastAPI).")
def serve(
    host: str = typer.Option(settings.host, "--host", help="Listen address."),
    port: int = typer.Option(settings.port, "--port", help="HTTP port."),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload."),
) -> None:
    uvicorn.run("pdfmail.api.main:app", host=host, port=port, reload=reload, factory=False)


def main() -> None:  # pragma: no cover - delegated to Typer
    app()


__all__ = ["app", "main"]
