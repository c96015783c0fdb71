from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(env_file=(".env", ".env.local"), env_prefix="PDFMAIL_")

    input_dir: Path = Path("./pdf folder")
    storage_dir: Path = Path("./storage")
    log_dir: Path = Path("./audit-logs")
    output_suffix: str = ".txt"
    default_download_name: str = "extracted_emails.txt"
    max_upload_bytes: int = 10 * 1024 * 1024
    max_upload_files: int = 500
    host: str = "127.0.0.1"
    port: int = 4000

    @field_validator("log_dir", mode="after")
    @classmethod
    def ensure_directory(cls, value: Path) -> Path:
        value.mkdir(parents=True, exist_ok=True)
        return value

    @field_validator("max_upload_bytes", "max_upload_files")
    @classmethod
    def validate_limit(cls, value: int) -> int:
        if value <= 0:
            msg = "upload limits must be positive"
            raise ValueError(msg)
        return value

    @field_validator("output_suffix")
    @classmethod
    def validate_suffix(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            msg = "output_suffix must look like '.txt'"
            raise ValueError(msg)
        return value


settings = Settings()


__all__ = ["Settings", "settings"]
