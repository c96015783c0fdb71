from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class RawDocument:
    """PDF bytes waiting to be decoded, with the name shown to the user."""

    name: str
    data: bytes


@dataclass(slots=True)
class ExtractionResult:
    """Structured output from the PDF decoder."""

    text: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


__all__ = ["ExtractionResult", "RawDocument"]
