from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pdfmail.extraction.emails import EMAIL_PATTERN
from pdfmail.utils.files import timestamped_stem

_ADDRESS_RE = re.compile(EMAIL_PATTERN)


def _mask_address(match: re.Match[str]) -> str:
    local, _, domain = match.group().partition("@")
    return f"{local[0]}***@{domain}"


def redact(value: Any) -> Any:
    """Mask email addresses wherever they appear in an event payload."""

    if isinstance(value, str):
        return _ADDRESS_RE.sub(_mask_address, value)
    if isinstance(value, dict):
        return {key: redact(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [redact(item) for item in value]
    return value


@dataclass(slots=True)
class AuditEvent:
    run: str
    level: str
    event: str
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "run": self.run,
            "timestamp": self.timestamp.isoformat(),
            "level": self.level,
            "event": self.event,
            "details": redact(self.details),
        }


class AuditTrail:
    """Pipeline event log of one CLI run or HTTP request, stored as JSON Lines.

    Each trail owns a single ``<prefix>-<timestamp>-<id>.jsonl`` file in
    ``log_dir``; the stem doubles as the run id stamped on every event.
    """

    def __init__(self, log_dir: Path, prefix: str = "batch") -> None:
        log_dir.mkdir(parents=True, exist_ok=True)
        self.run_id = timestamped_stem(prefix)
        self.path = log_dir / f"{self.run_id}.jsonl"
        self._events: list[AuditEvent] = []

    def record(self, level: str, event: str, **details: Any) -> AuditEvent:
        entry = AuditEvent(run=self.run_id, level=level, event=event, details=details)
        self._events.append(entry)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")
        return entry

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    def find(self, event: str) -> list[AuditEvent]:
        return [entry for entry in self._events if entry.event == event]

    def count(self, level: str) -> int:
        return sum(1 for entry in self._events if entry.level == level)


__all__ = ["AuditEvent", "AuditTrail", "redact"]
