from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from pdfmail.utils.audit import AuditTrail

DEFAULT_SUFFIX = ".txt"


@dataclass(slots=True)
class SavedOutput:
    """Where a list of addresses ended up on disk."""

    path: Path
    requested_name: str
    renamed: bool

    @property
    def name(self) -> str:
        return self.path.name


def serialize_addresses(addresses: Iterable[str]) -> str:
    """Join addresses with single newlines, without header or trailing newline."""

    return "\n".join(addresses)


def ensure_suffix(name: str, suffix: str = DEFAULT_SUFFIX) -> str:
    if name.endswith(suffix):
        return name
    return f"{name}{suffix}"


def resolve_output_path(
    directory: Path,
    filename: str,
    suffix: str = DEFAULT_SUFFIX,
) -> tuple[Path, bool]:
    """Return a path in ``directory`` that does not exist yet.

    ``report`` resolves to ``report.txt``, then ``report(0).txt``,
    ``report(1).txt`` and so on while the candidates are taken. The boolean
    tells whether the requested name had to be changed.
    """

    name = ensure_suffix(filename, suffix)
    candidate = directory / name
    if not candidate.exists():
        return candidate, False

    stem = name[: -len(suffix)]
    counter = 0
    while True:
        candidate = directory / f"{stem}({counter}){suffix}"
        if not candidate.exists():
            return candidate, True
        counter += 1


def save_addresses(
    addresses: Iterable[str],
    filename: str,
    directory: Path,
    suffix: str = DEFAULT_SUFFIX,
    audit: AuditTrail | None = None,
) -> SavedOutput:
    """Write addresses to a new file in ``directory`` without overwriting anything."""

    directory.mkdir(parents=True, exist_ok=True)
    path, renamed = resolve_output_path(directory, filename, suffix)
    content = serialize_addresses(addresses)
    with path.open("x", encoding="utf-8", newline="\n") as handle:
        handle.write(content)
    if audit is not None:
        audit.record("info", "output.saved", path=str(path), renamed=renamed)
    return SavedOutput(path=path, requested_name=ensure_suffix(filename, suffix), renamed=renamed)


__all__ = [
    "DEFAULT_SUFFIX",
    "SavedOutput",
    "ensure_suffix",
    "resolve_output_path",
    "save_addresses",
    "serialize_addresses",
]
