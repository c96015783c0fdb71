from __future__ import annotations

import re

EMAIL_PATTERN = r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"

_EMAIL_RE = re.compile(EMAIL_PATTERN)


def find_candidates(text: str) -> list[str]:
    """Return every email-looking substring of ``text`` in document order.

    Matches keep their original casing and duplicates are preserved. This is a
    lexical filter, not an RFC 5322 parser: quoted local parts, comments and
    IP-literal domains are not recognised.
    """

    if not text:
        return []
    return _EMAIL_RE.findall(text)


def fold_address(candidate: str) -> str:
    """Return the canonical, lower-cased form used for deduplication."""

    return candidate.lower()


__all__ = ["EMAIL_PATTERN", "find_candidates", "fold_address"]
