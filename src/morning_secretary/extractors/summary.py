from __future__ import annotations

import re
from email.utils import parseaddr

SUBJECT_LIMIT = 40
SENDER_LIMIT = 40
SNIPPET_LIMIT = 100
ELLIPSIS = "..."


def truncate(text: str, limit: int) -> str:
    """Hard cut at ``limit`` characters, no marker."""
    return (text or "")[:limit]


def summarize(snippet: str, limit: int = SNIPPET_LIMIT) -> str:
    """
    One-line preview of a message: whitespace collapsed, cut at ``limit``
    characters with a trailing ellipsis when something was dropped.
    """
    cleaned = _clean_text(snippet)
    if len(cleaned) > limit:
        return cleaned[:limit] + ELLIPSIS
    return cleaned


def display_sender(from_header: str, limit: int = SENDER_LIMIT) -> str:
    # "Name <mail@domain>" -> "Name"; bare addresses are kept as they are.
    name = (from_header or "").split("<")[0].strip().strip('"').strip()
    if not name:
        name = parseaddr(from_header or "")[1] or (from_header or "").strip()
    return truncate(name, limit)


def _clean_text(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()
