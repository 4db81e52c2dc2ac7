from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Any, Optional

from morning_secretary.errors import MalformedPayloadError

logger = logging.getLogger(__name__)

NO_BODY_PLACEHOLDER = "(No readable body content)"

# Providers do not bound nesting; anything deeper is treated as unreadable.
MAX_PAYLOAD_DEPTH = 10

_BREAK_TAGS = re.compile(r"<br\s*/?>|</p>|</div>", flags=re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]*>")
_EXTRA_NEWLINES = re.compile(r"\n{3,}")
_ENTITIES = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    # Last, so "&amp;lt;" ends up as the literal text "&lt;".
    ("&amp;", "&"),
)


class _DepthExceeded(Exception):
    pass


def decode_base64url(data: str) -> str:
    """
    Decode Gmail's base64url body data into UTF-8 text.
    Padding is optional in provider output, so it is restored here.
    """
    if not data:
        return ""
    standard = data.replace("-", "+").replace("_", "/")
    standard += "=" * (-len(standard) % 4)
    try:
        raw = base64.b64decode(standard, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedPayloadError(f"Invalid base64url body data: {exc}") from exc
    return raw.decode("utf-8", errors="replace")


def strip_html(html: str) -> str:
    text = _BREAK_TAGS.sub("\n", html)
    text = _ANY_TAG.sub("", text)
    for entity, char in _ENTITIES:
        text = re.sub(re.escape(entity), char, text, flags=re.IGNORECASE)
    text = _EXTRA_NEWLINES.sub("\n\n", text)
    return text.strip()


def _part_data(part: dict) -> str:
    body = part.get("body")
    if not isinstance(body, dict):
        return ""
    data = body.get("data")
    return data if isinstance(data, str) else ""


def _safe_decode(data: str) -> str:
    # A broken part is skipped like a part without data.
    try:
        return decode_base64url(data)
    except MalformedPayloadError as exc:
        logger.warning("Skipping undecodable body part: %s", exc)
        return ""


def _extract(payload: Any, depth: int) -> Optional[str]:
    if depth > MAX_PAYLOAD_DEPTH:
        raise _DepthExceeded()
    if not isinstance(payload, dict):
        return None

    data = _part_data(payload)
    if data:
        decoded = _safe_decode(data)
        if decoded:
            if payload.get("mimeType") == "text/html":
                return strip_html(decoded)
            return decoded

    parts = payload.get("parts")
    if not isinstance(parts, list) or not parts:
        return None

    text_plain = ""
    text_html = ""
    for part in parts:
        if not isinstance(part, dict):
            continue
        mime_type = part.get("mimeType")
        part_data = _part_data(part)
        if mime_type == "text/plain" and part_data:
            if not text_plain:
                text_plain = _safe_decode(part_data)
        elif mime_type == "text/html" and part_data:
            if not text_html:
                text_html = _safe_decode(part_data)
        elif part.get("parts"):
            # Nested multipart (e.g. multipart/alternative inside multipart/mixed).
            nested = _extract(part, depth + 1)
            if nested:
                return nested

    if text_plain:
        return text_plain
    if text_html:
        return strip_html(text_html)
    return None


def extract_body_from_payload(payload: dict) -> str:
    """
    Extract a plain text body from a Gmail message payload.
    Prefers text/plain over text/html at each level, descends depth-first into
    nested multiparts and returns the first readable text found.
    Never raises: unreadable payloads yield NO_BODY_PLACEHOLDER.
    """
    try:
        text = _extract(payload, 0)
    except _DepthExceeded:
        logger.warning("Payload nesting exceeds %d levels, giving up", MAX_PAYLOAD_DEPTH)
        return NO_BODY_PLACEHOLDER
    return text or NO_BODY_PLACEHOLDER
