from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Dict, Iterable, Optional

from morning_secretary.models import NormalizedEvent, NormalizedMessage
from morning_secretary.parsing.parser import extract_body_from_payload

UNTITLED_EVENT = "(untitled)"


def header_value(headers: Optional[Iterable[Any]], name: str) -> str:
    """Case-insensitive lookup in Gmail's [{"name": ..., "value": ...}] header list."""
    wanted = name.lower()
    for h in headers or []:
        if not isinstance(h, dict):
            continue
        if str(h.get("name") or "").lower() == wanted:
            return str(h.get("value") or "")
    return ""


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def normalize_message(raw: Dict[str, Any]) -> NormalizedMessage:
    """
    Map a Gmail message resource to a NormalizedMessage.
    Total: any missing field falls back to "".
    """
    if not isinstance(raw, dict):
        return NormalizedMessage(body=extract_body_from_payload({}))

    payload = raw.get("payload")
    if not isinstance(payload, dict):
        payload = {}
    headers = payload.get("headers")

    return NormalizedMessage(
        id=_text(raw.get("id")),
        from_=header_value(headers, "From"),
        subject=header_value(headers, "Subject"),
        date=header_value(headers, "Date"),
        snippet=_text(raw.get("snippet")),
        body=extract_body_from_payload(payload),
    )


def _when(value: Any) -> tuple[str, bool]:
    # Calendar gives {"dateTime": ...} for timed events and {"date": ...} for all-day ones.
    if not isinstance(value, dict):
        return "", False
    date_time = _text(value.get("dateTime"))
    if date_time:
        return date_time, False
    date_only = _text(value.get("date"))
    return date_only, bool(date_only)


def parse_event_time(value: str, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Parse an event start/end string. Date-only values become midnight.
    Naive results are pinned to ``tz`` when given. Returns None when unparseable.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None and tz is not None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def normalize_event(raw: Dict[str, Any]) -> NormalizedEvent:
    if not isinstance(raw, dict):
        return NormalizedEvent(summary=UNTITLED_EVENT)

    start, is_all_day = _when(raw.get("start"))
    end, _ = _when(raw.get("end"))

    return NormalizedEvent(
        id=_text(raw.get("id")),
        summary=_text(raw.get("summary")) or UNTITLED_EVENT,
        start=start,
        end=end,
        location=_text(raw.get("location")),
        is_all_day=is_all_day,
    )
