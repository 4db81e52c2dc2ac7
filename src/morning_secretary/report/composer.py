from __future__ import annotations

from datetime import date, tzinfo
from typing import List, Optional, Sequence

from morning_secretary.extractors.summary import (
    SUBJECT_LIMIT,
    display_sender,
    summarize,
    truncate,
)
from morning_secretary.models import FilterCounts, NormalizedEvent, NormalizedMessage
from morning_secretary.parsing.normalize import parse_event_time
from morning_secretary.rules.classification import needs_reply
from morning_secretary.rules.tables import DEFAULT_TABLES, PriorityTables

MAX_MESSAGES_SHOWN = 5
BUSY_DAY_EVENTS = 5

RULE = "━━━━━━━━━━━━━━━━━━━━━━"
REPLY_MARK = " 📩"

# Fixed tables keep the header independent of the process locale.
_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def format_date_header(today: date) -> str:
    return f"{_WEEKDAYS[today.weekday()]}, {_MONTHS[today.month - 1]} {today.day}, {today.year}"


def format_event_time(event: NormalizedEvent, tz: Optional[tzinfo] = None) -> str:
    if event.is_all_day:
        return "all day"
    start = parse_event_time(event.start)
    if start is None:
        return "--:--"
    if tz is not None and start.tzinfo is not None:
        start = start.astimezone(tz)
    return f"{start.hour:02d}:{start.minute:02d}"


def _message_lines(
    messages: Sequence[NormalizedMessage],
    counts: Optional[FilterCounts],
    tables: PriorityTables,
) -> List[str]:
    if counts:
        lines = [f"📧 Important mail ({len(messages)}/{counts.messages_total})"]
    else:
        lines = [f"📧 Mail ({len(messages)})"]
    lines.append(RULE)

    if not messages:
        lines.append("No unread messages.")
        lines.append("")
        return lines

    for i, mail in enumerate(messages[:MAX_MESSAGES_SHOWN], start=1):
        mark = REPLY_MARK if needs_reply(mail, tables) else ""
        lines.append(f"{i}. {truncate(mail.subject, SUBJECT_LIMIT)}{mark}")
        lines.append(f"   From: {display_sender(mail.from_)}")
        lines.append(f"   {summarize(mail.snippet)}")
        lines.append("")
    return lines


def _event_lines(
    events: Sequence[NormalizedEvent],
    counts: Optional[FilterCounts],
    tz: Optional[tzinfo],
) -> List[str]:
    if counts:
        lines = [f"🗓️ Upcoming events ({len(events)}/{counts.events_total})"]
    else:
        lines = [f"🗓️ Today's events ({len(events)})"]
    lines.append(RULE)

    if not events:
        lines.append("No events.")
        lines.append("")
        return lines

    for event in events:
        lines.append(f"• {format_event_time(event, tz)} ~ {event.summary}")
        if event.location:
            lines.append(f"  📍 {event.location}")
    lines.append("")
    return lines


def _hints(
    messages: Sequence[NormalizedMessage],
    events: Sequence[NormalizedEvent],
    tables: PriorityTables,
) -> List[str]:
    hints: List[str] = []
    if len(events) >= BUSY_DAY_EVENTS:
        hints.append("Busy day ahead. Leave time to move between events.")
    if any(needs_reply(m, tables) for m in messages):
        hints.append("Some messages need a reply (marked 📩).")
    return hints


def compose_report(
    messages: Sequence[NormalizedMessage],
    events: Sequence[NormalizedEvent],
    *,
    today: date,
    counts: Optional[FilterCounts] = None,
    tables: PriorityTables = DEFAULT_TABLES,
    tz: Optional[tzinfo] = None,
) -> str:
    """
    Render the morning briefing.

    Sections, always in this order: date header, messages (at most 5), events,
    hints (only when there is something to say) and a closing line. Output is a
    pure function of the arguments.
    """
    lines: List[str] = [f"🌅 Morning briefing - {format_date_header(today)}"]
    if counts:
        lines.append("(high priority only)")
    lines.append("")

    lines.extend(_message_lines(messages, counts, tables))
    lines.extend(_event_lines(events, counts, tz))

    hints = _hints(messages, events, tables)
    if hints:
        lines.append("💡 Hints for today")
        lines.append(RULE)
        lines.extend(f"• {h}" for h in hints)

    lines.append("")
    lines.append("Have a good day! ☀️")
    return "\n".join(lines)
