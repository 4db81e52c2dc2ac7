from __future__ import annotations

from datetime import datetime
from typing import Sequence

from morning_secretary.models import FilterCounts, FilteredBriefing, NormalizedEvent, NormalizedMessage
from morning_secretary.rules.classification import is_high_priority_event, is_high_priority_message, needs_reply
from morning_secretary.rules.tables import DEFAULT_TABLES, PriorityTables
from morning_secretary.storage.reports import EventCounts, MessageCounts, ReportSummary


def filter_high_priority(
    messages: Sequence[NormalizedMessage],
    events: Sequence[NormalizedEvent],
    *,
    now: datetime,
    tables: PriorityTables = DEFAULT_TABLES,
) -> FilteredBriefing:
    # Order is preserved so the report follows provider order.
    high_messages = [m for m in messages if is_high_priority_message(m, tables)]
    high_events = [e for e in events if is_high_priority_event(e, now, tables)]

    return FilteredBriefing(
        messages=high_messages,
        events=high_events,
        counts=FilterCounts(
            messages_total=len(messages),
            messages_shown=len(high_messages),
            events_total=len(events),
            events_shown=len(high_events),
        ),
    )


def summary_from_briefing(
    messages: Sequence[NormalizedMessage],
    filtered: FilteredBriefing,
    tables: PriorityTables = DEFAULT_TABLES,
) -> ReportSummary:
    counts = filtered.counts
    return ReportSummary(
        messages=MessageCounts(
            total=counts.messages_total,
            high_priority=counts.messages_shown,
            needs_reply=sum(1 for m in messages if needs_reply(m, tables)),
        ),
        events=EventCounts(total=counts.events_total, high_priority=counts.events_shown),
    )
