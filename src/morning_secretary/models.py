from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class NormalizedMessage:
    id: str = ""
    from_: str = ""
    subject: str = ""
    # Raw Date header, kept as delivered by the provider.
    date: str = ""
    snippet: str = ""
    # Always plain text, markup already stripped.
    body: str = ""


@dataclass(frozen=True)
class NormalizedEvent:
    id: str = ""
    summary: str = ""
    # ISO datetime, or a bare YYYY-MM-DD for all-day events.
    start: str = ""
    end: str = ""
    location: str = ""
    is_all_day: bool = False


@dataclass(frozen=True)
class FilterCounts:
    messages_total: int
    messages_shown: int
    events_total: int
    events_shown: int


@dataclass(frozen=True)
class FilteredBriefing:
    messages: List[NormalizedMessage]
    events: List[NormalizedEvent]
    counts: FilterCounts


@dataclass
class BriefingResult:
    report: str
    filtered: FilteredBriefing
    messages: List[NormalizedMessage] = field(default_factory=list)
    events: List[NormalizedEvent] = field(default_factory=list)
    delivered: bool = False
    # One line per degraded data source or skipped message.
    errors: List[str] = field(default_factory=list)
    skipped_messages: int = 0
    report_date: Optional[str] = None
