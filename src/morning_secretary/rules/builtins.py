from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from morning_secretary.models import NormalizedEvent, NormalizedMessage
from morning_secretary.parsing.normalize import parse_event_time
from morning_secretary.rules.BaseRule import BaseRule


@dataclass(frozen=True)
class EventAt:
    """An event evaluated relative to a fixed point in time."""
    event: NormalizedEvent
    now: datetime


# --- Message rules ---

class MessageRule(BaseRule[NormalizedMessage]):
    def sender(self, mail: NormalizedMessage) -> str:
        return self.norm(mail.from_)

    def subject(self, mail: NormalizedMessage) -> str:
        return self.norm(mail.subject)

    def is_automated_sender(self, mail: NormalizedMessage) -> bool:
        return self.contains_any(self.sender(mail), self.tables.automated_sender_markers)


class BulkSenderRule(MessageRule):
    name = "bulk_sender"
    priority = 100
    high = False

    def match(self, mail: NormalizedMessage) -> tuple[bool, str]:
        patterns = self.tables.low_priority_patterns
        hit = self.first_hit(self.sender(mail), patterns) or self.first_hit(self.subject(mail), patterns)
        if hit:
            return True, f"low-priority pattern '{hit}'"
        return False, ""


class UrgentKeywordRule(MessageRule):
    name = "urgent_keyword"
    priority = 80
    high = True

    def match(self, mail: NormalizedMessage) -> tuple[bool, str]:
        hit = self.first_hit(self.subject(mail), self.tables.urgent_keywords)
        if hit:
            return True, f"urgent keyword '{hit}'"
        return False, ""


class NeedsReplyRule(MessageRule):
    name = "needs_reply"
    priority = 60
    high = True

    def match(self, mail: NormalizedMessage) -> tuple[bool, str]:
        if self.is_automated_sender(mail):
            return False, ""
        subj = self.subject(mail)
        if "?" in subj:
            return True, "question in subject"
        hit = self.first_hit(subj, self.tables.reply_keywords)
        if hit:
            return True, f"request keyword '{hit}'"
        return False, ""


class ShortPersonalSubjectRule(MessageRule):
    # Weak heuristic: short subjects from non-corporate senders tend to be personal.
    name = "short_personal_subject"
    priority = 40
    high = True

    def match(self, mail: NormalizedMessage) -> tuple[bool, str]:
        if len(self.subject(mail)) >= self.tables.short_subject_threshold:
            return False, ""
        if self.contains_any(self.sender(mail), self.tables.corporate_sender_markers):
            return False, ""
        return True, "short subject from a personal sender"


# --- Event rules ---

class AllDayEventRule(BaseRule[EventAt]):
    name = "all_day"
    priority = 100
    high = False

    def match(self, item: EventAt) -> tuple[bool, str]:
        if item.event.is_all_day:
            return True, "all-day event (reminder)"
        return False, ""


class StartingSoonRule(BaseRule[EventAt]):
    name = "starting_soon"
    priority = 80
    high = True

    def match(self, item: EventAt) -> tuple[bool, str]:
        # A naive ``now`` is taken as local wall-clock time.
        now = item.now if item.now.tzinfo is not None else item.now.astimezone()
        start = parse_event_time(item.event.start, now.tzinfo)
        if start is None:
            return False, ""
        hours = (start - now).total_seconds() / 3600
        if 0 <= hours <= self.tables.soon_window_hours:
            return True, f"starts in {hours:.1f}h"
        return False, ""


class MeetingKeywordRule(BaseRule[EventAt]):
    name = "meeting_keyword"
    priority = 60
    high = True

    def match(self, item: EventAt) -> tuple[bool, str]:
        hit = self.first_hit(item.event.summary, self.tables.meeting_keywords)
        if hit:
            return True, f"meeting keyword '{hit}'"
        return False, ""


MESSAGE_RULES = (BulkSenderRule, UrgentKeywordRule, NeedsReplyRule, ShortPersonalSubjectRule)
EVENT_RULES = (AllDayEventRule, StartingSoonRule, MeetingKeywordRule)
