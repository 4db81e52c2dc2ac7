from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from morning_secretary.models import NormalizedEvent, NormalizedMessage
from morning_secretary.rules.classification import (
    classify_event,
    classify_message,
    is_high_priority_event,
    is_high_priority_message,
    needs_reply,
)
from morning_secretary.rules.tables import PriorityTables

JST = timezone(timedelta(hours=9))
NOW = datetime(2026, 10, 17, 8, 0, tzinfo=JST)


def _mail(from_: str, subject: str) -> NormalizedMessage:
    return NormalizedMessage(id="m", from_=from_, subject=subject)


def _event(summary: str, start: datetime | str, *, all_day: bool = False) -> NormalizedEvent:
    start_text = start if isinstance(start, str) else start.isoformat()
    return NormalizedEvent(id="e", summary=summary, start=start_text, is_all_day=all_day)


# --- Messages ---

def test_newsletter_digest_is_low() -> None:
    assert is_high_priority_message(_mail("newsletter@example.com", "Weekly Digest")) is False


def test_urgent_japanese_keyword_is_high() -> None:
    result = classify_message(_mail("boss@company.com", "至急: 確認お願いします"))

    assert result.high is True
    assert result.rule == "urgent_keyword"


def test_bulk_pattern_beats_urgent_keyword() -> None:
    mail = _mail("Alerts <no-reply@service.example>", "URGENT: your invoice")
    result = classify_message(mail)

    assert result.high is False
    assert result.rule == "bulk_sender"


def test_bulk_infrastructure_domain_is_low() -> None:
    assert is_high_priority_message(_mail("bounce@amazonses.com", "Hello")) is False


def test_question_from_person_needs_reply_and_is_high() -> None:
    mail = _mail("Bob <bob@company.com>", "Can you review the quarterly planning document?")

    assert needs_reply(mail) is True
    result = classify_message(mail)
    assert result.high is True
    assert result.rule == "needs_reply"


def test_request_keyword_needs_reply() -> None:
    assert needs_reply(_mail("tanaka@example.jp", "資料の確認について")) is True


def test_automated_sender_never_needs_reply() -> None:
    assert needs_reply(_mail("noreply@example.com", "Can you confirm?")) is False


def test_short_subject_from_personal_sender_is_high() -> None:
    result = classify_message(_mail("mom@family.example", "Dinner"))

    assert result.high is True
    assert result.rule == "short_personal_subject"


def test_short_subject_from_corporate_display_address_is_low() -> None:
    mail = _mail("Acme Sales <sales@acme.com>", "Quarterly update")
    assert is_high_priority_message(mail) is False


def test_long_plain_subject_is_low() -> None:
    mail = _mail("friend@example.org", "Thoughts on the conference we went to last month")
    result = classify_message(mail)

    assert result.high is False
    assert result.rule is None


def test_message_classifier_is_idempotent() -> None:
    mail = _mail("boss@company.com", "Status")
    labels = {classify_message(mail) for _ in range(5)}
    assert len(labels) == 1


def test_substituted_tables_change_the_verdict() -> None:
    tables = PriorityTables(urgent_keywords=("dringend",), short_subject_threshold=0)
    mail = _mail("chef@firma.de", "Dringend: Angebot")

    assert is_high_priority_message(mail, tables) is True
    assert is_high_priority_message(_mail("chef@firma.de", "Urgent"), tables) is False


# --- Events ---

def test_event_starting_within_an_hour_is_high() -> None:
    assert is_high_priority_event(_event("Lunch", NOW + timedelta(hours=1)), NOW) is True


def test_event_later_without_keyword_is_low() -> None:
    assert is_high_priority_event(_event("Lunch", NOW + timedelta(hours=5)), NOW) is False


def test_meeting_keyword_later_today_is_high() -> None:
    result = classify_event(_event("Team meeting", NOW + timedelta(hours=5)), NOW)

    assert result.high is True
    assert result.rule == "meeting_keyword"


def test_all_day_event_is_always_low() -> None:
    event = _event("Team meeting", "2026-10-17", all_day=True)
    result = classify_event(event, NOW)

    assert result.high is False
    assert result.rule == "all_day"


@pytest.mark.parametrize(
    ("offset", "expected"),
    [
        (timedelta(0), True),
        (timedelta(hours=3), True),
        (timedelta(hours=3, minutes=1), False),
        (timedelta(minutes=-1), False),
    ],
)
def test_soon_window_bounds(offset: timedelta, expected: bool) -> None:
    assert is_high_priority_event(_event("Dentist", NOW + offset), NOW) is expected


def test_event_time_in_other_offset_is_compared_correctly() -> None:
    start_utc = (NOW + timedelta(hours=2)).astimezone(timezone.utc)
    assert is_high_priority_event(_event("Dentist", start_utc.isoformat()), NOW) is True


def test_naive_now_is_read_as_local_time() -> None:
    naive_now = datetime(2026, 10, 17, 8, 0)
    start = naive_now.astimezone() + timedelta(hours=1)

    result = classify_event(_event("Dentist", start.astimezone(timezone.utc)), naive_now)

    assert result.high is True
    assert result.rule == "starting_soon"


def test_unparseable_start_falls_through_to_keywords() -> None:
    assert is_high_priority_event(_event("1on1 with Kim", "soon-ish"), NOW) is True
    assert is_high_priority_event(_event("Dentist", "soon-ish"), NOW) is False
