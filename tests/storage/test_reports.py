from __future__ import annotations

import json
from pathlib import Path

from morning_secretary.storage.reports import EventCounts, MessageCounts, ReportStore, ReportSummary


def _summary(total: int) -> ReportSummary:
    return ReportSummary(
        messages=MessageCounts(total=total, high_priority=1, needs_reply=1),
        events=EventCounts(total=2, high_priority=1),
    )


def test_save_and_get_report_round_trip(tmp_path: Path) -> None:
    store = ReportStore(tmp_path / "reports.json")

    saved = store.save_report("2026-10-17", _summary(5))
    loaded = store.get_report("2026-10-17")

    assert saved.timestamp is not None
    assert loaded == saved
    assert store.get_report("2026-10-16") is None


def test_missing_file_means_no_reports(tmp_path: Path) -> None:
    store = ReportStore(tmp_path / "nested" / "reports.json")
    assert store.recent_reports() == []


def test_recent_reports_newest_first_and_limited(tmp_path: Path) -> None:
    store = ReportStore(tmp_path / "reports.json")
    for day in ("2026-10-14", "2026-10-16", "2026-10-15"):
        store.save_report(day, _summary(1))

    recent = store.recent_reports(days=2)

    assert [r["date"] for r in recent] == ["2026-10-16", "2026-10-15"]
    assert recent[0]["messages"]["total"] == 1


def test_same_day_is_overwritten(tmp_path: Path) -> None:
    store = ReportStore(tmp_path / "reports.json")
    store.save_report("2026-10-17", _summary(1))
    store.save_report("2026-10-17", _summary(9))

    data = json.loads((tmp_path / "reports.json").read_text(encoding="utf-8"))

    assert list(data["reports"]) == ["2026-10-17"]
    assert data["reports"]["2026-10-17"]["messages"]["total"] == 9


def test_legacy_record_shape_is_readable(tmp_path: Path) -> None:
    path = tmp_path / "reports.json"
    path.write_text(
        json.dumps(
            {
                "reports": {
                    "2026-10-01": {
                        "emails": {"total": 4, "needsReply": 2},
                        "calendar": {"events": 3},
                        "timestamp": "2026-10-01T07:00:00Z",
                    }
                }
            }
        ),
        encoding="utf-8",
    )

    summary = ReportStore(path).get_report("2026-10-01")

    assert summary is not None
    assert summary.messages.total == 4
    assert summary.messages.needs_reply == 2
    assert summary.events.total == 3
    assert summary.timestamp == "2026-10-01T07:00:00Z"


def test_unreadable_history_is_treated_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "reports.json"
    store = ReportStore(path)

    path.write_text("{not json", encoding="utf-8")
    assert store.recent_reports() == []
    assert store.get_report("2026-10-17") is None

    path.write_text(json.dumps(["not", "an", "object"]), encoding="utf-8")
    assert store.recent_reports() == []

    path.write_text(json.dumps({"reports": {"2026-10-16": 5, "2026-10-15": {"messages": {"total": 2}}}}), encoding="utf-8")
    assert [r["date"] for r in store.recent_reports()] == ["2026-10-15"]
    assert store.get_report("2026-10-16") is None


def test_save_replaces_unreadable_history(tmp_path: Path) -> None:
    path = tmp_path / "reports.json"
    path.write_text("{not json", encoding="utf-8")

    ReportStore(path).save_report("2026-10-17", _summary(3))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["reports"]["2026-10-17"]["messages"]["total"] == 3
