from __future__ import annotations
import json
import logging
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class MessageCounts:
    total: int = 0
    high_priority: int = 0
    needs_reply: int = 0


@dataclass
class EventCounts:
    total: int = 0
    high_priority: int = 0


@dataclass
class ReportSummary:
    messages: MessageCounts = field(default_factory=MessageCounts)
    events: EventCounts = field(default_factory=EventCounts)
    # ISO timestamp of when the summary was written.
    timestamp: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportSummary":
        # Keep load resilient to legacy/extra fields.
        mails = data.get("messages") or data.get("emails") or {}
        events = data.get("events") or data.get("calendar") or {}
        return cls(
            messages=MessageCounts(
                total=int(mails.get("total") or 0),
                high_priority=int(mails.get("high_priority") or 0),
                # Backward compatibility: older records used camelCase.
                needs_reply=int(mails.get("needs_reply") or mails.get("needsReply") or 0),
            ),
            events=EventCounts(
                total=int(events.get("total") or events.get("events") or 0),
                high_priority=int(events.get("high_priority") or 0),
            ),
            timestamp=data.get("timestamp"),
        )


class ReportStore:
    """
    Date-keyed audit log of briefing summaries, stored as one JSON file:
    {"reports": {"YYYY-MM-DD": {...}}}. Never read back into classification.
    """

    def __init__(self, path: Path):
        self.path = path

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {"reports": {}}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            # The log is an audit trail only; a damaged file starts a fresh history.
            logger.warning("Ignoring unreadable report history %s: %s", self.path, exc)
            return {"reports": {}}
        if not isinstance(data, dict):
            logger.warning("Ignoring report history %s: expected a JSON object", self.path)
            return {"reports": {}}
        if not isinstance(data.get("reports"), dict):
            data["reports"] = {}
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

    def save_report(self, day: str, summary: ReportSummary) -> ReportSummary:
        if summary.timestamp is None:
            summary.timestamp = datetime.now(timezone.utc).isoformat()
        data = self._load()
        data["reports"][day] = asdict(summary)
        self._write(data)
        return summary

    def get_report(self, day: str) -> Optional[ReportSummary]:
        raw = self._load()["reports"].get(day)
        return ReportSummary.from_dict(raw) if isinstance(raw, dict) else None

    def recent_reports(self, days: int = 7) -> List[Dict[str, Any]]:
        """Newest first, at most ``days`` entries."""
        reports = self._load()["reports"]
        dates = sorted((d for d, r in reports.items() if isinstance(r, dict)), reverse=True)[: max(0, days)]
        return [
            {"date": d, **asdict(ReportSummary.from_dict(reports[d]))}
            for d in dates
        ]
