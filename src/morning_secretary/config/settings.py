from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


DEFAULT_GMAIL_QUERY = "is:unread -category:promotions -category:social"


@dataclass
class BriefingConfig:
    # Gmail search used to pick the candidate messages of a run.
    gmail_query: str = DEFAULT_GMAIL_QUERY
    max_results: int = 10
    calendar_id: str = "primary"
    # Day boundaries and event times are rendered in this zone.
    timezone: str = "Asia/Tokyo"
    notification_channel: str = "discord"
    discord_webhook_url: Optional[str] = None
    # Keyword table overrides, see PriorityTables.from_dict().
    priority: Dict[str, Any] = field(default_factory=dict)


def load_config(path: Path) -> BriefingConfig:
    """
    Load the briefing config, falling back to defaults when the file is missing or unreadable.
    The webhook URL from DISCORD_WEBHOOK_URL wins over the file so secrets can stay in .env.
    """
    data: Dict[str, Any] = {}
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable config %s, using defaults: %s", path, exc)
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: expected a JSON object", path)
            data = {}

    gmail = data.get("gmail") or {}
    calendar = data.get("calendar") or {}
    notifications = data.get("notifications") or {}

    return BriefingConfig(
        gmail_query=str(gmail.get("query") or DEFAULT_GMAIL_QUERY),
        max_results=int(gmail.get("max_results") or gmail.get("maxResults") or 10),
        calendar_id=str(calendar.get("calendar_id") or "primary"),
        timezone=str(data.get("timezone") or "Asia/Tokyo"),
        notification_channel=str(notifications.get("channel") or "discord"),
        discord_webhook_url=(
            os.getenv("DISCORD_WEBHOOK_URL") or notifications.get("discord_webhook_url") or None
        ),
        priority=dict(data.get("priority") or {}),
    )


def save_config(path: Path, cfg: BriefingConfig) -> None:
    # Never write the webhook secret back to disk.
    raw = asdict(cfg)
    payload = {
        "gmail": {"query": raw["gmail_query"], "max_results": raw["max_results"]},
        "calendar": {"calendar_id": raw["calendar_id"]},
        "timezone": raw["timezone"],
        "notifications": {"channel": raw["notification_channel"]},
        "priority": raw["priority"],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
