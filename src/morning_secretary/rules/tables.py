from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class PriorityTables:
    """
    Keyword tables driving the priority rules.
    All matching is substring-based on lowercased text.
    """

    # Automated/bulk senders and subjects: always low priority.
    low_priority_patterns: Tuple[str, ...] = (
        "noreply",
        "no-reply",
        "notification",
        "newsletter",
        "digest",
        "weekly",
        "daily",
        "automated",
        "auto-",
        "marketing",
        "promo",
        "unsubscribe",
        "github.com",
        "amazonses",
        "sendgrid",
        "mailchimp",
    )
    urgent_keywords: Tuple[str, ...] = (
        "急ぎ",
        "至急",
        "重要",
        "緊急",
        "今日中",
        "urgent",
        "important",
        "asap",
    )
    # Subject words asking the reader to confirm or do something.
    reply_keywords: Tuple[str, ...] = (
        "確認",
        "お願い",
    )
    automated_sender_markers: Tuple[str, ...] = (
        "noreply",
        "no-reply",
        "notification",
    )
    corporate_sender_markers: Tuple[str, ...] = (
        ".com>",
        "notification",
    )
    meeting_keywords: Tuple[str, ...] = (
        "meeting",
        "ミーティング",
        "会議",
        "打ち合わせ",
        "面談",
        "call",
        "1on1",
    )
    short_subject_threshold: int = 30
    soon_window_hours: float = 3.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "PriorityTables":
        """Defaults overridden by the keys present in ``data`` (unknown keys are ignored)."""
        tables = cls()
        if not data:
            return tables

        overrides: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            if isinstance(getattr(tables, f.name), tuple):
                if isinstance(value, str):
                    value = [value]
                overrides[f.name] = tuple(str(v).lower() for v in value)
            elif f.name == "short_subject_threshold":
                overrides[f.name] = int(value)
            else:
                overrides[f.name] = float(value)
        return replace(tables, **overrides)


DEFAULT_TABLES = PriorityTables()
