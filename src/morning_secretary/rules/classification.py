from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from morning_secretary.models import NormalizedEvent, NormalizedMessage
from morning_secretary.rules.BaseRule import BaseRule
from morning_secretary.rules.builtins import EVENT_RULES, MESSAGE_RULES, EventAt, NeedsReplyRule
from morning_secretary.rules.tables import DEFAULT_TABLES, PriorityTables


@dataclass(frozen=True)
class PriorityResult:
    high: bool
    rule: str | None = None
    reason: str | None = None


def _evaluate(rules: Sequence[BaseRule], item) -> PriorityResult:
    # Higher priority rules win when multiple could match.
    for rule in sorted(rules, key=lambda r: r.priority, reverse=True):
        matched, reason = rule.match(item)
        if matched:
            return PriorityResult(high=rule.high, rule=rule.name, reason=reason)
    return PriorityResult(high=False)


def classify_message(
    mail: NormalizedMessage, tables: PriorityTables = DEFAULT_TABLES
) -> PriorityResult:
    """
    Deterministic message priority: bulk senders are low, then urgent keywords,
    reply requests and short personal subjects are high, anything else is low.
    """
    return _evaluate([cls(tables) for cls in MESSAGE_RULES], mail)


def classify_event(
    event: NormalizedEvent, now: datetime, tables: PriorityTables = DEFAULT_TABLES
) -> PriorityResult:
    """
    Deterministic event priority relative to ``now``: all-day events are low,
    events starting within the soon window or titled like a meeting are high.
    """
    return _evaluate([cls(tables) for cls in EVENT_RULES], EventAt(event=event, now=now))


def is_high_priority_message(mail: NormalizedMessage, tables: PriorityTables = DEFAULT_TABLES) -> bool:
    return classify_message(mail, tables).high


def is_high_priority_event(
    event: NormalizedEvent, now: datetime, tables: PriorityTables = DEFAULT_TABLES
) -> bool:
    return classify_event(event, now, tables).high


def needs_reply(mail: NormalizedMessage, tables: PriorityTables = DEFAULT_TABLES) -> bool:
    matched, _ = NeedsReplyRule(tables).match(mail)
    return matched
