from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Sequence, TypeVar

from morning_secretary.rules.tables import PriorityTables

T = TypeVar("T")


class BaseRule(ABC, Generic[T]):
    """
    Base class for priority rules.

    A rule decides a verdict (high or low priority) for the items it matches.
    Rules are evaluated by descending priority; the first match wins.
    """

    # Human-/debug-friendly unique name
    name: str = "base_rule"

    # Higher runs earlier
    priority: int = 0

    # Label assigned when this rule matches
    high: bool = False

    def __init__(self, tables: PriorityTables):
        self.tables = tables

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, priority={self.priority})"

    # --- Helpers (None-safe, case-insensitive) ---

    def norm(self, s: str | None) -> str:
        """Normalize text for matching (None-safe, lowercased)."""
        return (s or "").lower()

    def first_hit(self, text: str | None, needles: Sequence[str]) -> str | None:
        """Return the first needle contained in text (case-insensitive), else None."""
        t = self.norm(text)
        for n in needles:
            if n.lower() in t:
                return n
        return None

    def contains_any(self, text: str | None, needles: Sequence[str]) -> bool:
        """True if any needle is a substring of text (case-insensitive)."""
        return self.first_hit(text, needles) is not None

    # --- Rule API ---

    @abstractmethod
    def match(self, item: T) -> tuple[bool, str]:
        """Return (matched, reason)."""
        raise NotImplementedError
