from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List

import requests

from morning_secretary.errors import DeliveryFailureError

logger = logging.getLogger(__name__)

# Discord rejects message content longer than this.
DISCORD_MAX_CHARS = 2000


class NotificationChannel(ABC):
    @abstractmethod
    def send(self, channel_id: str, text: str) -> None:
        """Deliver text; raise DeliveryFailureError on failure."""
        ...


class ConsoleChannel(NotificationChannel):
    def send(self, channel_id: str, text: str) -> None:
        print(f"\n--- Report ({channel_id}) ---\n")
        print(text)


def split_message(text: str, limit: int = DISCORD_MAX_CHARS) -> List[str]:
    """Split on line boundaries into chunks of at most ``limit`` characters."""
    chunks: List[str] = []
    current = ""
    for line in text.split("\n"):
        # Overlong single lines are hard-cut.
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


class DiscordWebhookChannel(NotificationChannel):
    def __init__(self, webhook_url: str, timeout: float = 10.0):
        self.webhook_url = webhook_url
        self.timeout = timeout

    def send(self, channel_id: str, text: str) -> None:
        for chunk in split_message(text):
            try:
                resp = requests.post(
                    self.webhook_url,
                    json={"content": chunk},
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                raise DeliveryFailureError(f"Discord webhook request failed: {exc}") from exc
            if resp.status_code >= 300:
                raise DeliveryFailureError(
                    f"Discord webhook returned {resp.status_code}: {resp.text[:200]}"
                )


@dataclass
class NotificationDispatcher:
    channels: Dict[str, NotificationChannel] = field(default_factory=dict)
    dry_run: bool = False

    def dispatch(self, channel_id: str, text: str) -> bool:
        """
        Send ``text`` through the channel registered under ``channel_id``.
        Delivery problems are logged and reported as False, never raised.
        """
        channel = self.channels.get(channel_id)
        if not channel:
            logger.warning("No notification channel registered for: %s", channel_id)
            return False

        if self.dry_run:
            logger.info("[DRY-RUN] would send %d chars to %s", len(text), channel_id)
            return False

        try:
            channel.send(channel_id, text)
        except DeliveryFailureError as exc:
            logger.error("Delivery to %s failed: %s", channel_id, exc)
            return False
        logger.info("Sent briefing to %s", channel_id)
        return True


def default_dispatcher(*, webhook_url: str | None = None, dry_run: bool = False) -> NotificationDispatcher:
    channels: Dict[str, NotificationChannel] = {"console": ConsoleChannel()}
    if webhook_url:
        channels["discord"] = DiscordWebhookChannel(webhook_url)
    return NotificationDispatcher(channels=channels, dry_run=dry_run)
