from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, tzinfo
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from morning_secretary.config.settings import DEFAULT_GMAIL_QUERY
from morning_secretary.delivery.channels import NotificationDispatcher
from morning_secretary.errors import (
    AuthFailureError,
    ErrorKind,
    classify_error,
    describe_error,
    status_of,
)
from morning_secretary.models import BriefingResult, NormalizedEvent, NormalizedMessage
from morning_secretary.parsing.normalize import normalize_event, normalize_message
from morning_secretary.pipeline.policy import filter_high_priority, summary_from_briefing
from morning_secretary.pipeline.retry import RetryPolicy
from morning_secretary.providers.calendar import CalendarProvider
from morning_secretary.providers.gmail import MailProvider
from morning_secretary.report.composer import compose_report
from morning_secretary.rules.tables import DEFAULT_TABLES, PriorityTables
from morning_secretary.storage.reports import ReportStore

logger = logging.getLogger(__name__)

T = TypeVar("T")
ProgressCallback = Callable[[str, Dict[str, Any]], None]


def day_window(now: datetime) -> Tuple[datetime, datetime]:
    """Local midnight to the next midnight for an aware ``now``."""
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


class BriefingOrchestrator:
    """
    One briefing run: fetch mail and calendar concurrently, normalize,
    classify, compose, persist the summary and deliver.

    Every remote call goes through the RetryPolicy. A failing data source
    degrades to an empty list without affecting the other one; an
    authentication failure aborts the whole run with AuthFailureError.
    """

    def __init__(
        self,
        mail: MailProvider,
        calendar: CalendarProvider,
        *,
        dispatcher: Optional[NotificationDispatcher] = None,
        store: Optional[ReportStore] = None,
        retry: Optional[RetryPolicy] = None,
        tables: PriorityTables = DEFAULT_TABLES,
        tz: Optional[tzinfo] = None,
        gmail_query: str = DEFAULT_GMAIL_QUERY,
        max_results: int = 10,
        message_format: str = "full",
        calendar_id: str = "primary",
        channel_id: str = "discord",
        progress_cb: Optional[ProgressCallback] = None,
    ):
        self.mail = mail
        self.calendar = calendar
        self.dispatcher = dispatcher
        self.store = store
        self.retry = retry or RetryPolicy()
        self.tables = tables
        self.tz = tz
        self.gmail_query = gmail_query
        self.max_results = max_results
        self.message_format = message_format
        self.calendar_id = calendar_id
        self.channel_id = channel_id
        self.progress_cb = progress_cb

    def _report(self, step: str, detail: str, **extra: Any) -> None:
        if not self.progress_cb:
            return
        payload: Dict[str, Any] = {"detail": detail}
        payload.update(extra)
        self.progress_cb(step, payload)

    def _now(self) -> datetime:
        if self.tz is not None:
            return datetime.now(self.tz)
        return datetime.now().astimezone()

    # --- Fetching ---

    def fetch_messages(self) -> Tuple[List[NormalizedMessage], int]:
        """Return normalized messages and how many listed messages had to be skipped."""
        ids = self.retry.execute(
            lambda: self.mail.list_messages(query=self.gmail_query, max_results=self.max_results),
            label="gmail list",
        )
        messages: List[NormalizedMessage] = []
        skipped = 0
        # Sequential on purpose: one detail call at a time keeps us under per-user quotas.
        for mid in ids[: self.max_results]:
            try:
                raw = self.retry.execute(
                    lambda mid=mid: self.mail.get_message(mid, fmt=self.message_format),
                    label=f"gmail get {mid}",
                )
            except Exception as exc:
                if classify_error(exc) is not ErrorKind.OTHER:
                    raise
                # Message deleted/moved between list and fetch, or a one-off failure.
                skipped += 1
                logger.warning("Skipping message %s: %s: %s", mid, type(exc).__name__, exc)
                continue
            messages.append(normalize_message(raw))
        return messages, skipped

    def fetch_events(self, now: datetime) -> List[NormalizedEvent]:
        time_min, time_max = day_window(now)
        raw_events = self.retry.execute(
            lambda: self.calendar.list_events(self.calendar_id, time_min, time_max),
            label="calendar list",
        )
        return [normalize_event(e) for e in raw_events]

    def _guarded(self, source: str, fn: Callable[[], T], empty: T) -> Tuple[T, Optional[str]]:
        try:
            return fn(), None
        except AuthFailureError:
            raise
        except Exception as exc:
            description = describe_error(exc)
            if classify_error(exc) is ErrorKind.AUTH_FAILURE:
                raise AuthFailureError(f"{source}: {description}", status_code=status_of(exc)) from exc
            logger.error("%s fetch failed, continuing without it: %s", source, description)
            return empty, f"{source}: {description}"

    # --- Run ---

    def run(self, now: Optional[datetime] = None) -> BriefingResult:
        now = now or self._now()
        errors: List[str] = []

        self._report("fetch", detail="Fetching mail and calendar")
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="briefing") as pool:
            mail_future = pool.submit(self._guarded, "mail", self.fetch_messages, ([], 0))
            calendar_future = pool.submit(self._guarded, "calendar", lambda: self.fetch_events(now), [])
            (messages, skipped), mail_error = mail_future.result()
            events, calendar_error = calendar_future.result()

        for err in (mail_error, calendar_error):
            if err:
                errors.append(err)
                self._report("error", detail=err, error={"error": err})
        if skipped:
            errors.append(f"mail: skipped {skipped} unreadable message(s)")

        logger.info("Fetched %d messages, %d events", len(messages), len(events))

        self._report("classify", detail="Classifying")
        filtered = filter_high_priority(messages, events, now=now, tables=self.tables)
        counts = filtered.counts
        logger.info(
            "High priority: %d/%d messages, %d/%d events",
            counts.messages_shown,
            counts.messages_total,
            counts.events_shown,
            counts.events_total,
        )

        today = now.date()
        report = compose_report(
            filtered.messages,
            filtered.events,
            today=today,
            counts=counts,
            tables=self.tables,
            tz=self.tz,
        )

        if self.store is not None:
            self._report("save_report", detail="Saving report summary")
            summary = summary_from_briefing(messages, filtered, self.tables)
            try:
                self.store.save_report(today.isoformat(), summary)
            except (OSError, ValueError) as exc:
                logger.error("Could not persist report summary: %s", exc)
                errors.append(f"store: {exc}")

        delivered = False
        if self.dispatcher is not None:
            self._report("deliver", detail=f"Sending to {self.channel_id}")
            delivered = self.dispatcher.dispatch(self.channel_id, report)

        result = BriefingResult(
            report=report,
            filtered=filtered,
            messages=messages,
            events=events,
            delivered=delivered,
            errors=errors,
            skipped_messages=skipped,
            report_date=today.isoformat(),
        )
        self._report(
            "done",
            detail="Briefing completed",
            metrics={
                "messages_total": counts.messages_total,
                "messages_shown": counts.messages_shown,
                "events_total": counts.events_total,
                "events_shown": counts.events_shown,
                "skipped_messages": skipped,
                "delivered": delivered,
            },
        )
        return result
