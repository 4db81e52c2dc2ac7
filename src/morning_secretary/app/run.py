# src/morning_secretary/app/run.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional, Dict, Any, List, Callable
from zoneinfo import ZoneInfo

from morning_secretary.config.paths import CONFIG_PATH, CREDENTIALS_PATH, REPORTS_PATH, TOKEN_PATH
from morning_secretary.config.settings import load_config
from morning_secretary.delivery.channels import default_dispatcher
from morning_secretary.pipeline.orchestrator import BriefingOrchestrator
from morning_secretary.providers.auth import AuthConfig, AuthSession
from morning_secretary.providers.calendar import CalendarClient
from morning_secretary.providers.gmail import GmailClient
from morning_secretary.rules.tables import PriorityTables
from morning_secretary.storage.reports import ReportStore


@dataclass
class RunSummary:
    report_date: Optional[str]
    messages_total: int
    messages_shown: int
    events_total: int
    events_shown: int
    skipped_messages: int
    delivered: bool
    errors: List[str]
    report: str


def load_auth_config() -> AuthConfig:
    if not CREDENTIALS_PATH.exists():
        raise RuntimeError(
            f"Missing Google OAuth credentials at {CREDENTIALS_PATH}. "
            "Did you configure MORNING_SECRETARY_SECRETS_DIR?"
        )
    return AuthConfig(credentials_path=CREDENTIALS_PATH, token_path=TOKEN_PATH)


def run_once(
    *,
    config_path: Path = CONFIG_PATH,
    reports_path: Path = REPORTS_PATH,
    dry_run: bool = False,
    store_report: bool = True,
    verbose: bool = False,
    progress_cb: Optional[Callable[[str, Dict[str, Any]], None]] = None,
) -> Dict[str, Any]:
    """
    Execute a single briefing run and return a machine-readable summary.

    Args:
        config_path: Path to the briefing config (missing file means defaults).
        reports_path: Path to the date-keyed report history.
        dry_run: If True, print the report to the console instead of sending it.
        store_report: If False, skip writing the summary to the report history.
        verbose: If True, print progress for CLI usage.

    Returns:
        dict summary (JSON-serializable).

    Raises:
        AuthFailureError: when Google rejects the stored credentials.
    """
    def log(msg: str) -> None:
        if verbose:
            print(msg)

    def report(step: str, payload: Dict[str, Any]) -> None:
        log(f"[{step}] {payload.get('detail') or ''}")
        if progress_cb:
            progress_cb(step, payload)

    # --- Config ---
    report("load_config", {"detail": "Loading config"})
    cfg = load_config(config_path)
    tz = ZoneInfo(cfg.timezone)
    tables = PriorityTables.from_dict(cfg.priority)

    # --- Auth ---
    report("connect_google", {"detail": "Connecting to Google"})
    session = AuthSession(load_auth_config())
    creds, refreshed = session.ensure_valid()
    if refreshed:
        # Persist the rotated token so the next run starts from it.
        session.save(creds)
        log("[auth] Saved refreshed token")

    gmail = GmailClient(creds)
    gmail.connect()
    calendar = CalendarClient(creds)
    calendar.connect()

    # --- Delivery ---
    channel_id = cfg.notification_channel
    if dry_run:
        channel_id = "console"
    elif channel_id == "discord" and not cfg.discord_webhook_url:
        log("[deliver] DISCORD_WEBHOOK_URL not set, printing to console instead")
        channel_id = "console"
    dispatcher = default_dispatcher(webhook_url=cfg.discord_webhook_url)

    orchestrator = BriefingOrchestrator(
        gmail,
        calendar,
        dispatcher=dispatcher,
        store=ReportStore(reports_path) if store_report else None,
        tables=tables,
        tz=tz,
        gmail_query=cfg.gmail_query,
        max_results=cfg.max_results,
        calendar_id=cfg.calendar_id,
        channel_id=channel_id,
        progress_cb=report,
    )
    result = orchestrator.run()

    counts = result.filtered.counts
    summary = RunSummary(
        report_date=result.report_date,
        messages_total=counts.messages_total,
        messages_shown=counts.messages_shown,
        events_total=counts.events_total,
        events_shown=counts.events_shown,
        skipped_messages=result.skipped_messages,
        delivered=result.delivered,
        errors=list(result.errors),
        report=result.report,
    )
    for err in summary.errors:
        log(f"[error] {err}")
    return asdict(summary)
