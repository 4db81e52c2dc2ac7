# backend/app/api/reports.py
from __future__ import annotations

from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, HTTPException, Query

from morning_secretary.config.paths import REPORTS_PATH
from morning_secretary.storage.reports import ReportStore

router = APIRouter()


def _store() -> ReportStore:
    # Resolved per request so the path can be swapped in tests.
    return ReportStore(REPORTS_PATH)


@router.get("/reports")
def recent_reports(days: int = Query(7, ge=1, le=366)) -> dict:
    return {"ok": True, "reports": _store().recent_reports(days=days)}


@router.get("/reports/{day}")
def report_for_day(day: str) -> dict:
    try:
        date.fromisoformat(day)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Expected a YYYY-MM-DD date.") from exc

    summary = _store().get_report(day)
    if summary is None:
        raise HTTPException(status_code=404, detail=f"No report for {day}.")
    return {"ok": True, "date": day, "report": asdict(summary)}
