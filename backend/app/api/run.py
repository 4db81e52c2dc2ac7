# backend/app/api/run.py
from typing import Any
from fastapi import APIRouter, HTTPException
from starlette.concurrency import run_in_threadpool

from morning_secretary.app.run import run_once
from morning_secretary.errors import AuthFailureError
from backend.app.status import run_status_store

router = APIRouter()


@router.post("/run")
async def run_endpoint(dry_run: bool = False) -> dict:
    run_status_store.update(state="running", step="starting", detail="Starting briefing", metrics={})

    def progress_cb(step: str, event: dict[str, Any]) -> None:
        status_update: dict[str, Any] = {
            "state": "running",
            "step": step,
            "detail": event.get("detail"),
        }

        error = event.get("error")
        if error:
            current = run_status_store.snapshot().get("recent_errors", [])
            # Keep most recent errors first, max 50 entries.
            updated = [error] + current
            status_update["recent_errors"] = updated[:50]

        if "metrics" in event:
            status_update["metrics"] = event.get("metrics") or {}
        run_status_store.update(**status_update)

    try:
        # Google API clients block, so run the briefing in a worker thread.
        summary = await run_in_threadpool(
            run_once,
            dry_run=dry_run,
            verbose=False,
            progress_cb=progress_cb,
        )
    except AuthFailureError as exc:
        run_status_store.update(state="error", step="auth", detail=str(exc))
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except Exception as exc:
        run_status_store.update(state="error", step="error", detail=str(exc))
        raise

    run_status_store.update(
        state="done",
        step="done",
        detail="Briefing completed",
        summary=summary,
        metrics={
            "messages_total": summary.get("messages_total"),
            "messages_shown": summary.get("messages_shown"),
            "events_total": summary.get("events_total"),
            "events_shown": summary.get("events_shown"),
            "delivered": summary.get("delivered"),
        },
    )
    return {"ok": True, "summary": summary}


@router.get("/run/status")
async def run_status() -> dict:
    return {"ok": True, "status": run_status_store.snapshot()}
