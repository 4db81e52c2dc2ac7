from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest
from fastapi.testclient import TestClient

from backend.app.api import run as run_api
from backend.app.main import app
from backend.app.status import RunStatusStore, run_status_store
from morning_secretary.config import paths
from morning_secretary.errors import AuthFailureError


@pytest.fixture(autouse=True)
def _fresh_status() -> None:
    run_status_store.reset()


def test_run_reports_progress_and_summary(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: Dict[str, Any] = {}

    def fake_run_once(*, dry_run: bool, verbose: bool, progress_cb: Optional[Callable[..., None]]) -> dict:
        calls["dry_run"] = dry_run
        assert progress_cb is not None
        progress_cb("fetch", {"detail": "Fetching mail and events"})
        progress_cb("error", {"detail": "calendar degraded", "error": {"source": "calendar", "message": "boom"}})
        return {
            "messages_total": 4,
            "messages_shown": 2,
            "events_total": 1,
            "events_shown": 1,
            "delivered": False,
        }

    monkeypatch.setattr(run_api, "run_once", fake_run_once)
    client = TestClient(app)

    resp = client.post("/api/run", params={"dry_run": "true"})

    assert resp.status_code == 200
    assert resp.json()["summary"]["messages_shown"] == 2
    assert calls["dry_run"] is True

    status = client.get("/api/run/status").json()["status"]
    assert status["state"] == "done"
    assert status["metrics"]["messages_total"] == 4
    assert status["recent_errors"] == [{"source": "calendar", "message": "boom"}]


def test_auth_failure_maps_to_401(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run_once(**kwargs: Any) -> dict:
        raise AuthFailureError("token expired")

    monkeypatch.setattr(run_api, "run_once", fake_run_once)

    resp = TestClient(app).post("/api/run")

    assert resp.status_code == 401
    assert run_status_store.snapshot()["step"] == "auth"


def test_status_store_ignores_unknown_fields() -> None:
    store = RunStatusStore()
    store.update(state="running", bogus=1)

    snap = store.snapshot()
    assert snap["state"] == "running"
    assert "bogus" not in snap

    store.reset()
    assert store.snapshot()["state"] == "idle"


def test_secrets_status_reflects_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(paths, "SECRETS_DIR", tmp_path)
    monkeypatch.setattr(paths, "CREDENTIALS_PATH", tmp_path / "credentials.json")
    monkeypatch.setattr(paths, "TOKEN_PATH", tmp_path / "google_token.json")
    (tmp_path / "credentials.json").write_text("{}", encoding="utf-8")
    client = TestClient(app)

    status = client.get("/api/secrets/status").json()
    assert status["credentials_present"] is True
    assert status["token_present"] is False

    resp = client.post(
        "/api/secrets/token",
        files={"file": ("token.json", b'{"token": "x"}', "application/json")},
    )
    assert resp.status_code == 200
    assert (tmp_path / "google_token.json").exists()

    bad = client.post("/api/secrets/token", files={"file": ("token.txt", b"x", "text/plain")})
    assert bad.status_code == 400
