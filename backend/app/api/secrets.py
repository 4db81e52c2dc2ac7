from __future__ import annotations

from fastapi import APIRouter, File, HTTPException, UploadFile, Request
from fastapi.responses import HTMLResponse
from google_auth_oauthlib.flow import InstalledAppFlow

from morning_secretary.config import paths
from morning_secretary.providers.auth import SCOPES
from backend.app.status import run_status_store

router = APIRouter()
_oauth_flows: dict[str, InstalledAppFlow] = {}


def _write_upload(file: UploadFile, target_name: str) -> dict:
    if not file.filename or not file.filename.endswith(".json"):
        raise HTTPException(status_code=400, detail="Please upload a JSON file.")

    content = file.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty upload.")

    paths.SECRETS_DIR.mkdir(parents=True, exist_ok=True)
    target = paths.SECRETS_DIR / target_name
    target.write_bytes(content)
    return {"ok": True, "path": str(target)}


def _flow(request: Request, state: str | None = None) -> InstalledAppFlow:
    if not paths.CREDENTIALS_PATH.exists():
        raise HTTPException(
            status_code=400,
            detail=f"Missing Google OAuth credentials at {paths.CREDENTIALS_PATH}.",
        )
    flow = InstalledAppFlow.from_client_secrets_file(
        str(paths.CREDENTIALS_PATH),
        SCOPES,
        state=state,
    )
    # Base URL is used to build the OAuth callback URL dynamically.
    base_url = str(request.base_url).rstrip("/")
    flow.redirect_uri = f"{base_url}/api/secrets/oauth/callback"
    return flow


@router.get("/secrets/status")
def secrets_status() -> dict:
    return {
        "ok": True,
        "secrets_dir": str(paths.SECRETS_DIR),
        "credentials_present": paths.CREDENTIALS_PATH.exists(),
        "token_present": paths.TOKEN_PATH.exists(),
    }


@router.post("/secrets/credentials")
def upload_credentials(file: UploadFile = File(...)) -> dict:
    return _write_upload(file, paths.CREDENTIALS_PATH.name)


@router.post("/secrets/token")
def upload_token(file: UploadFile = File(...)) -> dict:
    return _write_upload(file, paths.TOKEN_PATH.name)


@router.post("/secrets/oauth")
def start_oauth(request: Request) -> dict:
    flow = _flow(request)
    auth_url, state = flow.authorization_url(
        access_type="offline",
        include_granted_scopes="true",
        prompt="consent",
    )
    # Store flow by state so callback can resume securely.
    _oauth_flows[state] = flow
    run_status_store.update(
        state="running",
        step="oauth",
        detail="Waiting for Google login",
    )
    return {"ok": True, "auth_url": auth_url}


@router.get("/secrets/oauth/callback")
def oauth_callback(request: Request, state: str, code: str) -> HTMLResponse:
    flow = _oauth_flows.pop(state, None) or _flow(request, state=state)

    try:
        flow.fetch_token(authorization_response=str(request.url))
    except Exception as exc:
        run_status_store.update(state="error", step="oauth", detail=str(exc))
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    paths.TOKEN_PATH.parent.mkdir(parents=True, exist_ok=True)
    paths.TOKEN_PATH.write_text(flow.credentials.to_json(), encoding="utf-8")

    run_status_store.update(state="done", step="oauth", detail="Google OAuth completed")
    return HTMLResponse(
        "<h2>Authorization complete</h2><p>You can close this window.</p>"
    )
