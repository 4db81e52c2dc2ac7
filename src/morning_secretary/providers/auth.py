from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from morning_secretary.errors import REAUTH_HINT, AuthFailureError

logger = logging.getLogger(__name__)

# Readonly is enough: the briefing never modifies mail or calendars.
SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/calendar.readonly",
]


@dataclass(frozen=True)
class AuthConfig:
    # Path to OAuth client credentials downloaded from Google Cloud Console.
    credentials_path: Path
    # Token cache written by the authorization flow.
    token_path: Path
    scopes: Sequence[str] = tuple(SCOPES)


class AuthSession:
    """
    Owns the Google credential lifecycle for one run.

    Refreshing is explicit: ``ensure_valid()`` returns the credentials and whether
    they were refreshed, and the caller decides to persist them with ``save()``.
    """

    def __init__(self, cfg: AuthConfig):
        self._cfg = cfg
        self._creds: Optional[Credentials] = None

    @property
    def config(self) -> AuthConfig:
        return self._cfg

    def load(self) -> Credentials:
        """Load cached credentials from the token file."""
        if not self._cfg.token_path.exists():
            raise AuthFailureError(f"No token found at {self._cfg.token_path}. {REAUTH_HINT}")
        try:
            creds = Credentials.from_authorized_user_file(
                str(self._cfg.token_path), list(self._cfg.scopes)
            )
        except ValueError as exc:
            raise AuthFailureError(f"Invalid token file {self._cfg.token_path}: {exc}. {REAUTH_HINT}") from exc
        self._creds = creds
        return creds

    def refresh(self) -> Credentials:
        """Refresh the access token and return the updated credentials (not persisted)."""
        creds = self._creds or self.load()
        if not creds.refresh_token:
            raise AuthFailureError(f"Token cannot be refreshed (no refresh token). {REAUTH_HINT}")
        try:
            creds.refresh(Request())
        except RefreshError as exc:
            raise AuthFailureError(f"Token refresh failed: {exc}. {REAUTH_HINT}") from exc
        logger.info("Refreshed Google access token")
        return creds

    def ensure_valid(self) -> tuple[Credentials, bool]:
        """Return usable credentials and True when they had to be refreshed."""
        creds = self._creds or self.load()
        if creds.valid:
            return creds, False
        if creds.expired and creds.refresh_token:
            return self.refresh(), True
        raise AuthFailureError(f"Stored credentials are not valid. {REAUTH_HINT}")

    def save(self, creds: Credentials) -> None:
        self._cfg.token_path.parent.mkdir(parents=True, exist_ok=True)
        self._cfg.token_path.write_text(creds.to_json(), encoding="utf-8")
        self._creds = creds

    def authorize_interactive(self, port: int = 0) -> Credentials:
        """Run the installed-app OAuth flow in a local browser and return new credentials."""
        if not self._cfg.credentials_path.exists():
            raise AuthFailureError(
                f"Missing Google OAuth client credentials at {self._cfg.credentials_path}. "
                "Download them from Google Cloud Console (Desktop app)."
            )
        flow = InstalledAppFlow.from_client_secrets_file(
            str(self._cfg.credentials_path),
            list(self._cfg.scopes),
        )
        creds = flow.run_local_server(port=port, access_type="offline", prompt="consent")
        self._creds = creds
        return creds
