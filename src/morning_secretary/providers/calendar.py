from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Protocol

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build


class CalendarProvider(Protocol):
    def list_events(
        self, calendar_id: str, time_min: datetime, time_max: datetime
    ) -> List[Dict[str, Any]]: ...


class CalendarClient:
    def __init__(self, credentials: Credentials):
        self._creds = credentials
        self._service = None

    def connect(self) -> None:
        """Create the Calendar API service client."""
        self._service = build("calendar", "v3", credentials=self._creds, cache_discovery=False)

    @property
    def service(self):
        if self._service is None:
            raise RuntimeError("CalendarClient is not connected. Call connect() first.")
        return self._service

    def list_events(
        self, calendar_id: str, time_min: datetime, time_max: datetime
    ) -> List[Dict[str, Any]]:
        """
        List single (expanded recurring) events overlapping [time_min, time_max),
        ordered by start time. Both bounds must be timezone-aware.
        """
        items: List[Dict[str, Any]] = []
        page_token = None
        while True:
            resp = (
                self.service.events()
                .list(
                    calendarId=calendar_id,
                    timeMin=time_min.isoformat(),
                    timeMax=time_max.isoformat(),
                    singleEvents=True,
                    orderBy="startTime",
                    pageToken=page_token,
                )
                .execute()
            )
            items.extend(resp.get("items", []))
            page_token = resp.get("nextPageToken")
            if not page_token:
                return items
