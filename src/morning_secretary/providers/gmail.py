from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build


class MailProvider(Protocol):
    def list_messages(self, query: str = "", max_results: int = 10) -> List[str]: ...

    def get_message(
        self,
        message_id: str,
        fmt: str = "full",
        metadata_headers: Optional[Sequence[str]] = None,
    ) -> Dict[str, Any]: ...


class GmailClient:
    def __init__(self, credentials: Credentials, user_id: str = "me"):
        self._creds = credentials
        # Gmail userId, "me" refers to the authenticated user.
        self._user_id = user_id
        self._service = None

    def connect(self) -> None:
        """Create the Gmail API service client."""
        self._service = build("gmail", "v1", credentials=self._creds, cache_discovery=False)

    @property
    def service(self):
        if self._service is None:
            raise RuntimeError("GmailClient is not connected. Call connect() first.")
        return self._service

    def list_messages(self, query: str = "", max_results: int = 10) -> List[str]:
        """
        List message IDs matching a Gmail search query.
        Example query: 'is:unread -category:promotions'
        """
        resp = (
            self.service.users()
            .messages()
            .list(userId=self._user_id, q=query, maxResults=max_results)
            .execute()
        )
        msgs = resp.get("messages", [])
        return [m["id"] for m in msgs]

    def get_message(
        self,
        message_id: str,
        fmt: str = "full",
        metadata_headers: Optional[Sequence[str]] = None,
    ) -> Dict[str, Any]:
        """
        Fetch a message resource.
        fmt: 'full' | 'metadata' | 'minimal' | 'raw'
        """
        kwargs: Dict[str, Any] = {"userId": self._user_id, "id": message_id, "format": fmt}
        if metadata_headers and fmt == "metadata":
            kwargs["metadataHeaders"] = list(metadata_headers)
        return self.service.users().messages().get(**kwargs).execute()
