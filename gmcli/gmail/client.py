"""Gmail API client.

Wraps the Gmail API calls gmcli needs: fetching threads and messages
for reply resolution, and creating, updating and sending drafts and
messages from base64url-encoded raw bytes.
"""

import base64

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError  # noqa: F401 - re-exported for callers

from gmcli.auth.gmail import load_token, save_token


def get_credentials(account_name: str) -> Credentials | None:
    """Get Gmail credentials for API access.

    Returns the cached credentials for the account, refreshing them if
    they are expired and a refresh token is available. Returns None if
    not authenticated or if refresh fails.

    Args:
        account_name: Account name from config.toml.

    Returns:
        Credentials object or None if not authenticated.
    """
    creds = load_token(account_name)
    if not creds:
        return None

    if creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
            save_token(account_name, creds)
        except Exception:
            # Refresh failed - token is no longer valid
            return None

    return creds if creds.valid else None


class GmailClient:
    """Client for Gmail API operations.

    Example:
        creds = get_credentials("personal")
        client = GmailClient(creds)
        thread = client.get_thread("18c2f...")
        client.create_draft(raw, thread_id=thread["id"])
    """

    def __init__(self, credentials: Credentials):
        """Initialize Gmail client with credentials.

        Args:
            credentials: Google OAuth credentials object.
        """
        self._credentials = credentials
        self._service = build("gmail", "v1", credentials=credentials)

    def get_profile(self) -> dict:
        """Get the mailbox profile (emailAddress, messagesTotal, ...)."""
        return self._service.users().getProfile(userId="me").execute()

    def get_thread(self, thread_id: str, format: str = "minimal") -> dict:
        """Get a thread with its messages in stored order.

        Raises:
            HttpError: 404 if no thread has this ID.
        """
        return (
            self._service.users()
            .threads()
            .get(userId="me", id=thread_id, format=format)
            .execute()
        )

    def get_message(self, message_id: str, format: str = "full") -> dict:
        """Get a single message.

        With format="full" the result carries headers and the MIME part
        tree under "payload".

        Raises:
            HttpError: 404 if no message has this ID.
        """
        return (
            self._service.users()
            .messages()
            .get(userId="me", id=message_id, format=format)
            .execute()
        )

    def send_message(self, raw: str, thread_id: str | None = None) -> dict:
        """Send a raw message.

        Args:
            raw: base64url-encoded RFC 2822 message.
            thread_id: Gmail thread the message should join.

        Returns:
            The sent message resource (id, threadId, labelIds).
        """
        return (
            self._service.users()
            .messages()
            .send(userId="me", body=_message_body(raw, thread_id))
            .execute()
        )

    def create_draft(self, raw: str, thread_id: str | None = None) -> dict:
        """Create a draft from a raw message.

        Returns:
            The draft resource ({"id": ..., "message": {...}}).
        """
        return (
            self._service.users()
            .drafts()
            .create(userId="me", body={"message": _message_body(raw, thread_id)})
            .execute()
        )

    def update_draft(self, draft_id: str, raw: str, thread_id: str | None = None) -> dict:
        """Replace the content of an existing draft."""
        return (
            self._service.users()
            .drafts()
            .update(
                userId="me",
                id=draft_id,
                body={"message": _message_body(raw, thread_id)},
            )
            .execute()
        )

    def get_draft(self, draft_id: str, format: str = "full") -> dict:
        """Get a draft. With format="raw" the message carries 'raw'."""
        return (
            self._service.users()
            .drafts()
            .get(userId="me", id=draft_id, format=format)
            .execute()
        )

    def list_drafts(self, max_results: int = 100) -> list[dict]:
        """List drafts, following pagination up to max_results.

        Returns:
            List of {"id": ..., "message": {"id": ..., "threadId": ...}}.
        """
        drafts: list[dict] = []
        page_token = None

        while len(drafts) < max_results:
            params = {
                "userId": "me",
                "maxResults": min(max_results - len(drafts), 500),
            }
            if page_token:
                params["pageToken"] = page_token

            result = self._service.users().drafts().list(**params).execute()
            drafts.extend(result.get("drafts", []))

            page_token = result.get("nextPageToken")
            if not page_token:
                break

        return drafts[:max_results]

    def delete_draft(self, draft_id: str) -> None:
        """Delete a draft permanently."""
        self._service.users().drafts().delete(userId="me", id=draft_id).execute()

    def send_draft(self, draft_id: str) -> dict:
        """Send an existing draft. Returns the sent message resource."""
        return (
            self._service.users()
            .drafts()
            .send(userId="me", body={"id": draft_id})
            .execute()
        )


def _message_body(raw: str, thread_id: str | None) -> dict:
    """Build the message resource for send/draft calls."""
    body = {"raw": raw}
    if thread_id:
        body["threadId"] = thread_id
    return body


def decode_raw(raw: str) -> bytes:
    """Decode a base64url 'raw' field from the Gmail API."""
    return base64.urlsafe_b64decode(raw + "=" * (-len(raw) % 4))
