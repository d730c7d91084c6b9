"""Shared fixtures: Gmail API message payloads and a pinned local timezone."""

import base64
import time

import pytest


def _b64url(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


def build_message(
    message_id: str = "msg1",
    thread_id: str = "thread1",
    headers: dict[str, str] | None = None,
    plain: str | None = "Original body",
    html: str | None = None,
) -> dict:
    """Build a Gmail API message resource as returned with format="full"."""
    header_list = [
        {"name": name, "value": value} for name, value in (headers or {}).items()
    ]

    parts = []
    if plain is not None:
        parts.append(
            {
                "mimeType": "text/plain",
                "headers": [{"name": "Content-Type", "value": 'text/plain; charset="UTF-8"'}],
                "body": {"size": len(plain), "data": _b64url(plain)},
            }
        )
    if html is not None:
        parts.append(
            {
                "mimeType": "text/html",
                "headers": [{"name": "Content-Type", "value": 'text/html; charset="UTF-8"'}],
                "body": {"size": len(html), "data": _b64url(html)},
            }
        )

    return {
        "id": message_id,
        "threadId": thread_id,
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": header_list,
            "body": {"size": 0},
            "parts": parts,
        },
    }


@pytest.fixture
def make_message():
    """Factory for Gmail API message resources."""
    return build_message


@pytest.fixture
def b64url():
    """Encode text as base64url, like Gmail body data."""
    return _b64url


@pytest.fixture
def utc_timezone(monkeypatch):
    """Run the test with the local timezone set to UTC."""
    monkeypatch.setenv("TZ", "UTC")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
