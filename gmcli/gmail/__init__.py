"""Gmail API transport and per-account client registry."""

from .client import GmailClient, HttpError, get_credentials
from .registry import AccountHandle, ClientRegistry

__all__ = [
    "AccountHandle",
    "ClientRegistry",
    "GmailClient",
    "HttpError",
    "get_credentials",
]
