"""Authentication module for Gmail accounts.

Usage:
    from gmcli.auth import authenticate, is_authenticated

    # Perform OAuth flow (interactive)
    result = authenticate("personal", account_config)
"""

from collections.abc import Callable

from gmcli.config.schema import AccountConfig

from .gmail import (
    authenticate_loopback_flow,
    delete_token,
    get_client_secret,
    load_token,
)

__all__ = [
    "authenticate",
    "is_authenticated",
    "logout",
]


def authenticate(
    account_name: str,
    account: AccountConfig,
    *,
    manual: bool = False,
    prompt: Callable[[str], str] | None = None,
) -> dict:
    """Authenticate an account with Google.

    Args:
        account_name: Account name from config.toml.
        account: Account configuration from config.toml.
        manual: Use copy/paste code exchange instead of a local server.
        prompt: Reads the redirect URL back from the user in manual mode.

    Returns:
        Authentication result dict:
        - On success: contains 'access_token'
        - On failure: contains 'error' and 'error_description'
    """
    client_id = account.get("client_id")
    if not client_id:
        return {
            "error": "missing_config",
            "error_description": "Gmail account must have 'client_id' configured.",
        }

    client_secret = get_client_secret(account)
    if not client_secret:
        return {
            "error": "missing_config",
            "error_description": "Gmail client_secret not found. Set GMCLI_CLIENT_SECRET environment variable or add 'client_secret' to config.",
        }

    return authenticate_loopback_flow(
        account_name,
        client_id,
        client_secret,
        manual=manual,
        prompt=prompt,
    )


def is_authenticated(account_name: str) -> bool:
    """Check whether a token is cached for the account.

    Does not refresh; an expired token with a refresh token counts.
    """
    creds = load_token(account_name)
    if creds is None:
        return False
    return creds.valid or bool(creds.refresh_token)


def logout(account_name: str) -> bool:
    """Forget an account's cached token. Returns True if one existed."""
    return delete_token(account_name)
