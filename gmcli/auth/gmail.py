"""Gmail authentication via OAuth 2.0 Installed Application Flow.

The default is the loopback redirect flow: the user's browser opens to
Google's consent page and the authorization code is captured by a local
HTTP server. Manual mode prints the consent URL and asks the user to
paste back the URL they were redirected to, for machines without a
browser.

Tokens are persisted per account to
~/.config/gmcli/credentials/<account>_token.json
"""

import json
import os
from collections.abc import Callable
from urllib.parse import parse_qs, urlparse

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from gmcli.config.paths import ensure_credentials_dir, token_file

# Full mailbox scope: read threads, create/update/send drafts and messages
SCOPES = ["https://mail.google.com/"]

# Environment variable for client secret.
# Using env var is preferred over storing in config.toml for security.
CLIENT_SECRET_ENV = "GMCLI_CLIENT_SECRET"

REDIRECT_URI = "http://localhost"


def load_token(account_name: str) -> Credentials | None:
    """Load an account's credentials from disk.

    Returns None if the token file doesn't exist or is invalid.
    """
    path = token_file(account_name)
    if not path.exists():
        return None

    try:
        return Credentials.from_authorized_user_file(str(path), SCOPES)
    except (ValueError, json.JSONDecodeError):
        # Invalid token file - will re-authenticate
        return None


def save_token(account_name: str, creds: Credentials) -> None:
    """Persist credentials to disk with 600 permissions."""
    ensure_credentials_dir()

    token_data = {
        "token": creds.token,
        "refresh_token": creds.refresh_token,
        "token_uri": creds.token_uri,
        "client_id": creds.client_id,
        "client_secret": creds.client_secret,
        "scopes": creds.scopes,
    }

    path = token_file(account_name)
    path.write_text(json.dumps(token_data, indent=2))
    path.chmod(0o600)


def delete_token(account_name: str) -> bool:
    """Remove an account's cached token. Returns True if one existed."""
    path = token_file(account_name)
    if not path.exists():
        return False
    path.unlink()
    return True


def get_client_secret(account_config: dict) -> str | None:
    """Get client secret from environment variable or config.

    Environment variable takes precedence.
    """
    return os.environ.get(CLIENT_SECRET_ENV) or account_config.get("client_secret")


def _build_client_config(client_id: str, client_secret: str) -> dict:
    """Build the client configuration dict InstalledAppFlow expects.

    This is the structure of the credentials JSON downloaded from Cloud
    Console, constructed from our config values.
    """
    return {
        "installed": {
            "client_id": client_id,
            "client_secret": client_secret,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": [REDIRECT_URI],
        }
    }


def _extract_code(response: str) -> str:
    """Accept either a bare authorization code or the full redirect URL."""
    response = response.strip()
    query = parse_qs(urlparse(response).query)
    if "code" in query:
        return query["code"][0]
    return response


def _success(creds: Credentials) -> dict:
    return {
        "access_token": creds.token,
        "refresh_token": creds.refresh_token,
    }


def authenticate_loopback_flow(
    account_name: str,
    client_id: str,
    client_secret: str,
    *,
    manual: bool = False,
    prompt: Callable[[str], str] | None = None,
) -> dict:
    """Perform OAuth 2.0 authentication for an account.

    If valid cached tokens exist, returns them without prompting.

    Args:
        account_name: Account name, selects the token file.
        client_id: Google Cloud OAuth client ID.
        client_secret: Google Cloud OAuth client secret.
        manual: Print the consent URL and read the redirect URL back
            through prompt instead of running a local server.
        prompt: Called with the consent URL in manual mode; returns the
            pasted redirect URL or code.

    Returns:
        Authentication result dict containing:
        - On success: 'access_token' and 'refresh_token'
        - On failure: 'error' and 'error_description'
    """
    creds = load_token(account_name)

    if creds and creds.valid:
        return _success(creds)

    if creds and creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
            save_token(account_name, creds)
            return _success(creds)
        except Exception:
            # Refresh failed, fall through to re-authenticate
            pass

    try:
        flow = InstalledAppFlow.from_client_config(
            _build_client_config(client_id, client_secret),
            scopes=SCOPES,
            redirect_uri=REDIRECT_URI,
        )

        if manual:
            if prompt is None:
                return {
                    "error": "missing_prompt",
                    "error_description": "Manual authentication needs a prompt callback.",
                }
            auth_url, _ = flow.authorization_url(access_type="offline", prompt="consent")
            flow.fetch_token(code=_extract_code(prompt(auth_url)))
            creds = flow.credentials
        else:
            # Port 0 lets the OS pick a free port for the redirect
            creds = flow.run_local_server(
                port=0,
                access_type="offline",
                prompt="consent",
                success_message="Authentication successful! You can close this window.",
            )

        save_token(account_name, creds)
        return _success(creds)

    except Exception as e:
        return {
            "error": "oauth_flow_failed",
            "error_description": f"OAuth 2.0 flow failed: {str(e)}",
        }
