"""Per-account Gmail client handles.

A ClientRegistry owns the GmailClient of each account it has been asked
for. Clients are built on first access and reused for the lifetime of
the registry, so one CLI invocation authenticates each account once.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from google.oauth2.credentials import Credentials

from gmcli.config import resolve_account_name
from gmcli.config.schema import GmcliConfig
from gmcli.errors import AccountNotFoundError, NotAuthenticatedError

from .client import GmailClient, get_credentials

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountHandle:
    """A connected account: its config name, mailbox address, and client."""

    name: str
    email: str
    client: GmailClient


class ClientRegistry:
    """Builds and caches one AccountHandle per configured account.

    Example:
        registry = ClientRegistry(load_config())
        handle = registry.get("personal")
        handle.client.get_thread("18c2f...")
    """

    def __init__(
        self,
        config: GmcliConfig,
        credentials_loader: Callable[[str], Credentials | None] = get_credentials,
        client_factory: Callable[[Credentials], GmailClient] = GmailClient,
    ):
        """Initialize the registry.

        Args:
            config: Loaded configuration.
            credentials_loader: Returns valid credentials for an account name.
            client_factory: Builds a client from credentials.
        """
        self._config = config
        self._load_credentials = credentials_loader
        self._client_factory = client_factory
        self._handles: dict[str, AccountHandle] = {}

    def get(self, account_name: str | None = None) -> AccountHandle:
        """Get the handle for an account, connecting on first use.

        Args:
            account_name: Account name, or None for the default account.

        Raises:
            AccountNotFoundError: If the account is not configured.
            NotAuthenticatedError: If no valid token is cached for it.
        """
        name = resolve_account_name(self._config, account_name)
        accounts = self._config.get("accounts", {})

        if name is None or name not in accounts:
            raise AccountNotFoundError(
                f"Account '{name}' not found in config"
                if name
                else "No account configured"
            )

        if name in self._handles:
            return self._handles[name]

        creds = self._load_credentials(name)
        if creds is None:
            raise NotAuthenticatedError(
                f"Account '{name}' is not authenticated. "
                f"Run 'gmcli config auth --account {name}'"
            )

        client = self._client_factory(creds)

        # Fall back to asking Gmail when config.toml doesn't list the address
        email = accounts[name].get("email") or client.get_profile().get("emailAddress", "")
        logger.debug("Connected Gmail client for account %s (%s)", name, email)

        handle = AccountHandle(name=name, email=email, client=client)
        self._handles[name] = handle
        return handle
