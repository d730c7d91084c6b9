"""Configuration schema definitions.

Uses TypedDict for type safety without runtime overhead.
These types match the structure of config.toml.
"""

from typing import TypedDict


class DefaultsConfig(TypedDict, total=False):
    """Default settings applied to all operations.

    Attributes:
        account: Account name used when --account is not given.
        include_quote: Quote the original message in replies.
    """

    account: str
    include_quote: bool


class AccountConfig(TypedDict, total=False):
    """Single Gmail account configuration.

    Attributes:
        email: Address of the mailbox, used as From and for reply-all filtering.
        client_id: Google Cloud OAuth client ID.
        client_secret: Optional client secret (prefer env var).
    """

    email: str
    client_id: str
    client_secret: str


class GmcliConfig(TypedDict, total=False):
    """Root configuration structure.

    Attributes:
        defaults: Default settings for all operations.
        accounts: Dict mapping account names to their configurations.
    """

    defaults: DefaultsConfig
    accounts: dict[str, AccountConfig]
