"""Exception hierarchy for gmcli.

Errors from the Gmail API itself (googleapiclient.errors.HttpError) are
not wrapped: they propagate to the CLI unchanged.
"""


class GmcliError(Exception):
    """Base class for gmcli errors."""

    pass


class AttachmentError(GmcliError):
    """An attachment file could not be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read attachment '{path}': {reason}")
        self.path = path


class AccountNotFoundError(GmcliError):
    """Account name not present in config.toml."""

    pass


class NotAuthenticatedError(GmcliError):
    """No valid cached credentials for the account."""

    pass


class DraftError(GmcliError):
    """Draft payload is missing its message."""

    pass
