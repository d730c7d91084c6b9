"""Where gmcli keeps its files.

    $XDG_CONFIG_HOME/gmcli/config.toml                 settings
    $XDG_CONFIG_HOME/gmcli/credentials/<name>_token.json  OAuth tokens (0600)

XDG_CONFIG_HOME defaults to ~/.config. GMCLI_CONFIG_DIR replaces the
whole directory, e.g. to keep a separate profile for testing.
"""

import os
from pathlib import Path

CONFIG_DIR_ENV = "GMCLI_CONFIG_DIR"


def _config_dir() -> Path:
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / "gmcli"


CONFIG_DIR = _config_dir()
CONFIG_FILE = CONFIG_DIR / "config.toml"
CREDENTIALS_DIR = CONFIG_DIR / "credentials"


def token_file(account_name: str) -> Path:
    """Path of the cached OAuth token for an account."""
    return CREDENTIALS_DIR / f"{account_name}_token.json"


def ensure_config_dir() -> Path:
    """Create the config directory if needed and return it."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR


def ensure_credentials_dir() -> Path:
    """Create the credentials directory, readable by the owner only."""
    CREDENTIALS_DIR.mkdir(parents=True, exist_ok=True)
    CREDENTIALS_DIR.chmod(0o700)
    return CREDENTIALS_DIR
