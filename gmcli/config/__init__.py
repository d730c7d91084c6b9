"""gmcli settings stored in config.toml.

Usage:
    from gmcli.config import load_config, resolve_account_name

    config = load_config()
    name = resolve_account_name(config, None)  # defaults.account or first account
"""

import tomllib

import tomli_w

from .paths import CONFIG_FILE, ensure_config_dir
from .schema import AccountConfig, DefaultsConfig, GmcliConfig
from .template import CONFIG_TEMPLATE

__all__ = [
    "load_config",
    "save_config",
    "init_config",
    "get_defaults",
    "get_account",
    "resolve_account_name",
    "set_config_value",
    "CONFIG_FILE",
]

# Read once per process; save_config keeps it current
_cached_config: GmcliConfig | None = None

_BOOL_FIELDS = {"include_quote"}
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def load_config(*, force_reload: bool = False) -> GmcliConfig:
    """Return the parsed config.toml, or {} when there is none.

    Args:
        force_reload: Re-read the file even if it was already loaded.
    """
    global _cached_config

    if _cached_config is None or force_reload:
        if CONFIG_FILE.exists():
            with open(CONFIG_FILE, "rb") as f:
                _cached_config = tomllib.load(f)
        else:
            _cached_config = {}

    return _cached_config


def save_config(config: GmcliConfig) -> None:
    """Write config.toml and replace the cached copy."""
    global _cached_config

    ensure_config_dir()
    with open(CONFIG_FILE, "wb") as f:
        tomli_w.dump(config, f)

    _cached_config = config


def init_config(*, overwrite: bool = False) -> bool:
    """Write the commented template to config.toml.

    Returns:
        False if a config already exists and overwrite is not set.
    """
    ensure_config_dir()

    if CONFIG_FILE.exists() and not overwrite:
        return False

    CONFIG_FILE.write_text(CONFIG_TEMPLATE)
    return True


def get_defaults(config: GmcliConfig) -> DefaultsConfig:
    return config.get("defaults", {})


def resolve_account_name(config: GmcliConfig, name: str | None = None) -> str | None:
    """Pick the account name to use.

    An explicit name wins, then defaults.account, then the first
    configured account.

    Returns:
        The account name, or None if no accounts are configured.
    """
    if name is not None:
        return name

    default = get_defaults(config).get("account")
    if default:
        return default

    return next(iter(config.get("accounts", {})), None)


def get_account(config: GmcliConfig, name: str | None = None) -> AccountConfig | None:
    """Look up an account table, resolving name as resolve_account_name does."""
    resolved = resolve_account_name(config, name)
    if resolved is None:
        return None

    return config.get("accounts", {}).get(resolved)


def set_config_value(key: str, value: str) -> None:
    """Set one value by dotted key and save.

    Missing tables along the way are created.

    Examples:
        set_config_value("defaults.include_quote", "false")
        set_config_value("accounts.personal.email", "me@gmail.com")

    Raises:
        ValueError: If a boolean field gets something other than true/false,
            or a key along the way already holds a plain value.
    """
    config = load_config(force_reload=True)

    *tables, field = key.split(".")
    current: dict = config
    for depth, table in enumerate(tables, 1):
        current = current.setdefault(table, {})
        if not isinstance(current, dict):
            raise ValueError(f"{'.'.join(tables[:depth])} is not a table")

    current[field] = _convert_value(field, value)
    save_config(config)


def _convert_value(key: str, value: str) -> str | bool:
    if key not in _BOOL_FIELDS:
        return value

    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{key} must be true or false, got '{value}'")
