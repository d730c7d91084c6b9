"""CLI commands module."""

from . import config, draft, send

__all__ = ["config", "draft", "send"]
