"""Command-line interface for gmcli."""
