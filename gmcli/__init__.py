"""gmcli - Gmail command-line client with Gmail-style reply threading."""

__version__ = "0.1.0"
