"""MiniThings: markdown-file task manager with a JSON logbook and a local HTTP API."""

__version__ = "0.1.0"
