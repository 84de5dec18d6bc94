"""Scheduled webhook dispatcher for pending messages."""

__version__ = "0.1.0"
