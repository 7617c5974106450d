"""Durable on-disk archive of outgoing email messages."""

__version__ = "1.0.0"
