"""Offline-first field registry for blue carbon projects."""

__version__ = "0.1.0"
