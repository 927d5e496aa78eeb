"""Muzik backend: cached, rate-limited YouTube search proxy."""

__version__ = "1.0.0"
