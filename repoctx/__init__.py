"""Persistent, file-backed context cards for a code repository."""

__version__ = "0.1.0"
