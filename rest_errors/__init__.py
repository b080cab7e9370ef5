"""Canonical error envelopes for FastAPI services."""

__version__ = "0.1.0"
