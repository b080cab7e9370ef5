"""Fault classification and envelope construction."""

from rest_errors.core.classifier import classify
from rest_errors.core.envelope import ErrorResponse
from rest_errors.core.envelope import build_envelope
from rest_errors.core.redaction import redact

__all__ = [
    "ErrorResponse",
    "build_envelope",
    "classify",
    "redact",
]
