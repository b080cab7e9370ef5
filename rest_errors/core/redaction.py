"""Whole-message masking of sensitive fault text."""

from __future__ import annotations

from collections.abc import Iterable
from functools import lru_cache
import re

from rest_errors.core.config import get_error_settings


def _compile(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ValueError(f"Invalid sensitive pattern {pattern!r}: {exc}") from exc


class Redactor:
    """Replace a message entirely when any sensitive pattern occurs in it.

    Patterns are case-sensitive regular expressions checked in order. A match
    anywhere masks the whole message, not just the matched span.
    """

    __slots__ = ("_patterns", "_mask")

    def __init__(self, patterns: Iterable[str], mask: str) -> None:
        self._patterns = tuple(_compile(pattern) for pattern in patterns)
        self._mask = mask

    @property
    def mask(self) -> str:
        return self._mask

    def is_sensitive(self, message: str) -> bool:
        return any(pattern.search(message) for pattern in self._patterns)

    def redact(self, message: str | None) -> str:
        if message is None:
            return ""
        if self.is_sensitive(message):
            return self._mask
        return message


@lru_cache(maxsize=1)
def get_redactor() -> Redactor:
    """Build the process-wide redactor from settings."""
    settings = get_error_settings()
    return Redactor(settings.sensitive_patterns, settings.mask)


def redact(message: str | None) -> str:
    """Mask ``message`` with the configured redactor."""
    return get_redactor().redact(message)
