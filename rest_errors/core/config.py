"""Error-handling configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_CORRELATION_HEADER = "Correlation-Id"
DEFAULT_MASK = "[MASKED]"
DEFAULT_SENSITIVE_PATTERNS = ("password", "secret", "token", "connection string")

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def _get_patterns_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    patterns = tuple(part.strip() for part in raw.split(",") if part.strip())
    if not patterns:
        raise ValueError(f"{name} must list at least one pattern")
    return patterns


@dataclass(frozen=True)
class ErrorHandlingSettings:
    """Runtime settings for the error envelope layer."""

    correlation_header: str = DEFAULT_CORRELATION_HEADER
    mask: str = DEFAULT_MASK
    sensitive_patterns: tuple[str, ...] = DEFAULT_SENSITIVE_PATTERNS
    log_client_errors: bool = True

    def safe_for_logging(self) -> dict[str, str | bool | int]:
        """Return settings safe for logs."""
        # The patterns themselves name what is sensitive, only their count is logged.
        return {
            "correlation_header": self.correlation_header,
            "mask": self.mask,
            "sensitive_pattern_count": len(self.sensitive_patterns),
            "log_client_errors": self.log_client_errors,
        }


@lru_cache(maxsize=1)
def get_error_settings() -> ErrorHandlingSettings:
    """Load error-handling settings from the environment."""
    return ErrorHandlingSettings(
        correlation_header=os.getenv("REST_ERRORS_CORRELATION_HEADER", DEFAULT_CORRELATION_HEADER),
        mask=os.getenv("REST_ERRORS_MASK", DEFAULT_MASK),
        sensitive_patterns=_get_patterns_env("REST_ERRORS_SENSITIVE_PATTERNS", DEFAULT_SENSITIVE_PATTERNS),
        log_client_errors=_get_bool_env("REST_ERRORS_LOG_CLIENT_ERRORS", True),
    )
