"""Request guards that raise faults the error layer knows how to render."""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Request

from rest_errors.core.errors import UnsupportedMediaTypeError

DEFAULT_MEDIA_TYPE = "application/octet-stream"


def _media_type(raw: str | None) -> str:
    if not raw:
        return DEFAULT_MEDIA_TYPE
    return raw.split(";", 1)[0].strip().lower()


def require_media_type(*supported: str) -> Callable[[Request], None]:
    """Build a dependency rejecting requests whose Content-Type is not listed."""
    if not supported:
        raise ValueError("at least one supported media type is required")
    accepted = frozenset(_media_type(media_type) for media_type in supported)

    def check_media_type(request: Request) -> None:
        media_type = _media_type(request.headers.get("content-type"))
        if media_type not in accepted:
            raise UnsupportedMediaTypeError(media_type, supported)

    return check_media_type
