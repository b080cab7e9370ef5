"""Envelope construction and the (envelope, status) response pair."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from datetime import timezone

from fastapi.responses import JSONResponse

from rest_errors.schemas.error import ErrorEnvelope
from rest_errors.schemas.error import ErrorProperties

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as ``yyyy-MM-ddTHH:mm:ss.SSSZ`` in UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return f"{moment:%Y-%m-%dT%H:%M:%S}.{moment.microsecond // 1000:03d}Z"


def build_envelope(
    message: str,
    status_code: int,
    correlation_id: str | None = None,
    details: Sequence[ErrorEnvelope] | None = None,
    *,
    clock: Clock = utc_now,
) -> ErrorEnvelope:
    """Assemble one envelope, sampling the clock on every call."""
    properties = ErrorProperties(timestamp=format_timestamp(clock()), correlation_id=correlation_id)
    return ErrorEnvelope(
        code=str(int(status_code)),
        message=message,
        properties=properties,
        details=tuple(details) if details else None,
    )


@dataclass(frozen=True)
class ErrorResponse:
    """Envelope paired with the HTTP status it is sent with."""

    envelope: ErrorEnvelope
    status_code: int

    def to_json_response(self, headers: Mapping[str, str] | None = None) -> JSONResponse:
        return JSONResponse(
            status_code=self.status_code,
            content=self.envelope.to_wire(),
            headers=dict(headers) if headers else None,
        )
