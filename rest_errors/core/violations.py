"""Field-level violation rendering for validation faults."""

from __future__ import annotations

from collections.abc import Iterable

from fastapi import status

from rest_errors.core.envelope import Clock
from rest_errors.core.envelope import build_envelope
from rest_errors.core.envelope import utc_now
from rest_errors.core.faults import FieldViolation
from rest_errors.schemas.error import ErrorEnvelope

NULL_VALUE = "null"


def render_violation(violation: FieldViolation) -> str:
    """Return the sentence describing one rejected field."""
    rejected = NULL_VALUE if violation.rejected_value is None else violation.rejected_value
    return (
        f"Invalid value {rejected} on field {violation.field} "
        f"for object {violation.object_name}: {violation.message}."
    )


def violation_details(
    violations: Iterable[FieldViolation],
    correlation_id: str | None,
    *,
    clock: Clock = utc_now,
) -> list[ErrorEnvelope]:
    """Build one nested 400 envelope per violation, keeping input order."""
    return [
        build_envelope(
            render_violation(violation),
            status.HTTP_400_BAD_REQUEST,
            correlation_id,
            clock=clock,
        )
        for violation in violations
    ]
