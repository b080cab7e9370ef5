"""Fault classification: status, message and details for every variant."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
from types import MappingProxyType

from fastapi import status

from rest_errors.core.envelope import Clock
from rest_errors.core.envelope import ErrorResponse
from rest_errors.core.envelope import build_envelope
from rest_errors.core.envelope import utc_now
from rest_errors.core.faults import AuthenticationFailed
from rest_errors.core.faults import AuthorizationDenied
from rest_errors.core.faults import ConstraintViolated
from rest_errors.core.faults import DataIntegrityViolated
from rest_errors.core.faults import EntityNotFound
from rest_errors.core.faults import Fault
from rest_errors.core.faults import FieldViolation
from rest_errors.core.faults import MalformedBody
from rest_errors.core.faults import MissingParameter
from rest_errors.core.faults import NoRouteFound
from rest_errors.core.faults import RequestRejected
from rest_errors.core.faults import TypeMismatch
from rest_errors.core.faults import Uncategorized
from rest_errors.core.faults import UnsupportedMediaType
from rest_errors.core.faults import UnwritableResponse
from rest_errors.core.faults import ValidationFailed
from rest_errors.core.faults import ValidationRejected
from rest_errors.core.redaction import redact
from rest_errors.core.violations import NULL_VALUE
from rest_errors.core.violations import violation_details

logger = logging.getLogger(__name__)

VALIDATION_ERROR_MESSAGE = "Validation error"
FALLBACK_MESSAGE = "Internal server error"


@dataclass(frozen=True)
class Classification:
    """Status, top-level message and field violations for one fault."""

    status_code: int
    message: str
    violations: tuple[FieldViolation, ...] = ()


def _missing_parameter(fault: MissingParameter) -> Classification:
    return Classification(status.HTTP_400_BAD_REQUEST, f"{fault.name} parameter is missing")


def _unsupported_media_type(fault: UnsupportedMediaType) -> Classification:
    supported = ", ".join(fault.supported)
    return Classification(
        status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
        f"{fault.content_type} media type is not supported. Supported media types are {supported}",
    )


def _validation_failed(fault: ValidationFailed) -> Classification:
    return Classification(status.HTTP_400_BAD_REQUEST, VALIDATION_ERROR_MESSAGE, fault.violations)


def _constraint_violated(fault: ConstraintViolated) -> Classification:
    return Classification(status.HTTP_400_BAD_REQUEST, redact(fault.message), fault.violations)


def _entity_not_found(fault: EntityNotFound) -> Classification:
    return Classification(status.HTTP_404_NOT_FOUND, redact(fault.message))


def _malformed_body(fault: MalformedBody) -> Classification:
    return Classification(status.HTTP_400_BAD_REQUEST, f"Malformed JSON request: {redact(fault.message)}")


def _unwritable_response(fault: UnwritableResponse) -> Classification:
    return Classification(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        f"Error writing JSON output: {redact(fault.message)}",
    )


def _no_route_found(fault: NoRouteFound) -> Classification:
    # Reported as 400 rather than 404, matching the established contract.
    return Classification(
        status.HTTP_400_BAD_REQUEST,
        f"Could not find the {fault.method} method for URL {fault.url}: {redact(fault.message)}",
    )


def _data_integrity_violated(fault: DataIntegrityViolated) -> Classification:
    if fault.cause_is_constraint:
        return Classification(status.HTTP_409_CONFLICT, f"Database error: {redact(fault.message)}")
    return Classification(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Server error: {redact(fault.message)}")


def _type_mismatch(fault: TypeMismatch) -> Classification:
    value = NULL_VALUE if fault.value is None else fault.value
    return Classification(
        status.HTTP_400_BAD_REQUEST,
        f"The parameter '{fault.name}' of value '{value}' could not be converted "
        f"to type '{fault.target_type_name}': {redact(fault.message)}",
    )


def _authentication_failed(fault: AuthenticationFailed) -> Classification:
    return Classification(status.HTTP_401_UNAUTHORIZED, redact(fault.message))


def _authorization_denied(fault: AuthorizationDenied) -> Classification:
    return Classification(status.HTTP_403_FORBIDDEN, redact(fault.message))


def _validation_rejected(fault: ValidationRejected) -> Classification:
    return Classification(status.HTTP_400_BAD_REQUEST, redact(fault.message))


def _request_rejected(fault: RequestRejected) -> Classification:
    if not 400 <= fault.status_code <= 599:
        raise ValueError(f"{fault.status_code} is not an error status")
    return Classification(fault.status_code, redact(fault.message))


def _uncategorized(fault: Uncategorized) -> Classification:
    return Classification(status.HTTP_500_INTERNAL_SERVER_ERROR, redact(fault.message))


DISPATCH_TABLE: MappingProxyType[type[Fault], Callable[..., Classification]] = MappingProxyType(
    {
        MissingParameter: _missing_parameter,
        UnsupportedMediaType: _unsupported_media_type,
        ValidationFailed: _validation_failed,
        ConstraintViolated: _constraint_violated,
        EntityNotFound: _entity_not_found,
        MalformedBody: _malformed_body,
        UnwritableResponse: _unwritable_response,
        NoRouteFound: _no_route_found,
        DataIntegrityViolated: _data_integrity_violated,
        TypeMismatch: _type_mismatch,
        AuthenticationFailed: _authentication_failed,
        AuthorizationDenied: _authorization_denied,
        ValidationRejected: _validation_rejected,
        RequestRejected: _request_rejected,
        Uncategorized: _uncategorized,
    }
)


def classify_fault(fault: Fault) -> Classification:
    """Look up the rule for ``fault`` by variant, walking subclasses to their base."""
    for variant in type(fault).__mro__:
        rule = DISPATCH_TABLE.get(variant)
        if rule is not None:
            return rule(fault)
    raise TypeError(f"No classification rule for {type(fault).__name__}")


def classify(
    fault: Fault,
    correlation_id: str | None = None,
    *,
    clock: Clock = utc_now,
) -> ErrorResponse:
    """Convert one fault into the envelope and status sent to the client.

    Never raises: a fault that cannot be classified or rendered is reported
    through the uncategorized 500 path instead.
    """
    try:
        classification = classify_fault(fault)
        details = violation_details(classification.violations, correlation_id, clock=clock)
        envelope = build_envelope(
            classification.message,
            classification.status_code,
            correlation_id,
            details,
            clock=clock,
        )
        return ErrorResponse(envelope=envelope, status_code=classification.status_code)
    except Exception:
        logger.exception("Failed to classify fault kind=%s correlation_id=%s", type(fault).__name__, correlation_id)
        return _fallback_response(correlation_id)


def _fallback_response(correlation_id: str | None) -> ErrorResponse:
    envelope = build_envelope(FALLBACK_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR, correlation_id)
    return ErrorResponse(envelope=envelope, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
