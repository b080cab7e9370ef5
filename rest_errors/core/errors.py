"""Exception-to-fault translation and FastAPI handler registration."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from http import HTTPStatus
import logging
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.exceptions import ResponseValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import DataError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.exc import NoResultFound
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from rest_errors.core.classifier import classify
from rest_errors.core.config import get_error_settings
from rest_errors.core.envelope import ErrorResponse
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
from rest_errors.core.faults import violations_tuple
from rest_errors.core.redaction import get_redactor

logger = logging.getLogger(__name__)

PARAMETER_LOCATIONS = frozenset({"query", "path", "header", "cookie"})
LOCATION_PREFIXES = PARAMETER_LOCATIONS | {"body", "response"}

# pydantic error types raised when a raw parameter cannot be converted.
CONVERSION_TARGETS: Mapping[str, str] = {
    "int_parsing": "int",
    "int_from_float": "int",
    "float_parsing": "float",
    "bool_parsing": "bool",
    "decimal_parsing": "Decimal",
    "uuid_parsing": "UUID",
    "date_parsing": "date",
    "date_from_datetime_parsing": "date",
    "datetime_parsing": "datetime",
    "datetime_from_date_parsing": "datetime",
    "time_parsing": "time",
    "time_delta_parsing": "timedelta",
    "enum": "Enum",
}

MISSING_BODY_MESSAGE = "Required request body is missing"


class APIError(Exception):
    """Base application exception reported through the error envelope."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_fault(self) -> Fault:
        return Uncategorized(self.message)


class EntityNotFoundError(APIError):
    """Raised when a looked-up resource does not exist."""

    def __init__(self, *, message: str = "Resource not found") -> None:
        super().__init__(message)

    @classmethod
    def for_entity(cls, entity: str | type, **search_params: Any) -> EntityNotFoundError:
        """Describe the missing entity and the parameters it was searched by."""
        name = entity if isinstance(entity, str) else entity.__name__
        params = ", ".join(f"{key}={value}" for key, value in search_params.items())
        return cls(message=f"{name[:1].upper()}{name[1:]} was not found for parameters {{{params}}}")

    def to_fault(self) -> Fault:
        return EntityNotFound(self.message)


class ConstraintViolationError(APIError):
    """Raised by service code after validating an object by hand."""

    def __init__(self, message: str, violations: Sequence[FieldViolation] | None = None) -> None:
        super().__init__(message)
        self.violations = violations_tuple(violations)

    def to_fault(self) -> Fault:
        return ConstraintViolated(self.message, self.violations)


class ValidationRejectedError(APIError):
    """Raised for validation failures that have no field breakdown."""

    def to_fault(self) -> Fault:
        return ValidationRejected(self.message)


class UnsupportedMediaTypeError(APIError):
    """Raised when a request body arrives in a media type the endpoint does not consume."""

    def __init__(self, content_type: str, supported: Sequence[str]) -> None:
        super().__init__(f"Content-Type '{content_type}' is not supported")
        self.content_type = content_type
        self.supported = tuple(supported)

    def to_fault(self) -> Fault:
        return UnsupportedMediaType(self.content_type, self.supported)


class AuthenticationFailedError(APIError):
    """Raised when a request carries no valid credentials."""

    def __init__(self, message: str = "Full authentication is required to access this resource") -> None:
        super().__init__(message)

    def to_fault(self) -> Fault:
        return AuthenticationFailed(self.message)


class AuthorizationDeniedError(APIError):
    """Raised when an authenticated caller lacks permission."""

    def __init__(self, message: str = "Access is denied") -> None:
        super().__init__(message)

    def to_fault(self) -> Fault:
        return AuthorizationDenied(self.message)


def _format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)

    filtered = [str(part) for part in location if part not in LOCATION_PREFIXES]
    if filtered:
        return ".".join(filtered)

    if not location:
        return "request"

    return str(location[0])


def _stringify(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _lower_camel(name: str) -> str:
    return f"{name[:1].lower()}{name[1:]}"


def _body_object_name(request: Request) -> str:
    route = request.scope.get("route")
    body_field = getattr(route, "body_field", None)
    field_info = getattr(body_field, "field_info", None)
    annotation = getattr(field_info, "annotation", None)
    if isinstance(annotation, type):
        return _lower_camel(annotation.__name__)
    name = getattr(body_field, "name", None)
    return str(name) if name else "request"


def _violation_from_issue(issue: Mapping[str, Any], object_name: str) -> FieldViolation:
    rejected = None if issue.get("type") == "missing" else _stringify(issue.get("input"))
    return FieldViolation(
        object_name=object_name,
        field=_format_location(issue.get("loc", ())),
        rejected_value=rejected,
        message=str(issue.get("msg", "Invalid value")),
    )


def _issue_location(issue: Mapping[str, Any]) -> tuple[Any, ...]:
    location = issue.get("loc", ())
    return tuple(location) if isinstance(location, (tuple, list)) else (location,)


def _location_kind(issue: Mapping[str, Any]) -> str:
    location = _issue_location(issue)
    return str(location[0]) if location else "request"


def _parameter_name(issue: Mapping[str, Any]) -> str:
    location = _issue_location(issue)
    return ".".join(str(part) for part in location[1:]) or _location_kind(issue)


def _request_validation_fault(exc: RequestValidationError, request: Request) -> Fault:
    issues = list(exc.errors())
    parameter_issues = [issue for issue in issues if _location_kind(issue) in PARAMETER_LOCATIONS]

    # Parameters are bound before the body, so their failures win.
    for issue in parameter_issues:
        if issue.get("type") == "missing":
            return MissingParameter(_parameter_name(issue))

    for issue in parameter_issues:
        target = CONVERSION_TARGETS.get(str(issue.get("type")))
        if target is not None:
            return TypeMismatch(
                name=_parameter_name(issue),
                value=_stringify(issue.get("input")),
                target_type_name=target,
                message=str(issue.get("msg", "")),
            )

    for issue in issues:
        if issue.get("type") == "json_invalid":
            ctx = issue.get("ctx")
            reason = ctx.get("error") if isinstance(ctx, Mapping) else None
            return MalformedBody(f"JSON parse error: {reason}" if reason else str(issue.get("msg", "")))
        if _issue_location(issue) == ("body",) and issue.get("type") == "missing":
            return MalformedBody(MISSING_BODY_MESSAGE)

    body_name = _body_object_name(request)
    violations = [
        _violation_from_issue(issue, body_name if _location_kind(issue) == "body" else _location_kind(issue))
        for issue in issues
    ]
    return ValidationFailed(violations_tuple(violations))


def _pydantic_validation_fault(exc: ValidationError) -> Fault:
    violations = [_violation_from_issue(issue, exc.title) for issue in exc.errors()]
    headline = str(exc).splitlines()[0] if str(exc) else f"Validation failed for {exc.title}"
    return ConstraintViolated(headline, violations_tuple(violations))


def _summarize_issues(issues: Sequence[Mapping[str, Any]]) -> str:
    return "; ".join(f"{_format_location(issue.get('loc', ()))}: {issue.get('msg', 'Invalid value')}" for issue in issues)


def _http_detail_message(exc: StarletteHTTPException) -> str:
    detail = exc.detail
    if isinstance(detail, dict):
        error = detail.get("error") if isinstance(detail.get("error"), dict) else detail
        if "message" in error:
            return str(error["message"])
    if isinstance(detail, str) and detail:
        return detail
    try:
        return HTTPStatus(exc.status_code).phrase
    except ValueError:
        return "Request failed"


def _is_unrouted(request: Request) -> bool:
    return "route" not in request.scope and "endpoint" not in request.scope


def _http_exception_fault(exc: StarletteHTTPException, request: Request) -> Fault:
    message = _http_detail_message(exc)
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        if _is_unrouted(request):
            return NoRouteFound(
                method=request.method,
                url=request.url.path,
                message=f"No endpoint {request.method} {request.url.path}.",
            )
        return EntityNotFound(message)
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        return AuthenticationFailed(message)
    if exc.status_code == status.HTTP_403_FORBIDDEN:
        return AuthorizationDenied(message)
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return Uncategorized(message)
    return RequestRejected(exc.status_code, message)


def _database_message(exc: SQLAlchemyError) -> str:
    origin = getattr(exc, "orig", None)
    text = str(origin) if origin is not None else str(exc)
    lines = text.strip().splitlines()
    return lines[0] if lines else type(exc).__name__


def fault_from_exception(exc: Exception, request: Request) -> Fault:
    """Decide which fault variant a raised exception represents."""
    if isinstance(exc, APIError):
        return exc.to_fault()
    if isinstance(exc, RequestValidationError):
        return _request_validation_fault(exc, request)
    if isinstance(exc, ResponseValidationError):
        return UnwritableResponse(_summarize_issues(list(exc.errors())))
    if isinstance(exc, ValidationError):
        return _pydantic_validation_fault(exc)
    if isinstance(exc, StarletteHTTPException):
        return _http_exception_fault(exc, request)
    if isinstance(exc, NoResultFound):
        return EntityNotFound(_database_message(exc))
    if isinstance(exc, IntegrityError):
        return DataIntegrityViolated(cause_is_constraint=True, message=_database_message(exc))
    if isinstance(exc, DataError):
        return DataIntegrityViolated(cause_is_constraint=False, message=_database_message(exc))
    return Uncategorized()


def _log_fault(request: Request, fault: Fault, response: ErrorResponse, exc: Exception) -> None:
    correlation_id = response.envelope.properties.correlation_id
    if response.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "Request failed kind=%s status=%s method=%s path=%s correlation_id=%s",
            fault.kind,
            response.status_code,
            request.method,
            request.url.path,
            correlation_id,
            exc_info=exc,
        )
    elif get_error_settings().log_client_errors:
        logger.warning(
            "Request rejected kind=%s status=%s method=%s path=%s correlation_id=%s",
            fault.kind,
            response.status_code,
            request.method,
            request.url.path,
            correlation_id,
        )


async def fault_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any captured exception as the shared error envelope."""
    correlation_id = request.headers.get(get_error_settings().correlation_header)
    try:
        fault = fault_from_exception(exc, request)
    except Exception:
        logger.exception("Failed to translate %s into a fault", type(exc).__name__)
        fault = Uncategorized()

    response = classify(fault, correlation_id)
    _log_fault(request, fault, response, exc)

    headers = getattr(exc, "headers", None) if isinstance(exc, StarletteHTTPException) else None
    return response.to_json_response(headers)


def register_error_handlers(app: FastAPI) -> None:
    """Attach the error envelope handlers to a FastAPI app instance.

    The redaction rules are compiled here so a bad pattern fails at startup.
    """
    get_redactor()
    app.add_exception_handler(RequestValidationError, fault_exception_handler)
    app.add_exception_handler(ResponseValidationError, fault_exception_handler)
    app.add_exception_handler(ValidationError, fault_exception_handler)
    app.add_exception_handler(StarletteHTTPException, fault_exception_handler)
    app.add_exception_handler(APIError, fault_exception_handler)
    app.add_exception_handler(SQLAlchemyError, fault_exception_handler)
    app.add_exception_handler(Exception, fault_exception_handler)
