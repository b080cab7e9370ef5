"""Closed set of classified request-processing failures.

Each variant is an immutable value created at the dispatch boundary once a
failure is captured. The classifier maps variants, not exception classes, so
hosting code only has to decide which variant a raised exception represents.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class FieldViolation:
    """One rejected field reported by the validation engine."""

    object_name: str
    field: str
    rejected_value: str | None
    message: str


@dataclass(frozen=True)
class Fault:
    """Base of all fault variants."""

    @property
    def kind(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class MissingParameter(Fault):
    name: str


@dataclass(frozen=True)
class UnsupportedMediaType(Fault):
    content_type: str
    supported: tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidationFailed(Fault):
    violations: tuple[FieldViolation, ...] = ()


@dataclass(frozen=True)
class ConstraintViolated(Fault):
    message: str
    violations: tuple[FieldViolation, ...] = ()


@dataclass(frozen=True)
class EntityNotFound(Fault):
    message: str


@dataclass(frozen=True)
class MalformedBody(Fault):
    message: str


@dataclass(frozen=True)
class UnwritableResponse(Fault):
    message: str


@dataclass(frozen=True)
class NoRouteFound(Fault):
    method: str
    url: str
    message: str


@dataclass(frozen=True)
class DataIntegrityViolated(Fault):
    cause_is_constraint: bool
    message: str


@dataclass(frozen=True)
class TypeMismatch(Fault):
    name: str
    value: str | None
    target_type_name: str
    message: str


@dataclass(frozen=True)
class AuthenticationFailed(Fault):
    message: str


@dataclass(frozen=True)
class AuthorizationDenied(Fault):
    message: str


@dataclass(frozen=True)
class ValidationRejected(Fault):
    message: str


@dataclass(frozen=True)
class RequestRejected(Fault):
    status_code: int
    message: str


@dataclass(frozen=True)
class Uncategorized(Fault):
    message: str = "Internal server error"


def violations_tuple(violations: Sequence[FieldViolation] | None) -> tuple[FieldViolation, ...]:
    """Freeze a violation sequence for storage on a fault."""
    if not violations:
        return ()
    return tuple(violations)
