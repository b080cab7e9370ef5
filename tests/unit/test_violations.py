"""Unit tests for field-level violation rendering."""

from __future__ import annotations

from rest_errors.core.faults import FieldViolation
from rest_errors.core.violations import render_violation
from rest_errors.core.violations import violation_details


def test_absent_rejected_value_renders_as_null_word() -> None:
    violation = FieldViolation("testRequestDTO", "field1", None, "must not be blank")

    assert render_violation(violation) == "Invalid value null on field field1 for object testRequestDTO: must not be blank."


def test_empty_rejected_value_is_rendered_empty() -> None:
    violation = FieldViolation("TestRequestDTO", "field2", "", "must not be blank")

    assert render_violation(violation) == "Invalid value  on field field2 for object TestRequestDTO: must not be blank."


def test_details_keep_input_order_and_share_correlation(fixed_clock) -> None:
    violations = [
        FieldViolation("order", "quantity", "-1", "must be positive"),
        FieldViolation("order", "sku", None, "must not be null"),
        FieldViolation("order", "address.zip", "ABCDE", "must be numeric"),
    ]

    details = violation_details(violations, "corr-7", clock=fixed_clock)

    assert [detail.message for detail in details] == [render_violation(item) for item in violations]
    assert {detail.code for detail in details} == {"400"}
    assert {detail.properties.correlation_id for detail in details} == {"corr-7"}
    assert all(detail.details is None for detail in details)


def test_no_violations_yield_no_details() -> None:
    assert violation_details([], None) == []
