"""Unit tests for envelope construction and wire rendering."""

from __future__ import annotations

from datetime import datetime
from datetime import timedelta
from datetime import timezone
import json

from rest_errors.core.envelope import ErrorResponse
from rest_errors.core.envelope import build_envelope
from rest_errors.core.envelope import format_timestamp

FIXED_INSTANT = datetime(2024, 3, 5, 14, 7, 9, 123456, tzinfo=timezone.utc)


def test_timestamp_uses_utc_with_millisecond_precision() -> None:
    assert format_timestamp(FIXED_INSTANT) == "2024-03-05T14:07:09.123Z"


def test_timestamp_converts_offsets_and_assumes_utc_for_naive_values() -> None:
    offset = datetime(2024, 3, 5, 16, 7, 9, 5000, tzinfo=timezone(timedelta(hours=2)))

    assert format_timestamp(offset) == "2024-03-05T14:07:09.005Z"
    assert format_timestamp(datetime(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"


def test_envelope_without_details_omits_the_key(fixed_clock) -> None:
    envelope = build_envelope("Client not found", 404, None, [], clock=fixed_clock)

    assert envelope.to_wire() == {
        "code": "404",
        "message": "Client not found",
        "properties": {"timestamp": "2024-03-05T14:07:09.123Z", "correlationId": None},
    }


def test_correlation_id_is_kept_verbatim(fixed_clock) -> None:
    envelope = build_envelope("boom", 500, "abc-123", None, clock=fixed_clock)

    assert envelope.to_wire()["properties"]["correlationId"] == "abc-123"


def test_nested_details_render_in_order(fixed_clock) -> None:
    first = build_envelope("first", 400, "c-1", clock=fixed_clock)
    second = build_envelope("second", 400, "c-1", clock=fixed_clock)

    wire = build_envelope("Validation error", 400, "c-1", [first, second], clock=fixed_clock).to_wire()

    assert [item["message"] for item in wire["details"]] == ["first", "second"]
    assert all("details" not in item for item in wire["details"])
    assert all(item["code"] == "400" for item in wire["details"])


def test_reparsed_body_never_contains_an_empty_details_array(fixed_clock) -> None:
    envelope = build_envelope("Validation error", 400, None, [], clock=fixed_clock)

    reparsed = json.loads(json.dumps(envelope.to_wire()))

    assert "details" not in reparsed


def test_builds_differ_only_in_timestamp() -> None:
    instants = iter([FIXED_INSTANT, FIXED_INSTANT + timedelta(seconds=3)])

    def clock() -> datetime:
        return next(instants)

    first = build_envelope("Server error: x", 500, "c-9", clock=clock).to_wire()
    second = build_envelope("Server error: x", 500, "c-9", clock=clock).to_wire()

    assert first["properties"]["timestamp"] != second["properties"]["timestamp"]
    first["properties"].pop("timestamp")
    second["properties"].pop("timestamp")
    assert first == second


def test_default_clock_is_sampled_on_every_build() -> None:
    before = datetime.now(timezone.utc).replace(microsecond=0)

    stamp = build_envelope("x", 400).properties.timestamp

    parsed = datetime.strptime(stamp, "%Y-%m-%dT%H:%M:%S.%fZ").replace(tzinfo=timezone.utc)
    assert parsed >= before
    assert stamp.endswith("Z")


def test_response_pair_renders_json_response(fixed_clock) -> None:
    pair = ErrorResponse(envelope=build_envelope("Access is denied", 403, None, clock=fixed_clock), status_code=403)

    response = pair.to_json_response({"X-Reason": "scope"})

    assert response.status_code == 403
    assert response.headers["x-reason"] == "scope"
    assert json.loads(response.body) == {
        "code": "403",
        "message": "Access is denied",
        "properties": {"timestamp": "2024-03-05T14:07:09.123Z", "correlationId": None},
    }
