"""Contract tests for the packaged application wiring."""

from __future__ import annotations

from fastapi.testclient import TestClient


def test_health_endpoint_is_reachable(app_client: TestClient) -> None:
    response = app_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_packaged_app_renders_unknown_routes_as_envelopes(app_client: TestClient) -> None:
    response = app_client.get("/api/v1/unknown", headers={"Correlation-Id": "wired-1"})

    assert response.status_code == 400
    payload = response.json()
    assert payload["code"] == "400"
    assert payload["message"] == "Could not find the GET method for URL /api/v1/unknown: No endpoint GET /api/v1/unknown."
    assert payload["properties"]["correlationId"] == "wired-1"
