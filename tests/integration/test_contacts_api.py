"""
API tests for the contact routes, wired to in-memory fakes through
dependency overrides (the lifespan, and with it Postgres/Redis, never runs).
"""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from geocontacts.db.helpers import DatabaseError
from geocontacts.dependencies import (
    get_directory_service,
    get_location_submitter,
    get_proximity_resolver,
    get_services,
)
from geocontacts.main import app
from geocontacts.services.errors import LocationSubmitError


@pytest.fixture
def client(directory, resolver, contact_store, make_contact, make_update):
    contact_store.contacts = [
        make_contact("alice@example.com", name="Alice", home_m=10_000, src="alice.png"),
        make_contact("bob@example.com", name="Bob", home_m=10_000),
        make_contact("carol@example.com", name="Carol", home_m=900_000),
    ]
    contact_store.updates = [make_update("bob@example.com", age=timedelta(hours=5))]

    app.dependency_overrides[get_directory_service] = lambda: directory
    app.dependency_overrides[get_proximity_resolver] = lambda: resolver
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_healthz_endpoint():
    response = TestClient(app).get("/healthz")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_list_contacts_sorted_with_display_fields(client):
    response = client.get("/contacts")

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 3
    assert [c["Name"] for c in data["contacts"]] == ["Alice", "Bob", "Carol"]
    alice = data["contacts"][0]
    assert alice["PhotoUrl"].endswith("/alice.png")
    assert alice["TwitterHandle"] == "@alice"
    assert alice["CurrentLocation"] is None


def test_force_refresh_query_bypasses_cache(client, contact_store):
    client.get("/contacts")
    client.get("/contacts?force_refresh=true")

    assert contact_store.calls["fetch_all_contacts"] == 2


def test_nearby_groups(client):
    response = client.get("/contacts/nearby", params={"longitude": 0.0, "latitude": 0.0})

    assert response.status_code == 200
    groups = response.json()["groups"]
    assert [g["label"] for g in groups] == ["Recent Check-in", "Hometown"]
    assert [c["UserPrincipalName"] for c in groups[0]["contacts"]] == ["bob@example.com"]
    assert groups[0]["contacts"][0]["Mood"] == "Happy"
    assert [c["UserPrincipalName"] for c in groups[1]["contacts"]] == ["alice@example.com"]
    assert groups[1]["contacts"][0]["CurrentLocation"]["type"] == "Point"


def test_nearby_rejects_out_of_range_coordinates(client):
    response = client.get("/contacts/nearby", params={"longitude": 200.0, "latitude": 0.0})

    assert response.status_code == 422


def test_get_single_contact(client):
    assert client.get("/contacts/carol@example.com").json()["Name"] == "Carol"
    assert client.get("/contacts/nobody@example.com").status_code == 404


def test_store_failure_maps_to_503(client, contact_store):
    contact_store.fail_with = DatabaseError("Query failed", operation="fetch_all")

    assert client.get("/contacts").status_code == 503
    assert client.get("/contacts/nearby?longitude=0&latitude=0").status_code == 503


def test_unknown_checkin_identity_maps_to_500(client, contact_store, make_update):
    contact_store.updates.append(make_update("ghost@example.com"))

    response = client.get("/contacts/nearby?longitude=0&latitude=0")

    assert response.status_code == 500


def test_submit_location_forwards_token():
    submitter = AsyncMock()
    app.dependency_overrides[get_location_submitter] = lambda: submitter
    try:
        response = TestClient(app).post(
            "/locations",
            json={"longitude": 4.9, "latitude": 52.37, "mood": "Sunny"},
            headers={"Authorization": "Bearer abc"},
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 202
    kwargs = submitter.submit_location.await_args.kwargs
    assert kwargs["access_token"] == "abc"
    assert kwargs["mood"] == "Sunny"


def test_submit_location_upstream_failure_maps_to_502():
    submitter = AsyncMock()
    submitter.submit_location.side_effect = LocationSubmitError("HTTP 500", status_code=500)
    app.dependency_overrides[get_location_submitter] = lambda: submitter
    try:
        response = TestClient(app).post(
            "/locations",
            json={"longitude": 0, "latitude": 0},
            headers={"Authorization": "Bearer abc"},
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 502


def test_submit_location_requires_bearer_token():
    response = TestClient(app).post("/locations", json={"longitude": 0, "latitude": 0})

    assert response.status_code in (401, 403)


def test_readyz_reports_connectivity_without_failing(probe):
    probe.online = False
    services = AsyncMock()
    services.probe = probe
    app.dependency_overrides[get_services] = lambda: services
    try:
        with (
            patch(
                "geocontacts.routes.health.db_health_check",
                AsyncMock(return_value={"healthy": True}),
            ),
            patch("geocontacts.routes.health.fast_redis.ping", AsyncMock(return_value=True)),
            patch("geocontacts.routes.health.settings.CACHE_BACKEND", "redis"),
        ):
            response = TestClient(app).get("/readyz")
    finally:
        app.dependency_overrides.clear()

    data = response.json()
    assert data["overall_ok"] is True
    assert data["checks"]["connectivity"]["online"] is False
    assert data["checks"]["cache"]["ok"] is True
