from __future__ import annotations

import json

import pytest

from route_optimizer.exceptions import ExternalServiceError, InvalidLocationError
from route_optimizer.models import Address, SavedRoute
from route_optimizer.services.address_store import DjangoAddressStore
from route_optimizer.services.optimizer import RouteOptimizerService
from route_optimizer.services.types import GeocodeResult, GeoPoint


def _post(api_client, path: str, payload):
    return api_client.post(path, data=json.dumps(payload), content_type="application/json")


def _create_square() -> list[Address]:
    return [
        Address.objects.create(name="A", address="A St", latitude=0.0, longitude=0.0),
        Address.objects.create(name="B", address="B St", latitude=0.0, longitude=1.0),
        Address.objects.create(name="C", address="C St", latitude=1.0, longitude=1.0),
        Address.objects.create(name="D", address="D St", latitude=1.0, longitude=0.0),
    ]


@pytest.fixture
def offline_optimizer(mocker, offline_provider) -> RouteOptimizerService:
    service = RouteOptimizerService(
        address_store=DjangoAddressStore(), distance_provider=offline_provider
    )
    mocker.patch("route_optimizer.views.get_route_optimizer", return_value=service)
    return service


@pytest.mark.django_db
def test_health_endpoint_returns_counts(api_client) -> None:
    _create_square()

    response = api_client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "addresses": 4, "routes": 0}


@pytest.mark.django_db
def test_address_crud_round_trip(api_client) -> None:
    created = _post(
        api_client,
        "/api/v1/addresses",
        {"name": "Depot", "address": "1 Main St", "latitude": 30.2672, "longitude": -97.7431},
    )
    assert created.status_code == 201
    address_id = created.json()["id"]
    assert created.json()["verified"] is False

    listed = api_client.get("/api/v1/addresses")
    assert [item["id"] for item in listed.json()] == [address_id]

    updated = api_client.patch(
        f"/api/v1/addresses/{address_id}",
        data=json.dumps({"name": "Main Depot", "verified": True}),
        content_type="application/json",
    )
    assert updated.status_code == 200
    assert updated.json()["name"] == "Main Depot"
    assert updated.json()["verified"] is True
    assert updated.json()["address"] == "1 Main St"

    fetched = api_client.get(f"/api/v1/addresses/{address_id}")
    assert fetched.json()["name"] == "Main Depot"

    deleted = api_client.delete(f"/api/v1/addresses/{address_id}")
    assert deleted.status_code == 204
    assert not Address.objects.filter(pk=address_id).exists()

    missing = api_client.delete(f"/api/v1/addresses/{address_id}")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "not_found"


@pytest.mark.django_db
def test_address_validation_error_returns_400(api_client) -> None:
    response = _post(
        api_client,
        "/api/v1/addresses",
        {"name": "Nowhere", "address": "Somewhere", "latitude": 123.0, "longitude": 0.0},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "validation_error"
    assert Address.objects.count() == 0


def test_invalid_json_returns_400(api_client) -> None:
    response = api_client.post(
        "/api/v1/optimize-route", data="{not json", content_type="application/json"
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_json"


@pytest.mark.django_db
def test_optimize_route_saves_and_returns_route(api_client, offline_optimizer) -> None:
    addresses = _create_square()
    ids = [address.pk for address in addresses]

    response = _post(
        api_client,
        "/api/v1/optimize-route",
        {"address_ids": ids, "algorithm": "nearest-neighbor", "name": "Square"},
    )

    assert response.status_code == 200
    payload = response.json()
    optimized = payload["optimized_route"]
    assert [point["id"] for point in optimized["ordered_points"]] == ids
    assert optimized["algorithm"] == "nearest-neighbor"
    assert len(optimized["segments"]) == 4
    assert optimized["segments"][0]["steps"][0]["instruction"] == "Drive to B"
    assert optimized["segments"][3]["to_point"]["id"] == ids[0]
    assert optimized["saved_distance_km"] == 0.0

    route = SavedRoute.objects.get()
    assert payload["route"]["id"] == route.pk
    assert route.name == "Square"
    assert route.address_order == ids
    assert route.algorithm == "nearest-neighbor"


@pytest.mark.django_db
def test_optimize_route_rejects_too_many_addresses(api_client, offline_optimizer, failing_source):
    response = _post(api_client, "/api/v1/optimize-route", {"address_ids": list(range(1, 22))})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_input"
    assert failing_source.calls == 0
    assert SavedRoute.objects.count() == 0


@pytest.mark.django_db
def test_optimize_route_unknown_address_returns_404(api_client, offline_optimizer) -> None:
    addresses = _create_square()

    response = _post(
        api_client, "/api/v1/optimize-route", {"address_ids": [addresses[0].pk, 9999]}
    )

    assert response.status_code == 404
    assert "9999" in response.json()["error"]["message"]


def test_optimize_route_rejects_unknown_algorithm(api_client) -> None:
    response = _post(
        api_client, "/api/v1/optimize-route", {"address_ids": [1, 2], "algorithm": "genetic"}
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "validation_error"


@pytest.mark.django_db
def test_route_history_list_and_delete(api_client) -> None:
    older = SavedRoute.objects.create(
        algorithm="2-opt", total_distance_km=10.0, estimated_time_minutes=20, address_order=[1, 2]
    )
    newer = SavedRoute.objects.create(
        algorithm="nearest-neighbor",
        total_distance_km=12.5,
        estimated_time_minutes=25,
        address_order=[2, 1],
    )

    listed = api_client.get("/api/v1/routes")
    assert [item["id"] for item in listed.json()] == [newer.pk, older.pk]

    deleted = api_client.delete(f"/api/v1/routes/{older.pk}")
    assert deleted.status_code == 204
    assert api_client.delete(f"/api/v1/routes/{older.pk}").status_code == 404


def test_geocode_returns_coordinates(api_client, mocker) -> None:
    client = mocker.Mock()
    client.geocode.return_value = GeocodeResult(
        point=GeoPoint(latitude=30.2672, longitude=-97.7431),
        display_name="Austin, Travis County, Texas, United States",
    )
    mocker.patch("route_optimizer.views.get_geocoding_client", return_value=client)

    response = _post(api_client, "/api/v1/geocode", {"address": "Austin, TX"})

    assert response.status_code == 200
    assert response.json() == {
        "address": "Austin, TX",
        "latitude": 30.2672,
        "longitude": -97.7431,
        "display_name": "Austin, Travis County, Texas, United States",
    }
    client.geocode.assert_called_once_with("Austin, TX")


def test_geocode_unresolved_returns_404(api_client, mocker) -> None:
    client = mocker.Mock()
    client.geocode.side_effect = InvalidLocationError("Location could not be resolved")
    mocker.patch("route_optimizer.views.get_geocoding_client", return_value=client)

    response = _post(api_client, "/api/v1/geocode", {"address": "Atlantis"})

    assert response.status_code == 404


def test_reverse_geocode_upstream_failure_returns_502(api_client, mocker) -> None:
    client = mocker.Mock()
    client.reverse.side_effect = ExternalServiceError("Geocoding request failed")
    mocker.patch("route_optimizer.views.get_geocoding_client", return_value=client)

    response = _post(api_client, "/api/v1/reverse-geocode", {"latitude": 1.0, "longitude": 2.0})

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "upstream_error"
