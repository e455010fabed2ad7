from __future__ import annotations

import pytest
from django.test import Client

from route_optimizer.exceptions import ProviderFailure
from route_optimizer.services.distance import DistanceProvider, GreatCircleDistanceSource
from route_optimizer.services.types import CostMatrix, Point, RouteSegment


def _point(point_id: int, latitude: float, longitude: float) -> Point:
    return Point(
        id=point_id,
        name=f"Stop {point_id}",
        address=f"{point_id} Test St",
        latitude=latitude,
        longitude=longitude,
    )


class FailingDistanceSource:
    def __init__(self) -> None:
        self.calls = 0

    def cost_matrix(self, points: list[Point]) -> CostMatrix:
        self.calls += 1
        raise ProviderFailure("OSRM request failed")

    def segment(self, from_point: Point, to_point: Point) -> RouteSegment:
        self.calls += 1
        raise ProviderFailure("OSRM request failed")


@pytest.fixture
def api_client() -> Client:
    return Client()


@pytest.fixture
def failing_source() -> FailingDistanceSource:
    return FailingDistanceSource()


@pytest.fixture
def offline_provider(failing_source: FailingDistanceSource) -> DistanceProvider:
    return DistanceProvider(primary=failing_source, fallback=GreatCircleDistanceSource())


@pytest.fixture
def square_points() -> list[Point]:
    return [
        _point(1, 0.0, 0.0),
        _point(2, 0.0, 1.0),
        _point(3, 1.0, 1.0),
        _point(4, 1.0, 0.0),
    ]
