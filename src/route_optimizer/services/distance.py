"""Cost matrix and per-edge route lookups.

A ``DistanceSource`` produces pairwise distances and detailed segments.
``DistanceProvider`` tries the remote routing source first and substitutes
the great-circle source whenever the remote one fails, so callers never see
a routing provider error.
"""

from __future__ import annotations

import logging
from typing import Protocol

from route_optimizer.exceptions import InvalidInputError, ProviderFailure
from route_optimizer.services.geo import (
    estimate_minutes,
    haversine_km,
    round_half_up,
    round_tenths,
    straight_line,
)
from route_optimizer.services.osrm import OsrmClient
from route_optimizer.services.types import CostMatrix, GeoPoint, Point, RouteSegment, RouteStep

logger = logging.getLogger(__name__)

METERS_PER_KM = 1000.0


class DistanceSource(Protocol):
    def cost_matrix(self, points: list[Point]) -> CostMatrix: ...

    def segment(self, from_point: Point, to_point: Point) -> RouteSegment: ...


class GreatCircleDistanceSource:
    def cost_matrix(self, points: list[Point]) -> CostMatrix:
        return {
            origin.id: {
                destination.id: (
                    0.0 if origin.id == destination.id else _haversine(origin, destination)
                )
                for destination in points
            }
            for origin in points
        }

    def segment(self, from_point: Point, to_point: Point) -> RouteSegment:
        distance_km = _haversine(from_point, to_point)
        geometry = straight_line(
            from_point.longitude, from_point.latitude, to_point.longitude, to_point.latitude
        )
        return RouteSegment(
            from_point=from_point,
            to_point=to_point,
            distance_km=round_tenths(distance_km),
            duration_minutes=estimate_minutes(distance_km),
            geometry=geometry,
            steps=[
                RouteStep(
                    instruction=f"Drive to {to_point.name}",
                    distance_meters=round_half_up(distance_km * METERS_PER_KM),
                    duration_seconds=round_half_up(distance_km * 2 * 60),
                    geometry=geometry,
                )
            ],
        )


class RemoteDistanceSource:
    def __init__(self, osrm_client: OsrmClient | None = None) -> None:
        self.osrm_client = osrm_client or OsrmClient()

    def cost_matrix(self, points: list[Point]) -> CostMatrix:
        distances = self.osrm_client.table([_geo_point(point) for point in points])
        return {
            origin.id: {
                destination.id: distances[row][column] / METERS_PER_KM
                for column, destination in enumerate(points)
            }
            for row, origin in enumerate(points)
        }

    def segment(self, from_point: Point, to_point: Point) -> RouteSegment:
        route = self.osrm_client.route(_geo_point(from_point), _geo_point(to_point))
        return RouteSegment(
            from_point=from_point,
            to_point=to_point,
            distance_km=round_tenths(route.distance_meters / METERS_PER_KM),
            duration_minutes=round_half_up(route.duration_seconds / 60.0),
            geometry=route.geometry,
            steps=route.steps,
        )


class DistanceProvider:
    def __init__(
        self,
        primary: DistanceSource | None = None,
        fallback: DistanceSource | None = None,
    ) -> None:
        self.primary = primary if primary is not None else RemoteDistanceSource()
        self.fallback = fallback if fallback is not None else GreatCircleDistanceSource()

    def build_cost_matrix(self, points: list[Point]) -> CostMatrix:
        if len(points) < 2:
            raise InvalidInputError("At least two points are required to build a cost matrix")

        try:
            return self.primary.cost_matrix(points)
        except ProviderFailure as exc:
            logger.warning("Distance table unavailable, using great-circle distances: %s", exc)
            return self.fallback.cost_matrix(points)

    def get_detailed_segment(self, from_point: Point, to_point: Point) -> RouteSegment:
        try:
            return self.primary.segment(from_point, to_point)
        except ProviderFailure as exc:
            logger.warning(
                "Route %s -> %s unavailable, using straight line: %s",
                from_point.id,
                to_point.id,
                exc,
            )
            return self.fallback.segment(from_point, to_point)


def _haversine(origin: Point, destination: Point) -> float:
    return haversine_km(
        origin.latitude, origin.longitude, destination.latitude, destination.longitude
    )


def _geo_point(point: Point) -> GeoPoint:
    return GeoPoint(latitude=point.latitude, longitude=point.longitude)
