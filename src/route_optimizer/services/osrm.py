from __future__ import annotations

import time
from typing import Any

import httpx
from django.conf import settings

from route_optimizer.exceptions import ProviderFailure
from route_optimizer.services.geo import round_half_up
from route_optimizer.services.types import GeoPoint, RouteData, RouteStep


class OsrmClient:
    def __init__(self) -> None:
        self.base_url = settings.OSRM_BASE_URL.rstrip("/")
        self.profile = settings.OSRM_PROFILE
        self.timeout = settings.OSRM_TIMEOUT_SECONDS
        self.retry_count = settings.OSRM_RETRY_COUNT

    def table(self, waypoints: list[GeoPoint]) -> list[list[float]]:
        """Return the dense pairwise distance matrix in meters, in input order."""
        if len(waypoints) < 2:
            raise ProviderFailure("At least two table waypoints are required")

        payload = self._get(
            f"{self.base_url}/table/v1/{self.profile}/{self._coordinates(waypoints)}",
            params={"annotations": "distance"},
        )
        return self._parse_table(payload, len(waypoints))

    def route(self, start: GeoPoint, finish: GeoPoint) -> RouteData:
        payload = self._get(
            f"{self.base_url}/route/v1/{self.profile}/{self._coordinates([start, finish])}",
            params={
                "overview": "full",
                "geometries": "geojson",
                "steps": "true",
            },
        )
        return self._parse_route(payload)

    def _get(self, endpoint: str, params: dict[str, str]) -> Any:
        for attempt in range(self.retry_count + 1):
            try:
                response = httpx.get(endpoint, params=params, timeout=self.timeout)
                response.raise_for_status()
                return response.json()
            except (httpx.HTTPError, ValueError) as exc:
                if attempt >= self.retry_count:
                    raise ProviderFailure("OSRM request failed") from exc
                time.sleep(0.3 * (attempt + 1))

        raise ProviderFailure("OSRM request failed")

    @staticmethod
    def _coordinates(waypoints: list[GeoPoint]) -> str:
        return ";".join(f"{point.longitude:.6f},{point.latitude:.6f}" for point in waypoints)

    @staticmethod
    def _parse_table(payload: Any, size: int) -> list[list[float]]:
        if not isinstance(payload, dict) or payload.get("code") != "Ok":
            raise ProviderFailure("Could not compute distance table")

        rows = payload.get("distances")
        if not isinstance(rows, list) or len(rows) != size:
            raise ProviderFailure("Distance table has unexpected shape")

        distances: list[list[float]] = []
        for row in rows:
            if not isinstance(row, list) or len(row) != size:
                raise ProviderFailure("Distance table has unexpected shape")
            if any(value is None for value in row):
                raise ProviderFailure("Distance table contains unreachable pairs")
            try:
                distances.append([float(value) for value in row])
            except (TypeError, ValueError) as exc:
                raise ProviderFailure("Distance table contains invalid values") from exc
        return distances

    @staticmethod
    def _parse_route(payload: Any) -> RouteData:
        if not isinstance(payload, dict) or payload.get("code") != "Ok":
            raise ProviderFailure("Could not compute route")

        routes = payload.get("routes")
        if not isinstance(routes, list) or not routes:
            raise ProviderFailure("Could not compute route")

        try:
            first = routes[0]
            legs = first.get("legs") or [{}]
            steps = [
                RouteStep(
                    instruction=_instruction(step.get("maneuver", {})),
                    distance_meters=round_half_up(float(step.get("distance", 0.0))),
                    duration_seconds=round_half_up(float(step.get("duration", 0.0))),
                    geometry=step.get("geometry", {}),
                )
                for step in legs[0].get("steps", [])
            ]
            return RouteData(
                distance_meters=float(first["distance"]),
                duration_seconds=float(first["duration"]),
                geometry=first["geometry"],
                steps=steps,
            )
        except (AttributeError, IndexError, KeyError, OverflowError, TypeError, ValueError) as exc:
            raise ProviderFailure("Invalid route response") from exc


def _instruction(maneuver: dict[str, Any]) -> str:
    if maneuver.get("instruction"):
        return str(maneuver["instruction"])
    return f"{maneuver.get('type', '')} {maneuver.get('modifier') or ''}".strip()
