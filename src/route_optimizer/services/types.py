from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Algorithm = Literal["nearest-neighbor", "2-opt"]

# matrix[from_id][to_id] in kilometers
CostMatrix = dict[int, dict[int, float]]


@dataclass(slots=True, frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(slots=True, frozen=True)
class Point:
    id: int
    name: str
    address: str
    latitude: float
    longitude: float


@dataclass(slots=True, frozen=True)
class GeocodeResult:
    point: GeoPoint
    display_name: str


@dataclass(slots=True, frozen=True)
class RouteStep:
    instruction: str
    distance_meters: int
    duration_seconds: int
    geometry: dict[str, Any]


@dataclass(slots=True, frozen=True)
class RouteData:
    distance_meters: float
    duration_seconds: float
    geometry: dict[str, Any]
    steps: list[RouteStep]


@dataclass(slots=True, frozen=True)
class RouteSegment:
    from_point: Point
    to_point: Point
    distance_km: float
    duration_minutes: int
    geometry: dict[str, Any]
    steps: list[RouteStep]


@dataclass(slots=True, frozen=True)
class OptimizationResult:
    ordered_points: list[Point]
    total_distance_km: float
    estimated_time_minutes: int
    algorithm: Algorithm
    saved_distance_km: float | None = None
    efficiency_percent: float | None = None
    segments: list[RouteSegment] = field(default_factory=list)
