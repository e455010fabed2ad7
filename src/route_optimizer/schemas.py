from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class AddressCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=255)
    address: str = Field(min_length=1, max_length=500)
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    verified: bool = False


class AddressUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    address: str | None = Field(default=None, min_length=1, max_length=500)
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    verified: bool | None = None


class AddressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: str
    latitude: float
    longitude: float
    verified: bool
    created_at: datetime | None = None


class GeocodeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    address: str = Field(min_length=3, max_length=300)


class ReverseGeocodeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class GeocodeResponse(BaseModel):
    address: str
    latitude: float
    longitude: float
    display_name: str


class ReverseGeocodeResponse(BaseModel):
    display_name: str


class OptimizeRouteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Count limits are enforced by the optimizer service.
    address_ids: list[int]
    algorithm: Literal["nearest-neighbor", "2-opt"] = "2-opt"
    name: str | None = Field(default=None, max_length=255)


class PointResponse(BaseModel):
    id: int
    name: str
    address: str
    latitude: float
    longitude: float


class RouteStepResponse(BaseModel):
    instruction: str
    distance_meters: int
    duration_seconds: int
    geometry: dict[str, Any]


class RouteSegmentResponse(BaseModel):
    from_point: PointResponse
    to_point: PointResponse
    distance_km: float
    duration_minutes: int
    geometry: dict[str, Any]
    steps: list[RouteStepResponse]


class OptimizedRouteResponse(BaseModel):
    ordered_points: list[PointResponse]
    total_distance_km: float
    estimated_time_minutes: int
    algorithm: Literal["nearest-neighbor", "2-opt"]
    saved_distance_km: float | None = None
    efficiency_percent: float | None = None
    segments: list[RouteSegmentResponse]


class SavedRouteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None
    algorithm: str
    total_distance_km: float
    estimated_time_minutes: int
    address_order: list[int]
    created_at: datetime | None = None


class OptimizeRouteResponse(BaseModel):
    route: SavedRouteResponse
    optimized_route: OptimizedRouteResponse
