from __future__ import annotations

import json
import logging
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST
from pydantic import BaseModel, ValidationError

from route_optimizer.exceptions import (
    ExternalServiceError,
    InvalidInputError,
    InvalidLocationError,
    NotFoundError,
)
from route_optimizer.models import Address, SavedRoute
from route_optimizer.schemas import (
    AddressCreateRequest,
    AddressResponse,
    AddressUpdateRequest,
    GeocodeRequest,
    GeocodeResponse,
    OptimizedRouteResponse,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
    PointResponse,
    ReverseGeocodeRequest,
    ReverseGeocodeResponse,
    RouteSegmentResponse,
    RouteStepResponse,
    SavedRouteResponse,
)
from route_optimizer.services.geocoding import GeocodingClient
from route_optimizer.services.optimizer import RouteOptimizerService
from route_optimizer.services.types import OptimizationResult, Point

logger = logging.getLogger(__name__)

_optimizer_service: RouteOptimizerService | None = None
_geocoding_client: GeocodingClient | None = None


def get_route_optimizer() -> RouteOptimizerService:
    global _optimizer_service
    if _optimizer_service is None:
        _optimizer_service = RouteOptimizerService()
    return _optimizer_service


def get_geocoding_client() -> GeocodingClient:
    global _geocoding_client
    if _geocoding_client is None:
        _geocoding_client = GeocodingClient()
    return _geocoding_client


@require_GET
def health_view(_: HttpRequest) -> HttpResponse:
    return JsonResponse(
        {
            "status": "ok",
            "addresses": Address.objects.count(),
            "routes": SavedRoute.objects.count(),
        }
    )


@csrf_exempt
@require_http_methods(["GET", "POST"])
def address_list_view(request: HttpRequest) -> HttpResponse:
    if request.method == "GET":
        addresses = [
            AddressResponse.model_validate(address).model_dump(mode="json")
            for address in Address.objects.all()
        ]
        return JsonResponse(addresses, safe=False)

    create_request = _validate(request, AddressCreateRequest)
    if isinstance(create_request, JsonResponse):
        return create_request

    address = Address.objects.create(**create_request.model_dump())
    return JsonResponse(
        AddressResponse.model_validate(address).model_dump(mode="json"), status=201
    )


@csrf_exempt
@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
def address_detail_view(request: HttpRequest, address_id: int) -> HttpResponse:
    address = Address.objects.filter(pk=address_id).first()
    if address is None:
        return _error_response("not_found", "Address not found", status=404)

    if request.method == "GET":
        return JsonResponse(AddressResponse.model_validate(address).model_dump(mode="json"))

    if request.method == "DELETE":
        address.delete()
        return HttpResponse(status=204)

    update_request = _validate(request, AddressUpdateRequest)
    if isinstance(update_request, JsonResponse):
        return update_request

    changes = update_request.model_dump(exclude_none=True)
    for field_name, value in changes.items():
        setattr(address, field_name, value)
    if changes:
        address.save(update_fields=list(changes))

    return JsonResponse(AddressResponse.model_validate(address).model_dump(mode="json"))


@csrf_exempt
@require_POST
def geocode_view(request: HttpRequest) -> HttpResponse:
    geocode_request = _validate(request, GeocodeRequest)
    if isinstance(geocode_request, JsonResponse):
        return geocode_request

    try:
        result = get_geocoding_client().geocode(geocode_request.address)
    except InvalidLocationError as exc:
        return _error_response("not_found", str(exc), status=404)
    except ExternalServiceError as exc:
        logger.warning("Geocoding failed: %s", exc)
        return _error_response("upstream_error", str(exc), status=502)

    response = GeocodeResponse(
        address=geocode_request.address,
        latitude=result.point.latitude,
        longitude=result.point.longitude,
        display_name=result.display_name,
    )
    return JsonResponse(response.model_dump(mode="json"))


@csrf_exempt
@require_POST
def reverse_geocode_view(request: HttpRequest) -> HttpResponse:
    reverse_request = _validate(request, ReverseGeocodeRequest)
    if isinstance(reverse_request, JsonResponse):
        return reverse_request

    try:
        display_name = get_geocoding_client().reverse(
            reverse_request.latitude, reverse_request.longitude
        )
    except InvalidLocationError as exc:
        return _error_response("not_found", str(exc), status=404)
    except ExternalServiceError as exc:
        logger.warning("Geocoding failed: %s", exc)
        return _error_response("upstream_error", str(exc), status=502)

    return JsonResponse(ReverseGeocodeResponse(display_name=display_name).model_dump(mode="json"))


@csrf_exempt
@require_POST
def optimize_route_view(request: HttpRequest) -> HttpResponse:
    optimize_request = _validate(request, OptimizeRouteRequest)
    if isinstance(optimize_request, JsonResponse):
        return optimize_request

    optimizer = get_route_optimizer()
    try:
        result = optimizer.optimize_route(optimize_request.address_ids, optimize_request.algorithm)
    except InvalidInputError as exc:
        return _error_response("invalid_input", str(exc), status=400)
    except NotFoundError as exc:
        return _error_response("not_found", str(exc), status=404)

    saved_route = SavedRoute.objects.create(
        name=optimize_request.name,
        algorithm=result.algorithm,
        total_distance_km=result.total_distance_km,
        estimated_time_minutes=result.estimated_time_minutes,
        address_order=[point.id for point in result.ordered_points],
    )

    response = OptimizeRouteResponse(
        route=SavedRouteResponse.model_validate(saved_route),
        optimized_route=build_optimized_route_response(result),
    )
    return JsonResponse(response.model_dump(mode="json"), status=200)


@require_GET
def route_list_view(_: HttpRequest) -> HttpResponse:
    routes = [
        SavedRouteResponse.model_validate(route).model_dump(mode="json")
        for route in SavedRoute.objects.all()
    ]
    return JsonResponse(routes, safe=False)


@csrf_exempt
@require_http_methods(["DELETE"])
def route_detail_view(_: HttpRequest, route_id: int) -> HttpResponse:
    deleted, _details = SavedRoute.objects.filter(pk=route_id).delete()
    if not deleted:
        return _error_response("not_found", "Route not found", status=404)
    return HttpResponse(status=204)


def build_optimized_route_response(result: OptimizationResult) -> OptimizedRouteResponse:
    return OptimizedRouteResponse(
        ordered_points=[_point_response(point) for point in result.ordered_points],
        total_distance_km=round(result.total_distance_km, 3),
        estimated_time_minutes=result.estimated_time_minutes,
        algorithm=result.algorithm,
        saved_distance_km=(
            round(result.saved_distance_km, 3) if result.saved_distance_km is not None else None
        ),
        efficiency_percent=(
            round(result.efficiency_percent, 2) if result.efficiency_percent is not None else None
        ),
        segments=[
            RouteSegmentResponse(
                from_point=_point_response(segment.from_point),
                to_point=_point_response(segment.to_point),
                distance_km=segment.distance_km,
                duration_minutes=segment.duration_minutes,
                geometry=segment.geometry,
                steps=[
                    RouteStepResponse(
                        instruction=step.instruction,
                        distance_meters=step.distance_meters,
                        duration_seconds=step.duration_seconds,
                        geometry=step.geometry,
                    )
                    for step in segment.steps
                ],
            )
            for segment in result.segments
        ],
    )


def _point_response(point: Point) -> PointResponse:
    return PointResponse(
        id=point.id,
        name=point.name,
        address=point.address,
        latitude=point.latitude,
        longitude=point.longitude,
    )


def _validate(request: HttpRequest, schema: type[BaseModel]) -> Any:
    payload = _parse_json_payload(request)
    if isinstance(payload, JsonResponse):
        return payload

    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        return JsonResponse(
            {
                "error": {
                    "code": "validation_error",
                    "message": "Invalid request payload",
                    "details": exc.errors(include_url=False, include_context=False),
                }
            },
            status=400,
        )


def _parse_json_payload(request: HttpRequest) -> dict[str, Any] | JsonResponse:
    if not request.body:
        return {}

    try:
        payload = json.loads(request.body)
    except json.JSONDecodeError:
        return _error_response("invalid_json", "Request body must be valid JSON", status=400)

    if not isinstance(payload, dict):
        return _error_response("invalid_json", "JSON body must be an object", status=400)

    return payload


def _error_response(code: str, message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": {"code": code, "message": message}}, status=status)
