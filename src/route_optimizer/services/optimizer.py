from __future__ import annotations

import logging
from typing import get_args

from route_optimizer.exceptions import InvalidInputError, NotFoundError
from route_optimizer.services.address_store import AddressStore, DjangoAddressStore
from route_optimizer.services.assembler import RouteAssembler
from route_optimizer.services.distance import DistanceProvider
from route_optimizer.services.types import Algorithm, OptimizationResult, Point

logger = logging.getLogger(__name__)

MIN_ROUTE_POINTS = 2
MAX_ROUTE_POINTS = 20


class RouteOptimizerService:
    def __init__(
        self,
        address_store: AddressStore | None = None,
        distance_provider: DistanceProvider | None = None,
        route_assembler: RouteAssembler | None = None,
    ) -> None:
        self.address_store = address_store or DjangoAddressStore()
        self.distance_provider = distance_provider or DistanceProvider()
        self.route_assembler = route_assembler or RouteAssembler(self.distance_provider)

    def optimize_route(
        self, point_ids: list[int], algorithm: Algorithm = "2-opt"
    ) -> OptimizationResult:
        if not MIN_ROUTE_POINTS <= len(point_ids) <= MAX_ROUTE_POINTS:
            raise InvalidInputError(
                f"Between {MIN_ROUTE_POINTS} and {MAX_ROUTE_POINTS} addresses are required, "
                f"got {len(point_ids)}"
            )
        if len(set(point_ids)) != len(point_ids):
            raise InvalidInputError("Address ids must be unique")
        if algorithm not in get_args(Algorithm):
            raise InvalidInputError(f"Unknown algorithm: {algorithm}")

        points = self._resolve(point_ids)
        matrix = self.distance_provider.build_cost_matrix(points)
        result = self.route_assembler.assemble(points, matrix, algorithm)

        saved = result.saved_distance_km
        logger.info(
            "Optimized %d points with %s: %.2f km, saved %s km",
            len(points),
            algorithm,
            result.total_distance_km,
            "n/a" if saved is None else f"{saved:.2f}",
        )
        return result

    def _resolve(self, point_ids: list[int]) -> list[Point]:
        points: list[Point] = []
        for point_id in point_ids:
            point = self.address_store.get_by_id(point_id)
            if point is None:
                raise NotFoundError(f"Address with id {point_id} not found")
            points.append(point)
        return points
