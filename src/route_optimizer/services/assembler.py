from __future__ import annotations

from dataclasses import replace

from route_optimizer.services.distance import DistanceProvider
from route_optimizer.services.tsp import solve_nearest_neighbor, solve_two_opt, tour_distance
from route_optimizer.services.types import (
    Algorithm,
    CostMatrix,
    OptimizationResult,
    Point,
    RouteSegment,
)


class RouteAssembler:
    def __init__(self, distance_provider: DistanceProvider | None = None) -> None:
        self.distance_provider = distance_provider or DistanceProvider()

    def assemble(
        self,
        points: list[Point],
        matrix: CostMatrix,
        algorithm: Algorithm,
    ) -> OptimizationResult:
        original_distance_km = tour_distance(points, matrix)

        if algorithm == "nearest-neighbor":
            optimized = solve_nearest_neighbor(points, matrix)
        else:
            optimized = solve_two_opt(points, matrix)

        # Negative savings mean the heuristic lost to the input order.
        saved_distance_km = original_distance_km - optimized.total_distance_km
        efficiency_percent = (
            saved_distance_km / original_distance_km * 100 if original_distance_km > 0 else 0.0
        )

        return replace(
            optimized,
            saved_distance_km=saved_distance_km,
            efficiency_percent=efficiency_percent,
            segments=self._segments(optimized.ordered_points),
        )

    def _segments(self, tour: list[Point]) -> list[RouteSegment]:
        return [
            self.distance_provider.get_detailed_segment(point, tour[(index + 1) % len(tour)])
            for index, point in enumerate(tour)
        ]
