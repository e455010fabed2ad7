from __future__ import annotations

from route_optimizer.exceptions import InvalidInputError
from route_optimizer.services.geo import estimate_minutes
from route_optimizer.services.types import CostMatrix, OptimizationResult, Point

MAX_TWO_OPT_PASSES = 1000


def tour_distance(tour: list[Point], matrix: CostMatrix) -> float:
    """Total length of the closed tour, including the edge back to the start."""
    total = 0.0
    for index in range(len(tour) - 1):
        total += matrix[tour[index].id][tour[index + 1].id]
    total += matrix[tour[-1].id][tour[0].id]
    return total


def solve_nearest_neighbor(points: list[Point], matrix: CostMatrix) -> OptimizationResult:
    if len(points) < 2:
        raise InvalidInputError("At least two points are required to build a tour")

    start = points[0]
    remaining = list(points[1:])
    tour = [start]
    total = 0.0
    current = start

    while remaining:
        nearest = remaining[0]
        nearest_distance = matrix[current.id][nearest.id]
        for candidate in remaining[1:]:
            distance = matrix[current.id][candidate.id]
            if distance < nearest_distance:
                nearest = candidate
                nearest_distance = distance

        tour.append(nearest)
        total += nearest_distance
        remaining.remove(nearest)
        current = nearest

    total += matrix[current.id][start.id]

    return OptimizationResult(
        ordered_points=tour,
        total_distance_km=total,
        estimated_time_minutes=estimate_minutes(total),
        algorithm="nearest-neighbor",
    )


def solve_two_opt(points: list[Point], matrix: CostMatrix) -> OptimizationResult:
    seed = solve_nearest_neighbor(points, matrix)
    tour = seed.ordered_points
    best_distance = seed.total_distance_km
    size = len(tour)

    improved = True
    passes = 0
    while improved and passes < MAX_TWO_OPT_PASSES:
        improved = False
        passes += 1

        for i in range(1, size - 2):
            for j in range(i + 1, size):
                if j - i == 1:
                    continue

                candidate = _reverse(tour, i, j)
                candidate_distance = tour_distance(candidate, matrix)
                if candidate_distance < best_distance:
                    tour = candidate
                    best_distance = candidate_distance
                    improved = True

    return OptimizationResult(
        ordered_points=tour,
        total_distance_km=best_distance,
        estimated_time_minutes=estimate_minutes(best_distance),
        algorithm="2-opt",
    )


def _reverse(tour: list[Point], i: int, j: int) -> list[Point]:
    return tour[:i] + tour[i : j + 1][::-1] + tour[j + 1 :]
