from __future__ import annotations

import pytest

from route_optimizer.services.assembler import RouteAssembler
from route_optimizer.services.distance import GreatCircleDistanceSource
from route_optimizer.services.types import Point


def _point(point_id: int, latitude: float, longitude: float) -> Point:
    return Point(
        id=point_id,
        name=f"Stop {point_id}",
        address=f"{point_id} Test St",
        latitude=latitude,
        longitude=longitude,
    )


def _matrix(edges: dict[tuple[int, int], float], ids: list[int]) -> dict[int, dict[int, float]]:
    matrix = {origin: {destination: 0.0 for destination in ids} for origin in ids}
    for (origin, destination), distance in edges.items():
        matrix[origin][destination] = distance
        matrix[destination][origin] = distance
    return matrix


def test_assemble_closes_the_loop_with_segments(square_points, offline_provider) -> None:
    matrix = GreatCircleDistanceSource().cost_matrix(square_points)

    result = RouteAssembler(offline_provider).assemble(square_points, matrix, "2-opt")

    assert result.algorithm == "2-opt"
    assert len(result.segments) == len(square_points)
    tour = result.ordered_points
    for index, segment in enumerate(result.segments):
        assert segment.from_point == tour[index]
        assert segment.to_point == tour[(index + 1) % len(tour)]
    assert result.segments[-1].to_point == tour[0]
    assert all(len(segment.steps) == 1 for segment in result.segments)


def test_assemble_reports_zero_savings_when_input_is_already_greedy(
    square_points, offline_provider
) -> None:
    matrix = GreatCircleDistanceSource().cost_matrix(square_points)

    result = RouteAssembler(offline_provider).assemble(square_points, matrix, "nearest-neighbor")

    assert result.algorithm == "nearest-neighbor"
    assert result.saved_distance_km == 0.0
    assert result.efficiency_percent == 0.0


def test_assemble_computes_savings_against_input_order(offline_provider) -> None:
    ids = [1, 2, 3, 4]
    points = [_point(point_id, 0.0, point_id / 100.0) for point_id in ids]
    # Input order 1-3-2-4 zigzags; the greedy tour walks 1-2-3-4.
    points = [points[0], points[2], points[1], points[3]]
    matrix = _matrix(
        {(1, 2): 1.0, (2, 3): 1.0, (3, 4): 1.0, (1, 4): 3.0, (1, 3): 2.0, (2, 4): 2.0},
        ids,
    )

    result = RouteAssembler(offline_provider).assemble(points, matrix, "nearest-neighbor")

    original = 2.0 + 1.0 + 2.0 + 3.0
    assert [point.id for point in result.ordered_points] == [1, 2, 3, 4]
    assert result.total_distance_km == pytest.approx(6.0)
    assert result.saved_distance_km == pytest.approx(original - 6.0)
    assert result.efficiency_percent == pytest.approx((original - 6.0) / original * 100)


def test_negative_savings_are_not_clamped(offline_provider) -> None:
    ids = [1, 2, 3, 4]
    points = [_point(point_id, 0.0, point_id / 100.0) for point_id in ids]
    matrix = _matrix(
        {(1, 2): 2.0, (1, 3): 1.0, (1, 4): 5.0, (2, 3): 5.0, (3, 4): 1.0, (2, 4): 50.0},
        ids,
    )

    result = RouteAssembler(offline_provider).assemble(points, matrix, "nearest-neighbor")

    assert [point.id for point in result.ordered_points] == [1, 3, 4, 2]
    assert result.total_distance_km == pytest.approx(54.0)
    assert result.saved_distance_km == pytest.approx(13.0 - 54.0)
    assert result.efficiency_percent == pytest.approx((13.0 - 54.0) / 13.0 * 100)


def test_efficiency_is_zero_when_original_distance_is_zero(offline_provider) -> None:
    points = [_point(1, 10.0, 10.0), _point(2, 10.0, 10.0), _point(3, 10.0, 10.0)]
    matrix = GreatCircleDistanceSource().cost_matrix(points)

    result = RouteAssembler(offline_provider).assemble(points, matrix, "2-opt")

    assert result.total_distance_km == 0.0
    assert result.saved_distance_km == 0.0
    assert result.efficiency_percent == 0.0


def test_segments_are_requested_in_tour_order(square_points, mocker) -> None:
    provider = mocker.Mock()
    provider.get_detailed_segment.side_effect = lambda start, finish: (start.id, finish.id)
    matrix = GreatCircleDistanceSource().cost_matrix(square_points)

    result = RouteAssembler(provider).assemble(square_points, matrix, "nearest-neighbor")

    assert result.segments == [(1, 2), (2, 3), (3, 4), (4, 1)]
    assert provider.get_detailed_segment.call_count == 4
