from __future__ import annotations

from typing import Any

from django.core.management.base import BaseCommand, CommandError

from route_optimizer.exceptions import InvalidInputError, NotFoundError
from route_optimizer.services.optimizer import RouteOptimizerService


class Command(BaseCommand):
    help = "Optimize the visiting order of stored addresses and print the tour."

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument("address_ids", nargs="+", type=int, help="Address ids to visit")
        parser.add_argument(
            "--algorithm",
            choices=["2-opt", "nearest-neighbor"],
            default="2-opt",
            help="Tour construction algorithm",
        )

    def handle(self, *_: Any, **options: Any) -> None:
        try:
            result = RouteOptimizerService().optimize_route(
                options["address_ids"], options["algorithm"]
            )
        except (InvalidInputError, NotFoundError) as exc:
            raise CommandError(str(exc)) from exc

        for position, point in enumerate(result.ordered_points, start=1):
            self.stdout.write(f"{position:>3}. {point.name} ({point.address})")

        for segment in result.segments:
            self.stdout.write(
                f"{segment.from_point.name} -> {segment.to_point.name}: "
                f"{segment.distance_km:.1f} km, {segment.duration_minutes} min"
            )

        self.stdout.write(
            self.style.SUCCESS(
                f"{result.algorithm}: {result.total_distance_km:.2f} km, "
                f"~{result.estimated_time_minutes} min, "
                f"saved {result.saved_distance_km:.2f} km ({result.efficiency_percent:.1f}%)"
            )
        )
