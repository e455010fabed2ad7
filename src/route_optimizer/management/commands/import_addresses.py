from __future__ import annotations

from pathlib import Path
from typing import Any

import polars as pl
from django.core.management.base import BaseCommand, CommandError

from route_optimizer.models import Address


class Command(BaseCommand):
    help = "Import named addresses with coordinates from a CSV using Polars."

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--csv-path",
            type=str,
            required=True,
            help="Path to a CSV with Name, Address, Latitude and Longitude columns",
        )
        parser.add_argument(
            "--replace",
            action="store_true",
            help="Delete existing addresses before importing",
        )

    def handle(self, *_: Any, **options: Any) -> None:
        csv_path = Path(options["csv_path"])
        if not csv_path.exists():
            raise CommandError(f"CSV file does not exist: {csv_path}")

        frame = self._load_and_transform(csv_path)
        records = frame.to_dicts()

        if options["replace"]:
            Address.objects.all().delete()

        existing = {
            (address.name, address.address): address
            for address in Address.objects.filter(name__in=[row["name"] for row in records])
        }

        to_create: list[Address] = []
        to_update: list[Address] = []

        for row in records:
            address = existing.get((row["name"], row["address"]))
            if address is None:
                to_create.append(
                    Address(
                        name=row["name"],
                        address=row["address"],
                        latitude=row["latitude"],
                        longitude=row["longitude"],
                        verified=True,
                    )
                )
                continue

            address.latitude = row["latitude"]
            address.longitude = row["longitude"]
            address.verified = True
            to_update.append(address)

        if to_create:
            Address.objects.bulk_create(to_create, batch_size=1000)
        if to_update:
            Address.objects.bulk_update(
                to_update, ["latitude", "longitude", "verified"], batch_size=1000
            )

        self.stdout.write(
            self.style.SUCCESS(
                "Imported addresses: "
                f"{len(records)} rows normalized, "
                f"{len(to_create)} created, {len(to_update)} updated"
            )
        )

    @staticmethod
    def _load_and_transform(csv_path: Path) -> pl.DataFrame:
        frame = pl.read_csv(csv_path, infer_schema_length=5000)
        required_columns = {"Name", "Address", "Latitude", "Longitude"}
        missing_columns = required_columns.difference(frame.columns)
        if missing_columns:
            raise CommandError(f"Missing expected columns: {sorted(missing_columns)}")

        return (
            frame.select(
                pl.col("Name")
                .cast(pl.Utf8, strict=False)
                .str.strip_chars()
                .fill_null("")
                .alias("name"),
                pl.col("Address")
                .cast(pl.Utf8, strict=False)
                .str.strip_chars()
                .fill_null("")
                .alias("address"),
                pl.col("Latitude").cast(pl.Float64, strict=False).alias("latitude"),
                pl.col("Longitude").cast(pl.Float64, strict=False).alias("longitude"),
            )
            .filter(
                (pl.col("name").str.len_chars() > 0)
                & (pl.col("address").str.len_chars() > 0)
                & pl.col("latitude").is_between(-90.0, 90.0)
                & pl.col("longitude").is_between(-180.0, 180.0)
            )
            .unique(subset=["name", "address"], keep="last", maintain_order=True)
        )
