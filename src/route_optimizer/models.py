from __future__ import annotations

from django.db import models

from route_optimizer.services.types import Point


class Address(models.Model):
    objects = models.Manager["Address"]()

    name = models.CharField(max_length=255)
    address = models.CharField(max_length=500)
    latitude = models.FloatField()
    longitude = models.FloatField()
    verified = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("id",)

    def as_point(self) -> Point:
        return Point(
            id=self.pk,
            name=self.name,
            address=self.address,
            latitude=self.latitude,
            longitude=self.longitude,
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.address})"


class SavedRoute(models.Model):
    objects = models.Manager["SavedRoute"]()

    name = models.CharField(max_length=255, null=True, blank=True)
    algorithm = models.CharField(max_length=32)
    total_distance_km = models.FloatField()
    estimated_time_minutes = models.PositiveIntegerField()
    # Address ids in visiting order
    address_order = models.JSONField(default=list)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at", "-id")

    def __str__(self) -> str:
        return f"{self.algorithm} route, {self.total_distance_km:.1f} km"
