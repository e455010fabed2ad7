from django.contrib import admin

from route_optimizer.models import Address, SavedRoute


@admin.register(Address)
class AddressAdmin(admin.ModelAdmin):
    list_display = ("name", "address", "latitude", "longitude", "verified", "created_at")
    list_filter = ("verified",)
    search_fields = ("name", "address")
    ordering = ("id",)


@admin.register(SavedRoute)
class SavedRouteAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "name",
        "algorithm",
        "total_distance_km",
        "estimated_time_minutes",
        "created_at",
    )
    list_filter = ("algorithm",)
    ordering = ("-created_at",)
