from django.urls import path

from route_optimizer import views

urlpatterns = [
    path("api/v1/health", views.health_view, name="health"),
    path("api/v1/addresses", views.address_list_view, name="address-list"),
    path("api/v1/addresses/<int:address_id>", views.address_detail_view, name="address-detail"),
    path("api/v1/geocode", views.geocode_view, name="geocode"),
    path("api/v1/reverse-geocode", views.reverse_geocode_view, name="reverse-geocode"),
    path("api/v1/optimize-route", views.optimize_route_view, name="optimize-route"),
    path("api/v1/routes", views.route_list_view, name="route-list"),
    path("api/v1/routes/<int:route_id>", views.route_detail_view, name="route-detail"),
]
