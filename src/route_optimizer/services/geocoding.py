from __future__ import annotations

import hashlib
import time
from typing import Any

import httpx
from django.conf import settings
from django.core.cache import cache

from route_optimizer.exceptions import ExternalServiceError, InvalidLocationError
from route_optimizer.services.types import GeocodeResult, GeoPoint


class GeocodingClient:
    def __init__(self) -> None:
        self.base_url = settings.GEOCODING_BASE_URL.rstrip("/")
        self.timeout = settings.GEOCODING_TIMEOUT_SECONDS
        self.retry_count = settings.GEOCODING_RETRY_COUNT
        self.user_agent = settings.GEOCODING_USER_AGENT

    def geocode(self, query: str) -> GeocodeResult:
        cache_key = self._cache_key("geocode", query.lower())
        cached = cache.get(cache_key)
        if cached:
            return GeocodeResult(
                point=GeoPoint(latitude=cached["latitude"], longitude=cached["longitude"]),
                display_name=cached["display_name"],
            )

        payload = self._get("/search", {"q": query, "format": "json", "limit": 1})
        result = self._parse_search(payload)
        cache.set(
            cache_key,
            {
                "latitude": result.point.latitude,
                "longitude": result.point.longitude,
                "display_name": result.display_name,
            },
            timeout=settings.GEOCODE_CACHE_TTL_SECONDS,
        )
        return result

    def reverse(self, latitude: float, longitude: float) -> str:
        cache_key = self._cache_key("reverse", f"{latitude:.6f}:{longitude:.6f}")
        cached = cache.get(cache_key)
        if cached:
            return cached

        payload = self._get("/reverse", {"lat": latitude, "lon": longitude, "format": "json"})
        display_name = payload.get("display_name") if isinstance(payload, dict) else None
        if not display_name:
            raise InvalidLocationError("Coordinates could not be resolved")

        cache.set(cache_key, display_name, timeout=settings.GEOCODE_CACHE_TTL_SECONDS)
        return display_name

    def _get(self, path: str, params: dict[str, Any]) -> Any:
        for attempt in range(self.retry_count + 1):
            try:
                response = httpx.get(
                    f"{self.base_url}{path}",
                    params=params,
                    timeout=self.timeout,
                    headers={
                        "Accept": "application/json",
                        "User-Agent": self.user_agent,
                    },
                )
                response.raise_for_status()
                return response.json()
            except (httpx.HTTPError, ValueError) as exc:
                if attempt >= self.retry_count:
                    raise ExternalServiceError("Geocoding request failed") from exc
                time.sleep(0.3 * (attempt + 1))

        raise ExternalServiceError("Geocoding request failed")

    @staticmethod
    def _cache_key(kind: str, value: str) -> str:
        digest = hashlib.sha256(value.encode()).hexdigest()
        return f"{kind}:{digest}"

    @staticmethod
    def _parse_search(payload: Any) -> GeocodeResult:
        if not isinstance(payload, list) or not payload:
            raise InvalidLocationError("Location could not be resolved")

        first = payload[0]
        try:
            latitude = float(first["lat"])
            longitude = float(first["lon"])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidLocationError("Invalid geocoding response") from exc

        return GeocodeResult(
            point=GeoPoint(latitude=latitude, longitude=longitude),
            display_name=str(first.get("display_name", "")),
        )
