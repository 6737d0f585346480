from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Callable

import requests

from app.core.cache import cached_json
from app.core.config import settings
from app.schemas.weather import Location, PositionFix
from app.services.openweather_client import OpenWeatherClient
from app.services.weather_common import ProviderError


logger = logging.getLogger(__name__)

CURRENT_POSITION_LABEL = "현재 위치"


def default_location() -> Location:
    return Location(
        latitude=settings.default_latitude,
        longitude=settings.default_longitude,
        city=settings.default_city,
    )


class GeolocationService:
    """Best-effort location: fresh device fix, then IP estimate, then the default city."""

    def __init__(
        self,
        *,
        city_lookup: Callable[[float, float], str] | None = None,
        session: requests.Session | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.session = session or requests.Session()
        self.base_url = settings.ip_geolocation_base_url.rstrip("/")
        self.timeout = settings.geolocation_timeout_sec
        self.max_age_sec = settings.geolocation_max_age_sec
        self.city_lookup = city_lookup or OpenWeatherClient().lookup_city_name
        self.clock = clock or (lambda: datetime.now(tz=UTC))

    def locate(self, fix: PositionFix | None = None, client_ip: str | None = None) -> Location:
        if fix is not None:
            if self._is_fresh(fix):
                city = self._city_name(fix.latitude, fix.longitude)
                return Location(latitude=fix.latitude, longitude=fix.longitude, city=city or CURRENT_POSITION_LABEL)
            logger.info("Discarding stale position fix captured at %s", fix.captured_at)

        estimated = self._locate_by_ip(client_ip)
        if estimated is not None:
            return estimated

        logger.info("Location unavailable, using default city %s", settings.default_city)
        return default_location()

    def _is_fresh(self, fix: PositionFix) -> bool:
        if fix.captured_at is None:
            return True
        captured = fix.captured_at
        if captured.tzinfo is None:
            captured = captured.replace(tzinfo=UTC)
        age = (self.clock() - captured).total_seconds()
        return age <= self.max_age_sec

    def _city_name(self, lat: float, lon: float) -> str | None:
        def loader() -> str | None:
            try:
                return self.city_lookup(lat, lon)
            except ProviderError as exc:
                logger.warning("Reverse geocoding failed: %s", exc.code)
                return None

        return cached_json(f"geo:city:{lat:.3f}:{lon:.3f}", ttl_seconds=60 * 60 * 24, loader=loader)

    def _locate_by_ip(self, client_ip: str | None) -> Location | None:
        url = f"{self.base_url}/{client_ip}/json/" if client_ip else f"{self.base_url}/json/"

        def loader() -> dict[str, Any] | None:
            try:
                resp = self.session.get(url, timeout=self.timeout)
                resp.raise_for_status()
                payload = resp.json()
            except (requests.RequestException, ValueError) as exc:
                logger.warning("IP geolocation failed: %s", exc)
                return None
            if not isinstance(payload, dict):
                logger.warning("Unexpected IP geolocation payload: %s", payload)
                return None
            if payload.get("error"):
                logger.warning("IP geolocation returned no position: %s", payload.get("reason"))
                return None
            return {
                "latitude": payload.get("latitude"),
                "longitude": payload.get("longitude"),
                "city": payload.get("city"),
            }

        cached = cached_json(f"geo:ip:{client_ip or 'self'}", ttl_seconds=self.max_age_sec, loader=loader)
        if not cached or cached.get("latitude") is None or cached.get("longitude") is None:
            return None
        try:
            return Location(
                latitude=float(cached["latitude"]),
                longitude=float(cached["longitude"]),
                city=cached.get("city") or None,
            )
        except (TypeError, ValueError):
            return None


__all__ = ["CURRENT_POSITION_LABEL", "GeolocationService", "default_location"]
