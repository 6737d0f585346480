from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
import requests

from app.schemas.weather import Location, PositionFix
from app.services import geolocation
from app.services.geolocation import CURRENT_POSITION_LABEL, GeolocationService
from app.services.weather_common import TransportError


NOW = datetime(2026, 10, 19, 3, 0, tzinfo=UTC)


class DummyResponse:
    def __init__(self, payload: dict) -> None:
        self._payload = payload
        self.status_code = 200

    def raise_for_status(self) -> None:  # pragma: no cover - no-op
        return None

    def json(self) -> dict:
        return self._payload


class DummySession:
    def __init__(self, payload: dict | None = None, error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.urls: list[str] = []

    def get(self, url: str, timeout: float) -> DummyResponse:
        self.urls.append(url)
        if self.error:
            raise self.error
        return DummyResponse(self.payload)


@pytest.fixture(autouse=True)
def _no_redis(monkeypatch):
    monkeypatch.setattr(geolocation, "cached_json", lambda key, ttl_seconds, loader: loader())


def _service(session: DummySession, city_lookup=lambda lat, lon: "Seoul") -> GeolocationService:
    return GeolocationService(city_lookup=city_lookup, session=session, clock=lambda: NOW)


def test_fresh_fix_is_used_with_reverse_geocoded_city() -> None:
    session = DummySession()
    fix = PositionFix(latitude=37.5, longitude=127.0, captured_at=NOW - timedelta(seconds=60))

    location = _service(session).locate(fix)

    assert location == Location(latitude=37.5, longitude=127.0, city="Seoul")
    assert session.urls == []


def test_fix_without_city_falls_back_to_current_position_label() -> None:
    def failing_lookup(lat: float, lon: float) -> str:
        raise TransportError("openweather_api_key_missing", "openweather")

    location = _service(DummySession(), failing_lookup).locate(PositionFix(latitude=37.5, longitude=127.0))

    assert location.city == CURRENT_POSITION_LABEL


def test_stale_fix_falls_back_to_ip_estimate() -> None:
    session = DummySession({"latitude": 35.1796, "longitude": 129.0756, "city": "Busan"})
    fix = PositionFix(latitude=37.5, longitude=127.0, captured_at=NOW - timedelta(minutes=10))

    location = _service(session).locate(fix, client_ip="203.0.113.7")

    assert location == Location(latitude=35.1796, longitude=129.0756, city="Busan")
    assert session.urls == ["https://ipapi.co/203.0.113.7/json/"]


def test_ip_lookup_without_client_ip_uses_self_endpoint() -> None:
    session = DummySession({"latitude": 40.7, "longitude": -74.0, "city": "New York"})

    location = _service(session).locate()

    assert location.city == "New York"
    assert session.urls == ["https://ipapi.co/json/"]


@pytest.mark.parametrize(
    "session",
    [
        DummySession(error=requests.Timeout("slow")),
        DummySession({"error": True, "reason": "RateLimited"}),
        DummySession({"city": "Nowhere"}),
    ],
)
def test_failed_ip_lookup_uses_default_city(session: DummySession) -> None:
    location = _service(session).locate()

    assert location == Location(latitude=37.5665, longitude=126.9780, city="서울")
