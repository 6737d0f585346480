from __future__ import annotations

import ipaddress

from fastapi import Request

from app.services.app_state import AppState
from app.services.session_service import WeatherWearSession
from app.services.weather_service import WeatherSourceService


_weather_service: WeatherSourceService | None = None
_session: WeatherWearSession | None = None


def get_weather_service() -> WeatherSourceService:
    global _weather_service
    if _weather_service is None:
        _weather_service = WeatherSourceService()
    return _weather_service


def get_weather_session() -> WeatherWearSession:
    """Single-user session; options and last location are restored from storage."""
    global _session
    if _session is None:
        _session = WeatherWearSession(AppState(), weather_service=get_weather_service())
    return _session


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    candidate = forwarded.split(",")[0].strip() if forwarded else (request.client.host if request.client else None)
    if not candidate:
        return None
    try:
        address = ipaddress.ip_address(candidate)
    except ValueError:
        return None
    # 사설/루프백 주소는 IP 위치 추정이 불가능하므로 서버 자신의 위치로 조회
    if address.is_private or address.is_loopback:
        return None
    return candidate
