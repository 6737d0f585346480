from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timedelta
from typing import Any, Callable, Dict

import requests

from app.core.config import settings
from app.schemas.weather import Location, WeatherDay, WeatherPeriod
from app.services.weather_common import (
    DEFAULT_ICON,
    DataShapeError,
    TransportError,
    day_name_kr,
    format_date_kr,
    round_half_up,
)


logger = logging.getLogger(__name__)

PROVIDER = "openweather"

ICON_CONDITIONS: Dict[str, tuple[str, str]] = {
    "01d": ("☀️", "sunny"),
    "01n": ("🌙", "sunny"),
    "02d": ("⛅", "partly_cloudy"),
    "02n": ("☁️", "partly_cloudy"),
    "03d": ("☁️", "cloudy"),
    "03n": ("☁️", "cloudy"),
    "04d": ("☁️", "cloudy"),
    "04n": ("☁️", "cloudy"),
    "09d": ("🌧️", "rainy"),
    "09n": ("🌧️", "rainy"),
    "10d": ("🌦️", "rainy"),
    "10n": ("🌧️", "rainy"),
    "11d": ("⛈️", "rainy"),
    "11n": ("⛈️", "rainy"),
    "13d": ("🌨️", "snowy"),
    "13n": ("🌨️", "snowy"),
    "50d": ("🌫️", "cloudy"),
    "50n": ("🌫️", "cloudy"),
}
FALLBACK_ICON = (DEFAULT_ICON, "sunny")

PERIOD_HOURS = ((6, "morning"), (12, "afternoon"), (18, "evening"))
# 정오 이후 예보가 없을 때 사용하는 대략 24시간 뒤 항목 (3시간 간격 기준)
TOMORROW_FALLBACK_INDEX = 8
UNKNOWN_CITY = "알 수 없음"


def icon_condition(icon_code: str | None) -> tuple[str, str]:
    return ICON_CONDITIONS.get(icon_code or "", FALLBACK_ICON)


class OpenWeatherClient:
    """OpenWeatherMap current weather + 5 day / 3 hour forecast client."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        session: requests.Session | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.api_key = api_key or settings.weather_api_key
        self.base_url = (base_url or settings.weather_api_base_url).rstrip("/")
        self.timeout = settings.weather_timeout_sec
        self.session = session or requests.Session()
        self.clock = clock or (lambda: datetime.now(tz=UTC))

    def fetch_forecast(self, location: Location) -> tuple[WeatherDay, WeatherDay]:
        current = self._request("/weather", location.latitude, location.longitude)
        forecast = self._request("/forecast", location.latitude, location.longitude)

        main = current.get("main")
        if not isinstance(main, dict) or main.get("temp") is None:
            raise DataShapeError("openweather_current_missing", PROVIDER)
        entries = forecast.get("list")
        if not isinstance(entries, list) or not entries:
            raise DataShapeError("openweather_forecast_missing", PROVIDER)

        try:
            offset = _utc_offset(forecast.get("city") or {}, current)
            local_today = (self.clock().astimezone(UTC) + offset).date()
            local_tomorrow = local_today + timedelta(days=1)
            today = self._build_today(current, entries, offset, local_today)
            tomorrow = self._build_tomorrow(entries, offset, local_tomorrow)
        except (AttributeError, KeyError, TypeError, ValueError, OverflowError) as exc:
            raise DataShapeError("openweather_invalid_entry", PROVIDER) from exc
        return today, tomorrow

    def lookup_city_name(self, lat: float, lon: float) -> str:
        payload = self._request("/weather", lat, lon)
        return payload.get("name") or UNKNOWN_CITY

    def _request(self, path: str, lat: float, lon: float) -> dict[str, Any]:
        if not self.api_key:
            raise TransportError("openweather_api_key_missing", PROVIDER)
        params = {
            "lat": lat,
            "lon": lon,
            "appid": self.api_key,
            "units": settings.weather_units,
            "lang": settings.weather_lang,
        }
        try:
            resp = self.session.get(
                f"{self.base_url}{path}",
                params=params,
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError("openweather_request_failed", PROVIDER) from exc
        try:
            payload = resp.json()
        except ValueError as exc:
            raise DataShapeError("openweather_invalid_response", PROVIDER) from exc
        if not isinstance(payload, dict):
            raise DataShapeError("openweather_invalid_response", PROVIDER)
        return payload

    def _build_today(
        self,
        current: dict[str, Any],
        entries: list[dict[str, Any]],
        offset: timedelta,
        day: date,
    ) -> WeatherDay:
        main = current["main"]
        icon, condition = icon_condition(_first_icon(current))
        temps = [entry["main"]["temp"] for entry in entries if _local_time(entry, offset).date() == day]
        if temps:
            temp_min, temp_max = min(temps), max(temps)
        else:
            temp_min = main.get("temp_min", main["temp"])
            temp_max = main.get("temp_max", main["temp"])

        return WeatherDay(
            date=format_date_kr(day),
            day_name=day_name_kr(day),
            condition=condition,
            icon=icon,
            temperature=round_half_up(main["temp"]),
            temp_min=round_half_up(temp_min),
            temp_max=round_half_up(temp_max),
            feels_like=round_half_up(main.get("feels_like", main["temp"])),
            humidity=int(main.get("humidity") or 0),
            periods=_build_periods(entries, offset, day),
        )

    def _build_tomorrow(self, entries: list[dict[str, Any]], offset: timedelta, day: date) -> WeatherDay:
        noon_entry = next(
            (
                entry
                for entry in entries
                if _local_time(entry, offset).date() == day and _local_time(entry, offset).hour >= 12
            ),
            None,
        )
        if noon_entry is None and len(entries) > TOMORROW_FALLBACK_INDEX:
            # 자정 근처 요청 시 다른 날짜의 항목이 선택될 수 있다
            logger.debug("No noon entry for %s, using forecast index %s", day, TOMORROW_FALLBACK_INDEX)
            noon_entry = entries[TOMORROW_FALLBACK_INDEX]

        temps = [entry["main"]["temp"] for entry in entries if _local_time(entry, offset).date() == day]
        noon_main = (noon_entry or {}).get("main") or {}
        icon, condition = icon_condition(_first_icon(noon_entry or {}))

        return WeatherDay(
            date=format_date_kr(day),
            day_name=day_name_kr(day),
            condition=condition,
            icon=icon,
            temperature=round_half_up(noon_main.get("temp") or 0),
            temp_min=round_half_up(min(temps)) if temps else 0,
            temp_max=round_half_up(max(temps)) if temps else 0,
            feels_like=round_half_up(noon_main.get("feels_like") or 0),
            humidity=int(noon_main.get("humidity") or 0),
            periods=_build_periods(entries, offset, day),
        )


def _build_periods(entries: list[dict[str, Any]], offset: timedelta, day: date) -> list[WeatherPeriod]:
    periods: list[WeatherPeriod] = []
    for hour, name in PERIOD_HOURS:
        match = next(
            (
                entry
                for entry in entries
                if _local_time(entry, offset).date() == day and _local_time(entry, offset).hour == hour
            ),
            None,
        )
        if match is None:
            continue
        icon, _ = icon_condition(_first_icon(match))
        periods.append(
            WeatherPeriod(
                name=name,
                temperature=round_half_up(match["main"]["temp"]),
                icon=icon,
                rain_probability=round_half_up((match.get("pop") or 0) * 100),
            )
        )
    return periods


def _local_time(entry: dict[str, Any], offset: timedelta) -> datetime:
    return datetime.fromtimestamp(int(entry["dt"]), tz=UTC) + offset


def _utc_offset(city: dict[str, Any], current: dict[str, Any]) -> timedelta:
    seconds = city.get("timezone", current.get("timezone", 0))
    try:
        return timedelta(seconds=int(seconds or 0))
    except (TypeError, ValueError):
        return timedelta(0)


def _first_icon(payload: dict[str, Any]) -> str | None:
    weather_entries = payload.get("weather")
    if not isinstance(weather_entries, list) or not weather_entries:
        return None
    weather_entry = weather_entries[0]
    return weather_entry.get("icon") if isinstance(weather_entry, dict) else None


__all__ = ["OpenWeatherClient", "icon_condition"]
