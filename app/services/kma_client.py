from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from statistics import mean
from typing import Any, Callable

import requests

from app.core.config import settings
from app.schemas.weather import Location, WeatherDay, WeatherPeriod
from app.services.kma_grid import to_provider_grid
from app.services.weather_common import (
    DEFAULT_ICON,
    DataShapeError,
    TransportError,
    day_name_kr,
    format_date_kr,
    local_now,
    round_half_up,
)


logger = logging.getLogger(__name__)

PROVIDER = "kma"

# 단기예보 발표시각 (02, 05, ..., 23시), 발표 1시간 후부터 조회 가능
ISSUE_HOURS = (2, 5, 8, 11, 14, 17, 20, 23)
ISSUE_DELAY_HOURS = 1

# 하늘상태(SKY) 코드
SKY_CODES: dict[str, tuple[str, str]] = {
    "1": ("☀️", "sunny"),
    "3": ("⛅", "partly_cloudy"),
    "4": ("☁️", "cloudy"),
}

# 강수형태(PTY) 코드: 0 없음, 1 비, 2 비/눈, 3 눈, 4 소나기
PTY_CODES: dict[str, tuple[str, str]] = {
    "0": ("☀️", "sunny"),
    "1": ("🌧️", "rainy"),
    "2": ("🌨️", "rainy"),
    "3": ("🌨️", "snowy"),
    "4": ("🌧️", "rainy"),
}

PERIOD_TIMES = (("0600", "morning"), ("1200", "afternoon"), ("1800", "evening"))
REPRESENTATIVE_TIME = "1200"
DEFAULT_HUMIDITY = 50


def resolve_base_time(now: datetime) -> tuple[str, str]:
    """Return (base_date, base_time) of the latest forecast issue available at ``now``."""
    base_hour = ISSUE_HOURS[-1]
    for hour in reversed(ISSUE_HOURS):
        if now.hour >= hour + ISSUE_DELAY_HOURS:
            base_hour = hour
            break

    base_day = now.date()
    if now.hour < ISSUE_HOURS[0] + ISSUE_DELAY_HOURS:
        base_day -= timedelta(days=1)
        base_hour = ISSUE_HOURS[-1]

    return base_day.strftime("%Y%m%d"), f"{base_hour:02d}00"


def condition_for_codes(pty: str | None, sky: str | None) -> tuple[str, str]:
    """Map PTY/SKY codes to (icon, condition); precipitation wins over sky cover."""
    pty = pty or "0"
    if pty != "0":
        return PTY_CODES.get(pty, PTY_CODES["0"])
    return SKY_CODES.get(sky or "1", SKY_CODES["1"])


@dataclass(slots=True)
class _DaySamples:
    temps: list[float] = field(default_factory=list)
    temp: float | None = None
    temp_min: float | None = None
    temp_max: float | None = None
    pty: str = "0"
    sky: str = "1"
    humidity: int | None = None


class KmaForecastClient:
    """Short-term forecast (단기예보) client for the Korea Meteorological Administration."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        session: requests.Session | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.api_key = api_key or settings.kma_api_key
        self.base_url = (base_url or settings.kma_api_base_url).rstrip("/")
        self.timeout = settings.kma_timeout_sec
        self.session = session or requests.Session()
        self.clock = clock or local_now

    def fetch_forecast(self, location: Location) -> tuple[WeatherDay, WeatherDay]:
        now = self.clock()
        items = self._fetch_items(location, now)
        today = now.date()
        tomorrow = today + timedelta(days=1)
        index = _index_items(items)
        try:
            return (
                self._build_day(index, items, today),
                self._build_day(index, items, tomorrow),
            )
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            raise DataShapeError("kma_invalid_item", PROVIDER) from exc

    def _fetch_items(self, location: Location, now: datetime) -> list[dict[str, Any]]:
        if not self.api_key:
            raise TransportError("kma_api_key_missing", PROVIDER)

        grid = to_provider_grid(location.latitude, location.longitude)
        base_date, base_time = resolve_base_time(now)
        params = {
            "serviceKey": self.api_key,
            "numOfRows": settings.kma_num_of_rows,
            "pageNo": 1,
            "dataType": "JSON",
            "base_date": base_date,
            "base_time": base_time,
            "nx": grid.nx,
            "ny": grid.ny,
        }
        logger.debug("Requesting KMA forecast nx=%s ny=%s base=%s %s", grid.nx, grid.ny, base_date, base_time)
        try:
            response = self.session.get(
                f"{self.base_url}/getVilageFcst",
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError("kma_request_failed", PROVIDER) from exc
        # 인증키 오류 등은 JSON 대신 XML 본문으로 응답된다
        try:
            payload = response.json()
        except ValueError as exc:
            raise DataShapeError("kma_invalid_response", PROVIDER) from exc

        if not isinstance(payload, dict):
            raise DataShapeError("kma_invalid_response", PROVIDER)
        body = payload.get("response")
        if not isinstance(body, dict):
            raise DataShapeError("kma_invalid_response", PROVIDER)
        header = body.get("header")
        result_code = header.get("resultCode") if isinstance(header, dict) else None
        if result_code is not None and result_code != "00":
            raise DataShapeError(f"kma_result_{result_code}", PROVIDER)

        inner = body.get("body")
        container = inner.get("items") if isinstance(inner, dict) else None
        items = container.get("item") if isinstance(container, dict) else None
        if not items:
            raise DataShapeError("kma_items_missing", PROVIDER)
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise DataShapeError("kma_invalid_items", PROVIDER)
        return items

    def _build_day(self, index: dict[tuple[str, str, str], str], items: list[dict[str, Any]], day: date) -> WeatherDay:
        samples = _collect_samples(items, day.strftime("%Y%m%d"))
        icon, condition = condition_for_codes(samples.pty, samples.sky)

        temps = samples.temps
        temperature = _pick(samples.temp, lambda: mean(temps), temps)
        temp_min = _pick(samples.temp_min, lambda: min(temps), temps)
        temp_max = _pick(samples.temp_max, lambda: max(temps), temps)

        return WeatherDay(
            date=format_date_kr(day),
            day_name=day_name_kr(day),
            condition=condition,
            icon=icon,
            temperature=temperature,
            temp_min=temp_min,
            temp_max=temp_max,
            # 기상청 단기예보는 체감온도를 제공하지 않아 기온 값을 그대로 사용한다
            feels_like=temperature,
            humidity=samples.humidity if samples.humidity is not None else DEFAULT_HUMIDITY,
            periods=_build_periods(index, day.strftime("%Y%m%d")),
        )


def _index_items(items: list[dict[str, Any]]) -> dict[tuple[str, str, str], str]:
    index: dict[tuple[str, str, str], str] = {}
    for item in items:
        key = (str(item.get("fcstDate")), str(item.get("fcstTime")), str(item.get("category")))
        index.setdefault(key, str(item.get("fcstValue")))
    return index


def _collect_samples(items: list[dict[str, Any]], day_str: str) -> _DaySamples:
    samples = _DaySamples()
    for item in items:
        if str(item.get("fcstDate")) != day_str:
            continue
        category = item.get("category")
        value = item.get("fcstValue")
        at_noon = str(item.get("fcstTime")) == REPRESENTATIVE_TIME

        if category == "TMP":
            temp = _to_float(value)
            if temp is None:
                continue
            samples.temps.append(temp)
            if at_noon:
                samples.temp = temp
        elif category == "TMN":
            samples.temp_min = _to_float(value)
        elif category == "TMX":
            samples.temp_max = _to_float(value)
        elif category == "PTY" and at_noon:
            samples.pty = str(value)
        elif category == "SKY" and at_noon:
            samples.sky = str(value)
        elif category == "REH" and at_noon:
            humidity = _to_float(value)
            samples.humidity = round_half_up(humidity) if humidity is not None else None
    return samples


def _build_periods(index: dict[tuple[str, str, str], str], day_str: str) -> list[WeatherPeriod]:
    periods: list[WeatherPeriod] = []
    for time_str, name in PERIOD_TIMES:
        temp = _to_float(index.get((day_str, time_str, "TMP")))
        if temp is None:
            continue
        icon, _ = condition_for_codes(index.get((day_str, time_str, "PTY")), index.get((day_str, time_str, "SKY")))
        pop = _to_float(index.get((day_str, time_str, "POP")))
        periods.append(
            WeatherPeriod(
                name=name,
                temperature=round_half_up(temp),
                icon=icon or DEFAULT_ICON,
                rain_probability=round_half_up(pop) if pop is not None else 0,
            )
        )
    return periods


def _pick(explicit: float | None, derive: Callable[[], float], samples: list[float]) -> int:
    if explicit is not None:
        return round_half_up(explicit)
    if samples:
        return round_half_up(derive())
    return 0


def _to_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


__all__ = ["KmaForecastClient", "condition_for_codes", "resolve_base_time"]
