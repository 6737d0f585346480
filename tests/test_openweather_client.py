from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
import requests

from app.schemas.weather import Location
from app.services.openweather_client import OpenWeatherClient, icon_condition
from app.services.weather_common import DataShapeError, TransportError


SEOUL = Location(latitude=37.5665, longitude=126.9780)
KST_OFFSET = 9 * 60 * 60


class DummyResponse:
    def __init__(self, payload: dict) -> None:
        self._payload = payload
        self.status_code = 200

    def raise_for_status(self) -> None:  # pragma: no cover - no-op
        return None

    def json(self) -> dict:
        return self._payload


class DummySession:
    def __init__(self, current: dict, forecast: dict, error: Exception | None = None) -> None:
        self.current = current
        self.forecast = forecast
        self.error = error
        self.calls: list[dict] = []

    def get(self, url: str, params: dict, timeout: float) -> DummyResponse:
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.error:
            raise self.error
        if url.endswith("/forecast"):
            return DummyResponse(self.forecast)
        return DummyResponse(self.current)


def _entry(at: datetime, temp: float, icon: str = "01d", pop: float = 0.0, feels_like: float | None = None) -> dict:
    return {
        "dt": int(at.timestamp()),
        "dt_txt": at.strftime("%Y-%m-%d %H:%M:%S"),
        "main": {"temp": temp, "feels_like": temp if feels_like is None else feels_like, "humidity": 60},
        "weather": [{"icon": icon, "description": "test"}],
        "pop": pop,
    }


def _current(temp: float = 14.6, icon: str = "02d") -> dict:
    return {
        "name": "Seoul",
        "timezone": KST_OFFSET,
        "weather": [{"icon": icon, "description": "구름 조금"}],
        "main": {"temp": temp, "feels_like": 13.4, "temp_min": 12, "temp_max": 16, "humidity": 55},
    }


def _kst_forecast() -> dict:
    # 2026-10-19 12:00 KST(03:00 UTC)부터 3시간 간격
    start = datetime(2026, 10, 19, 3, 0, tzinfo=UTC)
    temps = [15, 17, 13, 10, 7, 6, 5, 8, 12, 14, 11, 9, 6, 5, 7, 9]
    entries = [_entry(start + timedelta(hours=3 * i), temp) for i, temp in enumerate(temps)]
    entries[8] = _entry(start + timedelta(hours=24), 12, icon="10d", pop=0.4, feels_like=10.2)
    entries[8]["main"]["humidity"] = 80
    return {"list": entries, "city": {"name": "Seoul", "timezone": KST_OFFSET}}


def _client(session: DummySession, now: datetime) -> OpenWeatherClient:
    return OpenWeatherClient(api_key="dummy", session=session, clock=lambda: now)


def test_icon_table_lookup() -> None:
    assert icon_condition("13n") == ("🌨️", "snowy")
    assert icon_condition("50d") == ("🌫️", "cloudy")
    assert icon_condition("99x") == ("☀️", "sunny")
    assert icon_condition(None) == ("☀️", "sunny")


def test_fetch_forecast_maps_current_and_forecast() -> None:
    session = DummySession(_current(), _kst_forecast())
    now = datetime(2026, 10, 19, 3, 0, tzinfo=UTC)

    today, tomorrow = _client(session, now).fetch_forecast(SEOUL)

    assert [call["url"].rsplit("/", 1)[-1] for call in session.calls] == ["weather", "forecast"]
    assert session.calls[0]["params"]["units"] == "metric"
    assert session.calls[0]["params"]["lang"] == "kr"

    assert today.date == "10월 19일"
    assert today.condition == "partly_cloudy"
    assert today.icon == "⛅"
    assert (today.temperature, today.feels_like, today.humidity) == (15, 13, 55)
    assert (today.temp_min, today.temp_max) == (10, 17)
    assert [(p.name, p.temperature) for p in today.periods] == [("afternoon", 15), ("evening", 13)]

    assert tomorrow.date == "10월 20일"
    assert tomorrow.day_name == "화요일"
    assert tomorrow.condition == "rainy"
    assert tomorrow.icon == "🌦️"
    assert (tomorrow.temperature, tomorrow.feels_like, tomorrow.humidity) == (12, 10, 80)
    assert (tomorrow.temp_min, tomorrow.temp_max) == (5, 14)
    assert [(p.name, p.temperature, p.rain_probability) for p in tomorrow.periods] == [
        ("morning", 5, 0),
        ("afternoon", 12, 40),
        ("evening", 11, 0),
    ]


def test_today_range_falls_back_to_current_endpoint() -> None:
    start = datetime(2026, 10, 20, 0, 0, tzinfo=UTC)
    forecast = {
        "list": [_entry(start + timedelta(hours=3 * i), 10 + i) for i in range(10)],
        "city": {"timezone": 0},
    }
    current = _current()
    current["timezone"] = 0
    now = datetime(2026, 10, 19, 22, 30, tzinfo=UTC)

    today, _ = _client(DummySession(current, forecast), now).fetch_forecast(SEOUL)

    assert (today.temp_min, today.temp_max) == (12, 16)
    assert today.periods == []


def test_tomorrow_without_noon_entry_uses_ninth_entry() -> None:
    day1 = datetime(2026, 10, 19, 15, 0, tzinfo=UTC)
    hours = [0, 3, 6, 9, 12, 15, 18]  # 19일 15시 ~ 20일 09시
    entries = [_entry(day1 + timedelta(hours=h), 5 + i) for i, h in enumerate(hours)]
    day3 = datetime(2026, 10, 21, 0, 0, tzinfo=UTC)
    entries.append(_entry(day3, 20))
    entries.append(_entry(day3 + timedelta(hours=3), 21, icon="13d"))
    forecast = {"list": entries, "city": {"timezone": 0}}
    current = _current()
    current["timezone"] = 0
    now = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)

    _, tomorrow = _client(DummySession(current, forecast), now).fetch_forecast(SEOUL)

    # list[8]은 모레 항목이지만 그대로 사용한다
    assert tomorrow.temperature == 21
    assert tomorrow.condition == "snowy"
    assert (tomorrow.temp_min, tomorrow.temp_max) == (8, 11)
    assert [p.name for p in tomorrow.periods] == ["morning"]


def test_missing_api_key_raises_transport_error() -> None:
    client = OpenWeatherClient(api_key="dummy", session=DummySession(_current(), _kst_forecast()))
    client.api_key = None

    with pytest.raises(TransportError) as exc:
        client.fetch_forecast(SEOUL)
    assert exc.value.code == "openweather_api_key_missing"


def test_request_failure_raises_transport_error() -> None:
    session = DummySession(_current(), _kst_forecast(), error=requests.Timeout("slow"))

    with pytest.raises(TransportError):
        _client(session, datetime(2026, 10, 19, 3, 0, tzinfo=UTC)).fetch_forecast(SEOUL)


def test_empty_forecast_list_raises_data_shape_error() -> None:
    session = DummySession(_current(), {"list": [], "city": {"timezone": KST_OFFSET}})

    with pytest.raises(DataShapeError) as exc:
        _client(session, datetime(2026, 10, 19, 3, 0, tzinfo=UTC)).fetch_forecast(SEOUL)
    assert exc.value.code == "openweather_forecast_missing"


def test_weather_entry_without_icon_object_uses_default_icon() -> None:
    current = _current()
    current["weather"] = [None]
    session = DummySession(current, _kst_forecast())

    today, _ = _client(session, datetime(2026, 10, 19, 3, 0, tzinfo=UTC)).fetch_forecast(SEOUL)

    assert (today.icon, today.condition) == ("☀️", "sunny")


def _broken_main() -> dict:
    forecast = _kst_forecast()
    forecast["list"][0]["main"] = None
    return forecast


def _huge_offset() -> dict:
    forecast = _kst_forecast()
    forecast["city"]["timezone"] = 10**15
    return forecast


@pytest.mark.parametrize("forecast", [_broken_main(), _huge_offset()])
def test_malformed_forecast_entries_raise_data_shape_error(forecast: dict) -> None:
    session = DummySession(_current(), forecast)

    with pytest.raises(DataShapeError) as exc:
        _client(session, datetime(2026, 10, 19, 3, 0, tzinfo=UTC)).fetch_forecast(SEOUL)
    assert exc.value.code == "openweather_invalid_entry"


def test_lookup_city_name() -> None:
    client = _client(DummySession(_current(), {}), datetime(2026, 10, 19, 3, 0, tzinfo=UTC))
    assert client.lookup_city_name(37.5665, 126.9780) == "Seoul"

    nameless = _current()
    nameless["name"] = ""
    client = _client(DummySession(nameless, {}), datetime(2026, 10, 19, 3, 0, tzinfo=UTC))
    assert client.lookup_city_name(37.5665, 126.9780) == "알 수 없음"
