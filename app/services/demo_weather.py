from __future__ import annotations

from datetime import datetime, timedelta

from app.schemas.weather import WeatherDay, WeatherPeriod
from app.services.weather_common import day_name_kr, format_date_kr


DEMO_NOTICE = "날씨 API를 사용할 수 없어 데모 데이터로 표시합니다."


def demo_forecast(now: datetime) -> tuple[WeatherDay, WeatherDay]:
    """Fixed offline forecast: a clear cold day followed by snow."""
    today = now.date()
    tomorrow = today + timedelta(days=1)

    demo_today = WeatherDay(
        date=format_date_kr(today),
        day_name=day_name_kr(today),
        condition="sunny",
        icon="☀️",
        temperature=5,
        temp_min=2,
        temp_max=8,
        feels_like=3,
        humidity=55,
        periods=[
            WeatherPeriod(name="morning", temperature=3, icon="☀️", rain_probability=10),
            WeatherPeriod(name="afternoon", temperature=7, icon="⛅", rain_probability=15),
            WeatherPeriod(name="evening", temperature=4, icon="☁️", rain_probability=20),
        ],
    )
    demo_tomorrow = WeatherDay(
        date=format_date_kr(tomorrow),
        day_name=day_name_kr(tomorrow),
        condition="snowy",
        icon="🌨️",
        temperature=-2,
        temp_min=-5,
        temp_max=2,
        feels_like=-5,
        humidity=70,
        periods=[
            WeatherPeriod(name="morning", temperature=-1, icon="🌨️", rain_probability=60),
            WeatherPeriod(name="afternoon", temperature=2, icon="🌨️", rain_probability=70),
            WeatherPeriod(name="evening", temperature=0, icon="☁️", rain_probability=50),
        ],
    )
    return demo_today, demo_tomorrow


__all__ = ["DEMO_NOTICE", "demo_forecast"]
