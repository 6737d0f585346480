from __future__ import annotations

import math
from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.core.config import settings


# Python weekday() 기준 (월요일=0)
DAY_NAMES_KR = ("월요일", "화요일", "수요일", "목요일", "금요일", "토요일", "일요일")

DEFAULT_ICON = "☀️"


class ProviderError(Exception):
    """Raised when a weather provider cannot supply a forecast."""

    def __init__(self, code: str, provider: str) -> None:
        super().__init__(code)
        self.code = code
        self.provider = provider


class TransportError(ProviderError):
    """Provider unreachable, timed out or answered with a non-2xx status."""


class DataShapeError(ProviderError):
    """Provider answered but the payload lacks the expected data."""


def local_now() -> datetime:
    return datetime.now(tz=ZoneInfo(settings.local_timezone))


def format_date_kr(day: date) -> str:
    return f"{day.month}월 {day.day}일"


def day_name_kr(day: date) -> str:
    return DAY_NAMES_KR[day.weekday()]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


_BACKGROUND_CLASSES = {
    "sunny": "sunny",
    "clear": "sunny",
    "partly_cloudy": "partly-cloudy",
    "cloudy": "cloudy",
    "overcast": "cloudy",
    "rainy": "rainy",
    "drizzle": "rainy",
    "thunderstorm": "rainy",
    "snowy": "snowy",
    "snow": "snowy",
    "sleet": "snowy",
}


def background_class(condition: str | None) -> str:
    return _BACKGROUND_CLASSES.get(condition or "", "sunny")


__all__ = [
    "DataShapeError",
    "ProviderError",
    "TransportError",
    "background_class",
    "day_name_kr",
    "format_date_kr",
    "local_now",
    "round_half_up",
]
