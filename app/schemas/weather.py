from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field


WeatherCondition = Literal["sunny", "partly_cloudy", "cloudy", "rainy", "snowy"]
PeriodName = Literal["morning", "afternoon", "evening"]


class WeatherSource(str, Enum):
    REGIONAL = "regional"
    GLOBAL = "global"
    DEMO = "demo"


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    city: str | None = None


class PositionFix(BaseModel):
    """Position reported by the client device."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    captured_at: datetime | None = Field(None, description="Timestamp of the fix (timezone-aware)")


class WeatherPeriod(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: PeriodName
    temperature: int
    icon: str
    rain_probability: int = Field(0, ge=0, le=100)


class WeatherDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str = Field(..., description="Display date, e.g. 10월 19일")
    day_name: str
    condition: WeatherCondition
    icon: str
    temperature: int
    temp_min: int
    temp_max: int
    feels_like: int
    humidity: int
    periods: List[WeatherPeriod] = Field(default_factory=list, max_length=3)


class ForecastResponse(BaseModel):
    location: Location
    today: WeatherDay
    tomorrow: WeatherDay
    source: WeatherSource
    notice: str | None = None
    background: str
