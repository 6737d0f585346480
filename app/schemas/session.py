from __future__ import annotations

from pydantic import BaseModel

from app.schemas.outfit import RecommendationSet, UserOptions
from app.schemas.weather import Location, WeatherDay, WeatherSource


class SessionResponse(BaseModel):
    today_weather: WeatherDay | None = None
    tomorrow_weather: WeatherDay | None = None
    weather_source: WeatherSource | None = None
    notice: str | None = None
    options: UserOptions
    recommendations: RecommendationSet | None = None
    tip: str | None = None
    location: Location | None = None
    is_loading: bool = False
    error: str | None = None
    weather_background: str = "sunny"
    background_class: str = "sunny"
