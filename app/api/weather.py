from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_weather_service
from app.schemas.weather import ForecastResponse, Location
from app.services.weather_common import background_class
from app.services.weather_service import WeatherSourceService

router = APIRouter(prefix="/weather", tags=["weather"])


@router.get("", response_model=ForecastResponse)
def get_forecast(
    lat: float = Query(..., ge=-90, le=90, description="위도"),
    lon: float = Query(..., ge=-180, le=180, description="경도"),
    city: str | None = Query(None, description="표시용 도시 이름"),
    service: WeatherSourceService = Depends(get_weather_service),
) -> ForecastResponse:
    """
    Today's and tomorrow's forecast for a coordinate.

    Korean coordinates are served by the KMA short-term forecast, others by
    OpenWeatherMap. When both fail the response carries demo data and a notice.
    """
    location = Location(latitude=lat, longitude=lon, city=city)
    result = service.resolve(location)
    return ForecastResponse(
        location=location,
        today=result.today,
        tomorrow=result.tomorrow,
        source=result.source,
        notice=result.notice,
        background=background_class(result.tomorrow.condition),
    )
