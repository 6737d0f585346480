from __future__ import annotations

from fastapi import APIRouter, Query

from app.schemas.outfit import RecommendationRequest, RecommendationSet, WeatherTipResponse
from app.schemas.weather import WeatherCondition
from app.services.outfit_rules import recommend, weather_tip

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


@router.post("", response_model=RecommendationSet)
def create_recommendations(payload: RecommendationRequest) -> RecommendationSet:
    return recommend(payload.options, payload.condition, payload.temperature, payload.feels_like)


@router.get("/tip", response_model=WeatherTipResponse)
def get_weather_tip(
    today: int = Query(..., description="오늘 기온 (°C)"),
    tomorrow: int = Query(..., description="내일 기온 (°C)"),
    condition: WeatherCondition = Query("sunny", description="내일 날씨 상태"),
) -> WeatherTipResponse:
    return WeatherTipResponse(tip=weather_tip(today, tomorrow, condition))
