from fastapi import APIRouter

from app.core.config import settings


router = APIRouter(prefix="/healthz", tags=["health"])


@router.get("")
def healthz():
    return {
        "status": "ok",
        "providers": {
            "kma": bool(settings.kma_api_key),
            "openweather": bool(settings.weather_api_key),
        },
    }
