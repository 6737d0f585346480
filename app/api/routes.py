from fastapi import APIRouter

from app.api.public.health import router as health_router
from app.api.recommendations import router as recommendations_router
from app.api.session import router as session_router
from app.api.weather import router as weather_router


api_router = APIRouter()
api_router.include_router(health_router)

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(weather_router)
v1_router.include_router(recommendations_router)
v1_router.include_router(session_router)

api_router.include_router(v1_router)
