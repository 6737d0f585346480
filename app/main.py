import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from app.api.routes import api_router
from app.core.config import settings


logger = logging.getLogger(__name__)


def _cors_settings() -> tuple[list[str], bool]:
    # "*"일 때는 allow_credentials를 False로 설정 (FastAPI 제약)
    if settings.cors_origins == "*":
        return ["*"], False
    return list(settings.cors_origins), True


def create_app() -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title=settings.app_name)

    origins, allow_credentials = _cors_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_unhandled_errors(request: Request, call_next):
        client_id = request.headers.get(settings.client_id_header)
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s (client=%s)", request.method, request.url.path, client_id)
            return JSONResponse(status_code=500, content={"detail": "internal_error"})

    app.include_router(api_router)

    if not settings.kma_api_key:
        logger.info("KMA key not configured; regional forecasts will fall through to the global provider")
    if not settings.weather_api_key:
        logger.info("OpenWeather key not configured; forecasts may fall back to demo data")
    return app


app = create_app()
