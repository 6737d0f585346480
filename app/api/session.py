from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from app.api.deps import client_ip, get_weather_session
from app.schemas.outfit import FashionStyle, UserOptionsPatch
from app.schemas.session import SessionResponse
from app.schemas.weather import Location, PositionFix
from app.services.app_state import AppSnapshot
from app.services.session_service import SessionError, WeatherWearSession

router = APIRouter(prefix="/session", tags=["session"])


def _to_response(snapshot: AppSnapshot) -> SessionResponse:
    return SessionResponse(
        **snapshot.model_dump(),
        weather_background=snapshot.weather_background,
        background_class=snapshot.background_class,
    )


@router.get("", response_model=SessionResponse)
def get_session_state(session: WeatherWearSession = Depends(get_weather_session)) -> SessionResponse:
    return _to_response(session.state.snapshot)


@router.post("/location", response_model=Location)
def update_location(
    request: Request,
    fix: PositionFix | None = Body(None),
    session: WeatherWearSession = Depends(get_weather_session),
) -> Location:
    """Resolve the session location from a device fix, the caller's IP, or the default city."""
    return session.locate(fix, client_ip(request))


@router.post("/refresh", response_model=SessionResponse)
def refresh_weather(
    request: Request,
    session: WeatherWearSession = Depends(get_weather_session),
) -> SessionResponse:
    return _to_response(session.load_weather(client_ip(request)))


@router.patch("/options", response_model=SessionResponse)
def patch_options(
    patch: UserOptionsPatch,
    session: WeatherWearSession = Depends(get_weather_session),
) -> SessionResponse:
    return _to_response(session.update_options(patch))


@router.post("/styles/{style}/toggle", response_model=SessionResponse)
def toggle_style(
    style: FashionStyle,
    session: WeatherWearSession = Depends(get_weather_session),
) -> SessionResponse:
    return _to_response(session.toggle_style(style))


@router.post("/apply", response_model=SessionResponse)
def apply_options(session: WeatherWearSession = Depends(get_weather_session)) -> SessionResponse:
    """Recompute recommendations for the current options without refetching weather."""
    try:
        snapshot = session.apply()
    except SessionError as exc:
        raise HTTPException(
            status_code=exc.status_code,
            detail={
                "code": exc.code,
                "message": "날씨 정보를 먼저 불러와야 합니다.",
            },
        ) from exc
    return _to_response(snapshot)
