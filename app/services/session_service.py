from __future__ import annotations

import logging

from app.schemas.outfit import FashionStyle, UserOptionsPatch
from app.schemas.weather import Location, PositionFix, WeatherSource
from app.services.app_state import AppSnapshot, AppState
from app.services.geolocation import GeolocationService
from app.services.outfit_rules import recommend, weather_tip
from app.services.weather_service import WeatherSourceService


logger = logging.getLogger(__name__)


class SessionError(Exception):
    def __init__(self, code: str, status_code: int = 400) -> None:
        super().__init__(code)
        self.code = code
        self.status_code = status_code


class WeatherWearSession:
    """Loads weather for the session location and keeps recommendations in sync with options."""

    def __init__(
        self,
        state: AppState,
        *,
        weather_service: WeatherSourceService | None = None,
        geolocation: GeolocationService | None = None,
    ) -> None:
        self.state = state
        self.weather_service = weather_service or WeatherSourceService()
        self.geolocation = geolocation or GeolocationService()

    def locate(self, fix: PositionFix | None = None, client_ip: str | None = None) -> Location:
        location = self.geolocation.locate(fix, client_ip)
        self.state.set_location(location)
        return location

    def load_weather(self, client_ip: str | None = None) -> AppSnapshot:
        location = self.state.snapshot.location or self.locate(client_ip=client_ip)
        self.state.set_loading(True)
        self.state.set_error(None)
        try:
            result = self.weather_service.resolve(location)
            self.state.set_weather(result.today, result.tomorrow, result.source, result.notice)
            self.state.set_error(result.notice if result.source is WeatherSource.DEMO else None)
            self._recompute()
        finally:
            self.state.set_loading(False)
        return self.state.snapshot

    def apply(self) -> AppSnapshot:
        """Recompute recommendations from the loaded weather without refetching it."""
        if self.state.snapshot.tomorrow_weather is None:
            raise SessionError("weather_not_loaded", status_code=409)
        return self._recompute()

    def update_options(self, patch: UserOptionsPatch) -> AppSnapshot:
        return self.state.set_options(patch)

    def toggle_style(self, style: FashionStyle) -> AppSnapshot:
        return self.state.toggle_style(style)

    def _recompute(self) -> AppSnapshot:
        snapshot = self.state.snapshot
        today, tomorrow = snapshot.today_weather, snapshot.tomorrow_weather
        recommendations = recommend(
            snapshot.options,
            tomorrow.condition,
            tomorrow.temperature,
            tomorrow.feels_like,
        )
        tip = weather_tip(today.temperature, tomorrow.temperature, tomorrow.condition)
        logger.debug("Recomputed recommendations for %s (%s)", tomorrow.date, tomorrow.condition)
        return self.state.set_recommendations(recommendations, tip)


__all__ = ["SessionError", "WeatherWearSession"]
