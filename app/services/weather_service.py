from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Protocol

from app.schemas.weather import Location, WeatherDay, WeatherSource
from app.services.demo_weather import DEMO_NOTICE, demo_forecast
from app.services.kma_client import KmaForecastClient
from app.services.kma_grid import is_in_regional_coverage
from app.services.openweather_client import OpenWeatherClient
from app.services.weather_common import ProviderError, local_now


logger = logging.getLogger(__name__)


class ForecastProvider(Protocol):
    def fetch_forecast(self, location: Location) -> tuple[WeatherDay, WeatherDay]: ...


class ResolverState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    RESOLVED = "resolved"


@dataclass(frozen=True, slots=True)
class ForecastResult:
    today: WeatherDay
    tomorrow: WeatherDay
    source: WeatherSource
    notice: str | None = None


class WeatherSourceService:
    """Pick a provider for a location and fall back regional -> global -> demo."""

    def __init__(
        self,
        *,
        regional: ForecastProvider | None = None,
        global_provider: ForecastProvider | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.clock = clock or local_now
        self.regional = regional or KmaForecastClient(clock=self.clock)
        self.global_provider = global_provider or OpenWeatherClient()
        self.state = ResolverState.IDLE
        self.source: WeatherSource | None = None
        self._lock = threading.Lock()
        self._in_flight = 0

    def resolve(self, location: Location) -> ForecastResult:
        with self._lock:
            self._in_flight += 1
            self.state = ResolverState.RESOLVING
            self.source = None
        result = self._resolve(location)
        # 동시 요청이 남아 있으면 RESOLVING을 유지한다
        with self._lock:
            self._in_flight -= 1
            self.source = result.source
            if self._in_flight == 0:
                self.state = ResolverState.RESOLVED
        logger.info(
            "Resolved forecast for (%.4f, %.4f) from %s",
            location.latitude,
            location.longitude,
            result.source.value,
        )
        return result

    def _resolve(self, location: Location) -> ForecastResult:
        if is_in_regional_coverage(location.latitude, location.longitude):
            result = self._attempt(self.regional, location, WeatherSource.REGIONAL)
            if result:
                return result
        else:
            logger.debug("Location outside regional coverage, using global provider")

        result = self._attempt(self.global_provider, location, WeatherSource.GLOBAL)
        if result:
            return result

        today, tomorrow = demo_forecast(self.clock())
        return ForecastResult(today=today, tomorrow=tomorrow, source=WeatherSource.DEMO, notice=DEMO_NOTICE)

    def _attempt(
        self,
        provider: ForecastProvider,
        location: Location,
        source: WeatherSource,
    ) -> ForecastResult | None:
        try:
            today, tomorrow = provider.fetch_forecast(location)
        except ProviderError as exc:
            logger.warning("%s provider failed (%s), falling back", source.value, exc.code)
            return None
        except Exception:
            logger.exception("%s provider raised unexpectedly, falling back", source.value)
            return None
        return ForecastResult(today=today, tomorrow=tomorrow, source=source)


__all__ = ["ForecastResult", "ResolverState", "WeatherSourceService"]
