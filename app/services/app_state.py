from __future__ import annotations

import logging
import threading
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, ValidationError

from app.core.cache import load_json, store_json
from app.core.config import settings
from app.schemas.outfit import FashionStyle, RecommendationSet, UserOptions, UserOptionsPatch
from app.schemas.weather import Location, WeatherDay, WeatherSource
from app.services.weather_common import background_class


logger = logging.getLogger(__name__)


class StateStorage(Protocol):
    def load(self) -> dict[str, Any] | None: ...

    def save(self, data: dict[str, Any]) -> None: ...


class RedisStateStorage:
    """Single namespaced redis entry holding the persisted part of the state."""

    def __init__(self, key: str | None = None) -> None:
        self.key = key or settings.state_storage_key

    def load(self) -> dict[str, Any] | None:
        data = load_json(self.key)
        return data if isinstance(data, dict) else None

    def save(self, data: dict[str, Any]) -> None:
        store_json(self.key, data)


class MemoryStateStorage:
    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data = data

    def load(self) -> dict[str, Any] | None:
        return self.data

    def save(self, data: dict[str, Any]) -> None:
        self.data = data


class AppSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    today_weather: WeatherDay | None = None
    tomorrow_weather: WeatherDay | None = None
    weather_source: WeatherSource | None = None
    notice: str | None = None
    options: UserOptions = UserOptions()
    recommendations: RecommendationSet | None = None
    tip: str | None = None
    location: Location | None = None
    is_loading: bool = False
    error: str | None = None

    @property
    def weather_background(self) -> str:
        if self.tomorrow_weather is None:
            return "sunny"
        return self.tomorrow_weather.condition

    @property
    def background_class(self) -> str:
        return background_class(self.weather_background)


class AppState:
    """Session state; every change goes through a named transition."""

    def __init__(self, storage: StateStorage | None = None) -> None:
        self.storage = storage if storage is not None else RedisStateStorage()
        self._lock = threading.Lock()
        self._snapshot = self._hydrate()

    @property
    def snapshot(self) -> AppSnapshot:
        return self._snapshot

    def set_weather(
        self,
        today: WeatherDay,
        tomorrow: WeatherDay,
        source: WeatherSource | None = None,
        notice: str | None = None,
    ) -> AppSnapshot:
        return self._apply(
            {"today_weather": today, "tomorrow_weather": tomorrow, "weather_source": source, "notice": notice}
        )

    def set_options(self, patch: UserOptionsPatch | dict[str, Any]) -> AppSnapshot:
        if isinstance(patch, dict):
            patch = UserOptionsPatch.model_validate(patch)
        changes = patch.model_dump(exclude_none=True)
        with self._lock:
            merged = UserOptions.model_validate({**self._snapshot.options.model_dump(), **changes})
            self._snapshot = self._snapshot.model_copy(update={"options": merged})
            snapshot = self._snapshot
        self._persist(snapshot)
        return snapshot

    def toggle_style(self, style: FashionStyle) -> AppSnapshot:
        with self._lock:
            current = list(self._snapshot.options.fashion_styles)
            styles = [s for s in current if s != style] if style in current else [*current, style]
            options = self._snapshot.options.model_copy(update={"fashion_styles": styles})
            self._snapshot = self._snapshot.model_copy(update={"options": options})
            snapshot = self._snapshot
        self._persist(snapshot)
        return snapshot

    def set_location(self, location: Location) -> AppSnapshot:
        snapshot = self._apply({"location": location})
        self._persist(snapshot)
        return snapshot

    def set_recommendations(self, recommendations: RecommendationSet, tip: str | None = None) -> AppSnapshot:
        return self._apply({"recommendations": recommendations, "tip": tip})

    def set_loading(self, loading: bool) -> AppSnapshot:
        return self._apply({"is_loading": loading})

    def set_error(self, error: str | None) -> AppSnapshot:
        return self._apply({"error": error})

    def persisted(self) -> dict[str, Any]:
        return _partialize(self._snapshot)

    def _apply(self, update: dict[str, Any]) -> AppSnapshot:
        with self._lock:
            self._snapshot = self._snapshot.model_copy(update=update)
            return self._snapshot

    def _persist(self, snapshot: AppSnapshot) -> None:
        self.storage.save(_partialize(snapshot))

    def _hydrate(self) -> AppSnapshot:
        stored = self.storage.load()
        if not stored:
            return AppSnapshot()
        try:
            options = UserOptions.model_validate(stored.get("options") or {})
            location_raw = stored.get("location")
            location = Location.model_validate(location_raw) if location_raw else None
        except ValidationError as exc:
            logger.warning("Ignoring invalid persisted state: %s", exc.error_count())
            return AppSnapshot()
        return AppSnapshot(options=options, location=location)


def _partialize(snapshot: AppSnapshot) -> dict[str, Any]:
    return {
        "options": snapshot.options.model_dump(),
        "location": snapshot.location.model_dump() if snapshot.location else None,
    }


__all__ = ["AppSnapshot", "AppState", "MemoryStateStorage", "RedisStateStorage", "StateStorage"]
