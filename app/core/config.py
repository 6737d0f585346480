from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore[import-not-found]


class Settings(BaseSettings):
    app_name: str = "weatherwear"
    log_level: str = "INFO"

    # Redis / CORS / Client
    redis_url: str = "redis://localhost:6379/0"
    cors_origins: list[str] | str = "*"  # 개발 환경 기본값: 모든 origin 허용

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str] | str:
        if isinstance(v, str):
            if v == "*":
                return "*"
            # 쉼표로 구분된 문자열을 리스트로 변환
            if "," in v:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
            return [v.strip()] if v.strip() else "*"
        if isinstance(v, list):
            return v
        return "*"

    client_id_header: str = "X-Client-Id"

    # 기상청 단기예보 (regional provider)
    kma_api_key: str | None = None
    kma_api_base_url: str = "https://apis.data.go.kr/1360000/VilageFcstInfoService_2.0"
    kma_timeout_sec: float = 5.0
    kma_num_of_rows: int = 1000

    # OpenWeatherMap (global provider)
    weather_api_key: str | None = None
    weather_api_base_url: str = "https://api.openweathermap.org/data/2.5"
    weather_units: str = "metric"
    weather_lang: str = "kr"
    weather_timeout_sec: float = 5.0

    # 위치 추정
    ip_geolocation_base_url: str = "https://ipapi.co"
    geolocation_timeout_sec: float = 10.0
    geolocation_max_age_sec: int = 300  # 5 minutes
    default_latitude: float = 37.5665
    default_longitude: float = 126.9780
    default_city: str = "서울"

    local_timezone: str = "Asia/Seoul"

    # 사용자 옵션과 마지막 위치만 저장한다
    state_storage_key: str = "weatherwear-storage"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)


settings = Settings()
