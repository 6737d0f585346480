import json
import logging
from typing import Any, Callable, Optional

import redis
from redis.exceptions import RedisError

from app.core.config import settings


logger = logging.getLogger(__name__)

_client: Optional[redis.Redis] = None


def get_redis() -> redis.Redis:
    global _client
    if _client is None:
        _client = redis.from_url(settings.redis_url, decode_responses=True)
    return _client


def load_json(key: str) -> Any:
    """Return the decoded value stored under ``key`` or None."""
    try:
        raw = get_redis().get(key)
    except RedisError as exc:
        logger.warning("Redis read failed for %s: %s", key, exc)
        return None
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Discarding undecodable value under %s", key)
        return None


def store_json(key: str, data: Any, ttl_seconds: int | None = None) -> bool:
    try:
        payload = json.dumps(data, ensure_ascii=False)
        if ttl_seconds:
            get_redis().setex(key, ttl_seconds, payload)
        else:
            get_redis().set(key, payload)
    except RedisError as exc:
        logger.warning("Redis write failed for %s: %s", key, exc)
        return False
    return True


def cached_json(key: str, ttl_seconds: int, loader: Callable[[], Any]):
    cached = load_json(key)
    # None은 실패 결과이므로 캐시에서 재사용하지 않는다
    if cached is not None:
        return cached
    data = loader()
    if data is not None:
        store_json(key, data, ttl_seconds)
    return data
