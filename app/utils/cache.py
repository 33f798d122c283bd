import json
import logging
import os
from typing import Any, Optional

import redis

logger = logging.getLogger(__name__)

REDIS_URL = os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0")
_client = None


def cache_enabled() -> bool:
    return os.getenv("CACHE_ENABLED", "1") == "1"


def r():
    global _client
    if _client is None:
        _client = redis.Redis.from_url(
            REDIS_URL, decode_responses=True, socket_timeout=2
        )
    return _client


def get_json(key: str) -> Optional[Any]:
    if not cache_enabled():
        return None
    try:
        cached = r().get(key)
    except redis.RedisError as e:
        logger.warning("[cache] get %s failed: %s", key, e)
        return None
    return json.loads(cached) if cached else None


def set_json(key: str, value: Any, ttl: int = 30) -> None:
    if not cache_enabled():
        return
    try:
        r().setex(key, ttl, json.dumps(value, default=str))
    except redis.RedisError as e:
        logger.warning("[cache] set %s failed: %s", key, e)


def invalidate_prefix(prefix: str) -> int:
    """Delete every key starting with prefix; returns how many were removed."""
    if not cache_enabled():
        return 0
    removed = 0
    try:
        client = r()
        for key in client.scan_iter(match=f"{prefix}*", count=100):
            removed += client.delete(key)
    except redis.RedisError as e:
        logger.warning("[cache] invalidate %s failed: %s", prefix, e)
    return removed
