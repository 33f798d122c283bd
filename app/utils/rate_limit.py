"""
In-memory sliding-window rate limiter for public endpoints.

Configure via RATE_LIMIT_ENABLED (default: 1). Limits are per client IP and
per key prefix; the PIX endpoint uses RATE_LIMIT_PIX_PER_MINUTE (default: 10).
"""

from __future__ import annotations
import os
import time
from collections import defaultdict, deque
from functools import wraps
from threading import Lock
from typing import Deque, Dict

from flask import jsonify, request

WINDOW_SECONDS = 60


class SlidingWindowLimiter:
    def __init__(self, window: int = WINDOW_SECONDS):
        self.window = window
        self._lock = Lock()
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)

    def hit(self, key: str, limit: int, now: float | None = None) -> bool:
        """Record a hit; return True when the key is over the limit."""
        if limit <= 0:
            return False
        now = time.monotonic() if now is None else now
        cutoff = now - self.window
        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= limit:
                return True
            hits.append(now)
            return False

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


limiter = SlidingWindowLimiter()


def client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def rate_limited(key_prefix: str, env_var: str, default_per_minute: int):
    """Decorator: reject with 429 once a client exceeds the per-minute limit."""

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if os.getenv("RATE_LIMIT_ENABLED", "1") != "1":
                return fn(*args, **kwargs)
            limit = int(os.getenv(env_var, str(default_per_minute)))
            if limiter.hit(f"{key_prefix}:{client_ip()}", limit):
                return (
                    jsonify(
                        {
                            "error": "rate limit exceeded",
                            "code": "rate_limited",
                            "retry_after": WINDOW_SECONDS,
                        }
                    ),
                    429,
                )
            return fn(*args, **kwargs)

        return wrapper

    return decorator
