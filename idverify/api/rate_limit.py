"""
Fixed-window request throttling applied to every route.

Each client address gets RATE_LIMIT_MAX_REQUESTS per RATE_LIMIT_WINDOW_SEC.
The live input endpoints, called once per keystroke, count against a
separate RATE_LIMIT_LIVE_MAX_REQUESTS budget.
The window starts with the client's first request and resets when it
elapses. Counters live in process memory by default; RATE_LIMIT_BACKEND=redis
shares them across workers.
"""
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from idverify.settings import settings
from idverify.store.redis_conn import get_redis


@dataclass
class Decision:
    allowed: bool
    limit: int
    remaining: int
    reset_after_sec: int


class MemoryRateLimiter:
    def __init__(self, max_requests: int, window_sec: int, clock: Callable[[], float] = time.monotonic):
        self.max_requests = int(max_requests)
        self.window_sec = int(window_sec)
        self._clock = clock
        # client -> (window_start, count)
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, client: str) -> Decision:
        now = self._clock()
        with self._lock:
            start, count = self._windows.get(client, (now, 0))
            if now - start >= self.window_sec:
                start, count = now, 0
            count += 1
            self._windows[client] = (start, count)
            if len(self._windows) > 10000:
                self._prune(now)
        reset = max(0, int(self.window_sec - (now - start)))
        return Decision(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_after_sec=reset,
        )

    def _prune(self, now: float) -> None:
        for client in [c for c, (s, _) in self._windows.items() if now - s >= self.window_sec]:
            del self._windows[client]

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


class RedisRateLimiter:
    PREFIX = "ratelimit:"

    def __init__(self, max_requests: int, window_sec: int, redis_factory=get_redis, prefix: str = PREFIX):
        self.prefix = prefix
        self.max_requests = int(max_requests)
        self.window_sec = int(window_sec)
        self._redis_factory = redis_factory

    def hit(self, client: str) -> Decision:
        r = self._redis_factory()
        key = f"{self.prefix}{client}"
        pipe = r.pipeline()
        pipe.incr(key, 1)
        # Only the first hit of a window sets the expiry
        pipe.expire(key, self.window_sec, nx=True)
        pipe.ttl(key)
        count, _, ttl = pipe.execute()
        count = int(count)
        ttl = int(ttl) if ttl is not None and int(ttl) >= 0 else self.window_sec
        return Decision(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_after_sec=ttl,
        )

    def reset(self) -> None:
        r = self._redis_factory()
        for key in r.scan_iter(f"{self.prefix}*"):
            r.delete(key)


# Per-keystroke endpoints count against their own budget
LIVE_BUCKET = "live"
DEFAULT_BUCKET = "default"
LIVE_PATHS = frozenset({"/flow/field", "/flow/state"})

_limiters: Dict[str, object] = {}
_limiter_lock = threading.Lock()


def bucket_for(path: str) -> str:
    return LIVE_BUCKET if path in LIVE_PATHS else DEFAULT_BUCKET


def build_limiter(bucket: str = DEFAULT_BUCKET):
    if bucket == LIVE_BUCKET:
        max_requests = settings.RATE_LIMIT_LIVE_MAX_REQUESTS
    else:
        max_requests = settings.RATE_LIMIT_MAX_REQUESTS
    if settings.RATE_LIMIT_BACKEND == "redis":
        return RedisRateLimiter(max_requests, settings.RATE_LIMIT_WINDOW_SEC, prefix=f"ratelimit:{bucket}:")
    return MemoryRateLimiter(max_requests, settings.RATE_LIMIT_WINDOW_SEC)


def get_limiter(bucket: str = DEFAULT_BUCKET):
    with _limiter_lock:
        lim = _limiters.get(bucket)
        if lim is None:
            lim = _limiters[bucket] = build_limiter(bucket)
        return lim


def reset_limiter() -> None:
    """Drop the cached limiters so the next request rebuilds them from settings."""
    with _limiter_lock:
        _limiters.clear()
