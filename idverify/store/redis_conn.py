from functools import lru_cache

from redis import Redis
from idverify.settings import settings


@lru_cache(maxsize=4)
def _client(url: str) -> Redis:
    # One pooled client per URL; the rate limiter asks for it on every request
    return Redis.from_url(url, decode_responses=True, socket_timeout=1.0)


def get_redis() -> Redis:
    """Shared client for the rate-limit counters (RATE_LIMIT_BACKEND=redis)."""
    return _client(settings.REDIS_URL)
