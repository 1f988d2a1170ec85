import os
from functools import lru_cache

import redis

from eventadmin.core.config import DB_TIMEOUT

# Redis configuration
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")


def get_redis_url():
    return REDIS_URL


@lru_cache(maxsize=1)
def get_lock_client() -> redis.Redis:
    """Get Redis client for per-event admission locks."""
    return redis.from_url(
        get_redis_url(),
        decode_responses=True,
        socket_timeout=DB_TIMEOUT,
        socket_connect_timeout=DB_TIMEOUT,
    )
