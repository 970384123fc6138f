import os
import redis
from functools import lru_cache


@lru_cache(maxsize=1)
def get_redis() -> redis.Redis:
    # REDIS_URL wins when set (e.g. redis://:pw@host:6379/0)
    url = os.environ.get("REDIS_URL")
    if url:
        return redis.Redis.from_url(url, decode_responses=True)
    host = os.environ.get("REDIS_HOST", "localhost")
    port = int(os.environ.get("REDIS_PORT", "6379"))
    db = int(os.environ.get("REDIS_DB", "0"))
    password = os.environ.get("REDIS_PASSWORD") or None
    return redis.Redis(host=host, port=port, db=db, password=password, decode_responses=True)
