# backend/app/redis_client.py

from redis import Redis

from .config import settings

redis_client = Redis.from_url(settings.redis_url, decode_responses=True)


# FastAPI dependency (overridden in tests)
def get_redis() -> Redis:
    return redis_client
