# Path: backend/utils/redis_client.py

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

from backend.config import settings

logger = structlog.get_logger(__name__)

_redis_client: redis.Redis | None = None


async def init_redis_client() -> redis.Redis:
    """
    Creates the Redis client connection pool.
    Called once during the application's startup lifespan.

    An unreachable Redis does not abort startup: the health endpoint reports
    it and the config endpoints answer with 500 until it comes back.
    """
    global _redis_client
    _redis_client = redis.from_url(
        str(settings.redis_url),
        password=settings.redis_password,
        decode_responses=True,
    )
    try:
        await _redis_client.ping()
        logger.info("Successfully connected to Redis.")
    except RedisError as e:
        logger.error("Redis is not reachable on startup", error=str(e))
    return _redis_client


async def close_redis_client():
    """
    Closes the Redis client connection pool gracefully.
    Called once during the application's shutdown lifespan.
    """
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None
