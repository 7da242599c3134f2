import redis.asyncio as redis
from redis.exceptions import RedisError
from structlog import get_logger

from backend.utils.exceptions import StoreError

from .models import ConfigMetadata

logger = get_logger(__name__)

CONTENT_FIELD = "content"
LAST_MODIFIED_FIELD = "lastModified"
SIZE_FIELD = "size"


class ConfigRepository:
    """
    Redis access for the config document.

    The document and its metadata live in one hash under a single key, so a
    save is one HSET and a reset is one DEL.
    """

    def __init__(self, redis_client: redis.Redis, key: str):
        self._redis = redis_client
        self._key = key

    async def get_content(self) -> str | None:
        try:
            return await self._redis.hget(self._key, CONTENT_FIELD)
        except RedisError as e:
            logger.error("Redis error getting config", key=self._key, error=str(e))
            raise StoreError("Failed to get config", str(e))

    async def put(self, content: str, metadata: ConfigMetadata) -> None:
        """Replaces the stored document and its metadata."""
        try:
            await self._redis.hset(
                self._key,
                mapping={
                    CONTENT_FIELD: content,
                    LAST_MODIFIED_FIELD: metadata.last_modified.isoformat(),
                    SIZE_FIELD: metadata.size,
                },
            )
        except RedisError as e:
            logger.error("Redis error saving config", key=self._key, error=str(e))
            raise StoreError("Failed to save config", str(e))

    async def delete(self) -> None:
        try:
            await self._redis.delete(self._key)
        except RedisError as e:
            logger.error("Redis error resetting config", key=self._key, error=str(e))
            raise StoreError("Failed to reset config", str(e))

    async def get_metadata(self) -> ConfigMetadata | None:
        try:
            last_modified, size = await self._redis.hmget(
                self._key, [LAST_MODIFIED_FIELD, SIZE_FIELD]
            )
        except RedisError as e:
            logger.error("Redis error getting config metadata", key=self._key, error=str(e))
            raise StoreError("Failed to get config metadata", str(e))

        if last_modified is None or size is None:
            return None
        return ConfigMetadata(last_modified=last_modified, size=int(size))

    async def ping(self) -> bool:
        """Reports whether the store answers; never raises."""
        if self._redis is None:
            return False
        try:
            return bool(await self._redis.ping())
        except (RedisError, OSError) as e:
            logger.warning("Redis ping failed", error=str(e))
            return False
