import json
from datetime import datetime, timezone
from typing import Annotated, Any

import redis.asyncio as redis
from fastapi import Depends
from structlog import get_logger

from backend.config import settings
from backend.utils.dependencies import get_redis_client
from backend.utils.exceptions import BadRequestError, NotFoundError

from .models import (
    ConfigMetadata,
    ConfigMetaResponse,
    ResetConfigResponse,
    SaveConfigResponse,
)
from .repository import ConfigRepository

logger = get_logger(__name__)

JSON_MEDIA_TYPE = "application/json"


class ConfigService:
    """
    Whole-document operations on the stored dashboard config.

    Every save replaces the previous document; there is no merge, no history
    and no conflict detection, the last writer wins.
    """

    def __init__(self, repository: ConfigRepository):
        self.repository = repository

    async def get_config(self) -> str:
        content = await self.repository.get_content()
        if not content:
            raise NotFoundError(
                "Config not found",
                "No configuration has been saved yet, save one or use the default configuration",
            )
        return content

    @staticmethod
    def extract_config_text(body: bytes, content_type: str) -> str:
        """
        Pulls the YAML text out of a save request body.

        JSON bodies may wrap the text in a ``config`` or ``data`` field; any other
        JSON is stored as its compact serialisation. Everything else is taken as
        raw text.
        """
        if JSON_MEDIA_TYPE not in content_type:
            try:
                return body.decode("utf-8")
            except UnicodeDecodeError as e:
                raise BadRequestError("Invalid config data", f"Request body is not valid UTF-8: {e}")

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise BadRequestError("Invalid config data", f"Request body is not valid JSON: {e}")

        value: Any = None
        if isinstance(payload, dict):
            value = payload.get("config") or payload.get("data")
        if value:
            return value if isinstance(value, str) else _compact_json(value)
        return _compact_json(payload)

    async def save_config(self, text: str) -> SaveConfigResponse:
        if not text or not text.strip():
            raise BadRequestError("Invalid config data", "Config data must not be empty")

        metadata = ConfigMetadata(
            last_modified=datetime.now(timezone.utc),
            size=len(text.encode("utf-8")),
        )
        await self.repository.put(text, metadata)
        logger.info("Config saved", size=metadata.size)

        return SaveConfigResponse(
            success=True, message="Config saved successfully", metadata=metadata
        )

    async def reset_config(self) -> ResetConfigResponse:
        await self.repository.delete()
        logger.info("Config reset")
        return ResetConfigResponse(
            success=True,
            message="Config reset, the default configuration will be used on next load",
        )

    async def get_meta(self) -> ConfigMetaResponse:
        metadata = await self.repository.get_metadata()
        if metadata is None:
            return ConfigMetaResponse(exists=False, message="Config does not exist")
        return ConfigMetaResponse(exists=True, metadata=metadata)

    async def store_available(self) -> bool:
        return await self.repository.ping()


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


async def get_config_repository(
    redis_client: Annotated[redis.Redis, Depends(get_redis_client)],
) -> ConfigRepository:
    return ConfigRepository(redis_client, settings.config_key)


async def get_config_service(
    repository: Annotated[ConfigRepository, Depends(get_config_repository)],
) -> ConfigService:
    return ConfigService(repository)
