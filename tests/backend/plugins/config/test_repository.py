from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ResponseError

from backend.plugins.config.models import ConfigMetadata
from backend.plugins.config.repository import ConfigRepository
from backend.utils.exceptions import StoreError

KEY = "dashy-config-yml"


@pytest.mark.asyncio
async def test_put_writes_content_and_metadata_in_one_hash(fake_redis):
    repository = ConfigRepository(fake_redis, KEY)
    metadata = ConfigMetadata(
        last_modified=datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc), size=8
    )

    await repository.put("foo: bar", metadata)

    assert fake_redis.hashes[KEY] == {
        "content": "foo: bar",
        "lastModified": "2026-10-18T09:30:00+00:00",
        "size": "8",
    }
    assert await repository.get_content() == "foo: bar"
    assert await repository.get_metadata() == metadata


@pytest.mark.asyncio
async def test_delete_removes_content_and_metadata(fake_redis):
    repository = ConfigRepository(fake_redis, KEY)
    await repository.put(
        "a: 1", ConfigMetadata(last_modified=datetime.now(timezone.utc), size=4)
    )

    await repository.delete()

    assert await repository.get_content() is None
    assert await repository.get_metadata() is None


@pytest.mark.asyncio
async def test_redis_errors_become_store_errors():
    redis_client = MagicMock()
    redis_client.hset = AsyncMock(side_effect=ResponseError("WRONGTYPE"))
    repository = ConfigRepository(redis_client, KEY)

    with pytest.raises(StoreError, match="WRONGTYPE") as exc_info:
        await repository.put(
            "a: 1", ConfigMetadata(last_modified=datetime.now(timezone.utc), size=4)
        )
    assert exc_info.value.error == "Failed to save config"
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_ping_without_client_is_false():
    assert await ConfigRepository(None, KEY).ping() is False
