import secrets

import redis.asyncio as redis
from fastapi import Request

from backend.config import settings
from backend.utils.exceptions import UnauthorizedError

API_TOKEN_HEADER = "x-api-token"
BEARER_PREFIX = "Bearer "


def extract_api_token(request: Request) -> str | None:
    """Reads the write token from X-API-Token, falling back to a bearer Authorization header."""
    token = request.headers.get(API_TOKEN_HEADER)
    if token:
        return token

    authorization = request.headers.get("authorization")
    if authorization and authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX) :]
    return None


async def require_api_token(request: Request) -> None:
    """
    Dependency guarding the write endpoints.

    With no API_TOKEN configured every write is accepted. Otherwise the request
    token has to match it exactly.
    """
    expected = settings.api_token
    if not expected:
        return

    token = extract_api_token(request)
    if token is None or not secrets.compare_digest(token.encode(), expected.encode()):
        raise UnauthorizedError()


async def get_redis_client(request: Request) -> redis.Redis | None:
    """Dependency to get the shared Redis client instance from the application state."""
    return getattr(request.app.state, "redis", None)
