import pytest
from starlette.requests import Request

from backend.config import settings
from backend.utils.dependencies import extract_api_token, require_api_token
from backend.utils.exceptions import UnauthorizedError
from backend.utils.middleware import resolve_allowed_origin


def make_request(headers: dict[str, str]) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/config",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
    }
    return Request(scope)


def test_extract_api_token_prefers_custom_header():
    request = make_request({"X-API-Token": "one", "Authorization": "Bearer two"})
    assert extract_api_token(request) == "one"


def test_extract_api_token_from_bearer():
    assert extract_api_token(make_request({"Authorization": "Bearer two"})) == "two"


def test_extract_api_token_ignores_other_schemes():
    assert extract_api_token(make_request({"Authorization": "Basic dXNlcg=="})) is None


@pytest.mark.asyncio
async def test_require_api_token_without_secret_accepts_everything():
    await require_api_token(make_request({}))


@pytest.mark.asyncio
async def test_require_api_token_rejects_mismatch(monkeypatch):
    monkeypatch.setattr(settings, "api_token", "secret")

    with pytest.raises(UnauthorizedError):
        await require_api_token(make_request({"X-API-Token": "secret "}))
    with pytest.raises(UnauthorizedError):
        await require_api_token(make_request({}))

    await require_api_token(make_request({"X-API-Token": "secret"}))


def test_resolve_allowed_origin():
    assert resolve_allowed_origin("http://localhost:4000") == "http://localhost:4000"
    assert resolve_allowed_origin(None) == settings.allowed_origins[0]
    assert resolve_allowed_origin("http://localhost:4000/") == settings.allowed_origins[0]
