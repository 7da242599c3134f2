"""HTTP client for the config service API."""

import uuid
from typing import Any

import httpx
import structlog
from opentelemetry import propagate

from dashkv_core.tracing import get_tracer

from .exceptions import APIError, AuthenticationError

log = structlog.get_logger(__name__)
tracer = get_tracer(__name__)

YAML_MEDIA_TYPE = "application/x-yaml"


def _error_detail(response: httpx.Response) -> str:
    """Prefers the service's JSON ``message``/``error`` over the bare status line."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and (body.get("message") or body.get("error")):
        return str(body.get("message") or body.get("error"))
    return f"HTTP {response.status_code}: {response.reason_phrase}"


class ConfigServiceClient:
    """
    Talks to the config service over the transport it is given.

    The adapter hands it the original, non-intercepting transport so that these
    calls never loop back through the adapter itself.
    """

    def __init__(
        self,
        base_url: str,
        api_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ):
        self._api_token = api_token
        self._client = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            timeout=timeout,
        )

    def _prepare_headers(
        self, correlation_id: str, *, authenticated: bool = False
    ) -> dict[str, str]:
        headers = {"X-Correlation-ID": correlation_id}
        if authenticated and self._api_token:
            headers["X-API-Token"] = self._api_token
        propagate.inject(headers)
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        content: bytes | None = None,
        content_type: str | None = None,
        authenticated: bool = False,
        allow_not_found: bool = False,
    ) -> httpx.Response:
        """
        Make an HTTP request to the config service.

        Raises ``AuthenticationError`` on 401, ``APIError`` on any other non-2xx
        status or network failure. With ``allow_not_found`` a 404 response is
        returned instead of raised.
        """
        correlation_id = str(uuid.uuid4())

        with tracer.start_as_current_span(
            f"config_service:{method}",
            attributes={
                "http.method": method,
                "http.url": f"{self._client.base_url}{path}",
            },
        ) as span:
            span.set_attribute("correlation_id", correlation_id)
            headers = self._prepare_headers(correlation_id, authenticated=authenticated)
            if content_type:
                headers["Content-Type"] = content_type

            try:
                response = await self._client.request(
                    method, path, content=content, headers=headers
                )
                span.set_attribute("http.status_code", response.status_code)
                if allow_not_found and response.status_code == 404:
                    return response
                response.raise_for_status()

                log.debug(
                    "Config service request successful",
                    method=method,
                    path=path,
                    correlation_id=correlation_id,
                    status_code=response.status_code,
                )
                return response

            except httpx.HTTPStatusError as e:
                span.set_attribute("error", True)
                span.record_exception(e)
                status_code = e.response.status_code
                detail = _error_detail(e.response)
                log.warning(
                    "Config service returned an error status",
                    method=method,
                    path=path,
                    correlation_id=correlation_id,
                    status_code=status_code,
                    detail=detail,
                )
                if status_code == 401:
                    raise AuthenticationError(correlation_id=correlation_id) from e
                raise APIError(
                    detail=detail,
                    status_code=status_code,
                    correlation_id=correlation_id,
                ) from e

            except httpx.RequestError as e:
                span.set_attribute("error", True)
                span.record_exception(e)
                log.error(
                    "Config service request network error",
                    method=method,
                    path=path,
                    correlation_id=correlation_id,
                    error=str(e),
                )
                raise APIError(
                    detail=f"Network error communicating with the config service: {e.__class__.__name__}",
                    status_code=503,
                    correlation_id=correlation_id,
                ) from e

    async def get_config(self) -> str | None:
        """Returns the stored YAML text, or None when nothing has been saved."""
        response = await self.request("GET", "/api/config", allow_not_found=True)
        if response.status_code == 404:
            return None
        return response.text

    async def save_config(self, text: str) -> dict[str, Any]:
        response = await self.request(
            "POST",
            "/api/config",
            content=text.encode("utf-8"),
            content_type=YAML_MEDIA_TYPE,
            authenticated=True,
        )
        return response.json()

    async def reset_config(self) -> dict[str, Any]:
        response = await self.request("POST", "/api/config/reset", authenticated=True)
        return response.json()

    async def get_meta(self) -> dict[str, Any]:
        response = await self.request("GET", "/api/config/meta")
        return response.json()

    async def health(self) -> dict[str, Any]:
        response = await self.request("GET", "/api/health")
        return response.json()

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()
