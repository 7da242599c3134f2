from typing import TYPE_CHECKING

import httpx
import structlog

from .exceptions import APIError, ConfigUnavailableError

if TYPE_CHECKING:
    from .adapter import ConfigAdapter

log = structlog.get_logger(__name__)

YAML_MEDIA_TYPE = "application/x-yaml"


class ConfigInterceptTransport(httpx.AsyncBaseTransport):
    """
    httpx transport that answers conf.yml requests from the config service.

    Reads come back as a plain 200 YAML response, the same as a static file
    would. Writes are stored through the config service and answered with its
    JSON result, or with a JSON ``{"error": ...}`` carrying the failure status.
    Every other request is handed to ``wrapped`` and its response returned
    untouched.
    """

    def __init__(self, adapter: "ConfigAdapter", wrapped: httpx.AsyncBaseTransport):
        self._adapter = adapter
        self._wrapped = wrapped

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        action = self._adapter.intercepts(request.method, request.url, request.headers)
        if action is None:
            return await self._wrapped.handle_async_request(request)

        self._adapter.debug_log(
            "Intercepted config request", url=str(request.url), method=request.method
        )
        if action == "read":
            return await self._read(request)
        return await self._write(request)

    async def _read(self, request: httpx.Request) -> httpx.Response:
        try:
            text = await self._adapter.load_config()
        except ConfigUnavailableError as e:
            # Surface it the way a failed static file fetch would surface.
            raise httpx.TransportError(e.detail, request=request) from e

        return httpx.Response(
            200,
            headers={"Content-Type": YAML_MEDIA_TYPE},
            text=text,
            request=request,
        )

    async def _write(self, request: httpx.Request) -> httpx.Response:
        body = await request.aread()
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError as e:
            log.warning("Rejected non UTF-8 config save", url=str(request.url), error=str(e))
            return httpx.Response(
                400, json={"error": f"Config must be UTF-8 text: {e}"}, request=request
            )

        try:
            result = await self._adapter.save_config(text)
        except APIError as e:
            return httpx.Response(
                e.status_code or 500, json={"error": e.detail}, request=request
            )
        return httpx.Response(200, json=result, request=request)

    async def aclose(self) -> None:
        # The wrapped transport belongs to the adapter and outlives this client.
        return None
