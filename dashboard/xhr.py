"""Event-driven request object for code written against callbacks rather than awaits."""

import asyncio
import json
from typing import TYPE_CHECKING, Any, Callable, Optional

import httpx
import structlog

from .exceptions import APIError

if TYPE_CHECKING:
    from .adapter import ConfigAdapter

log = structlog.get_logger(__name__)

UNSENT = 0
OPENED = 1
DONE = 4


class CallbackRequest:
    """
    A request that reports its outcome through callbacks.

    Usage mirrors a browser XMLHttpRequest::

        req = adapter.callback_request()
        req.on_load = lambda: print(req.status, req.response_text)
        req.on_error = lambda exc: print("failed", exc)
        req.open("GET", "http://localhost:8080/conf.yml")
        req.send()

    ``send()`` schedules the work on the running event loop and returns the
    task. Config requests are served by the adapter; any other request is made
    with the original client using the same method, URL, headers and body.
    """

    def __init__(self, adapter: "ConfigAdapter", client: httpx.AsyncClient):
        self._adapter = adapter
        self._client = client

        self.method: str | None = None
        self.url: str | None = None
        self.request_headers: dict[str, str] = {}

        self.ready_state = UNSENT
        self.status = 0
        self.response_text = ""
        self.response: Any = None
        self.response_headers = httpx.Headers()

        self.on_ready_state_change: Optional[Callable[[], Any]] = None
        self.on_load: Optional[Callable[[], Any]] = None
        self.on_error: Optional[Callable[[Exception], Any]] = None

    def open(self, method: str, url: str) -> None:
        self.method = method.upper()
        self.url = url
        self.request_headers = {}
        self.ready_state = OPENED

    def set_request_header(self, name: str, value: str) -> None:
        if self.ready_state != OPENED:
            raise RuntimeError("open() must be called before set_request_header()")
        self.request_headers[name] = value

    def send(self, body: str | bytes | None = None) -> asyncio.Task:
        if self.ready_state != OPENED:
            raise RuntimeError("open() must be called before send()")
        return asyncio.get_running_loop().create_task(self._dispatch(body))

    async def _dispatch(self, body: str | bytes | None) -> None:
        action = self._adapter.intercepts(self.method, self.url, self.request_headers)
        try:
            if action == "read":
                await self._read()
            elif action == "write":
                await self._write(body)
            else:
                await self._passthrough(body)
        except Exception as e:
            # A send always ends in DONE with on_error or on_load called.
            log.exception("Callback request failed", url=self.url, method=self.method)
            self._fail(e)

    async def _read(self) -> None:
        self._adapter.debug_log("Intercepted callback config request", url=self.url, method=self.method)
        try:
            text = await self._adapter.load_config()
        except APIError as e:
            log.error("Callback config read failed", url=self.url, detail=e.detail)
            self._fail(e)
            return
        self._complete(200, text, {"Content-Type": "application/x-yaml"})

    async def _write(self, body: str | bytes | None) -> None:
        self._adapter.debug_log("Intercepted callback config request", url=self.url, method=self.method)
        try:
            text = body.decode("utf-8") if isinstance(body, bytes) else (body or "")
        except UnicodeDecodeError as e:
            log.warning("Rejected non UTF-8 config save", url=self.url, error=str(e))
            self._fail(e, status=400, text=json.dumps({"error": f"Config must be UTF-8 text: {e}"}))
            return

        try:
            result = await self._adapter.save_config(text)
        except APIError as e:
            log.error("Callback config save failed", url=self.url, detail=e.detail)
            self._fail(e, status=e.status_code, text=json.dumps({"error": e.detail}))
            return
        self._complete(200, json.dumps(result), {"Content-Type": "application/json"})

    async def _passthrough(self, body: str | bytes | None) -> None:
        try:
            response = await self._client.request(
                self.method, self.url, headers=self.request_headers, content=body
            )
        except httpx.RequestError as e:
            self._fail(e)
            return
        self._complete(response.status_code, response.text, response.headers)

    def _complete(self, status: int, text: str, headers) -> None:
        self.status = status
        self.response_text = text
        self.response = text
        self.response_headers = httpx.Headers(headers)
        self.ready_state = DONE

        if self.on_ready_state_change:
            self.on_ready_state_change()
        if self.on_load:
            self.on_load()

    def _fail(self, exc: Exception, status: int = 0, text: str = "") -> None:
        self.status = status
        self.response_text = text
        self.response = text
        self.ready_state = DONE

        if self.on_ready_state_change:
            self.on_ready_state_change()
        if self.on_error:
            self.on_error(exc)
