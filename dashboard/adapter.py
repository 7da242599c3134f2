"""
Redirects the dashboard's conf.yml reads and writes to the config service.

The adapter owns one shared policy (which requests count as config requests,
how reads are served and how writes are stored) and exposes it through two
call conventions: an intercepting httpx transport for awaitable clients
(``client()``) and an event-driven ``CallbackRequest`` (``callback_request()``).
Anything that is not a config request goes to the original transport as is.
"""

import asyncio
from typing import Any, Callable, Literal, Mapping

import httpx
import structlog

from .api_client import ConfigServiceClient
from .cache import ConfigCache, epoch_millis
from .config import AdapterConfig
from .config import settings as default_settings
from .exceptions import APIError, ConfigUnavailableError
from .transport import ConfigInterceptTransport
from .xhr import CallbackRequest

log = structlog.get_logger(__name__)

BYPASS_HEADER = "X-Bypass-Adapter"
FALSY_HEADER_VALUES = {"", "0", "false", "no"}

READ = "read"
WRITE = "write"
Action = Literal["read", "write"]


class ConfigAdapter:
    def __init__(
        self,
        config: AdapterConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], int] = epoch_millis,
    ):
        self.config = config or default_settings
        self.debug = self.config.debug
        self.native_transport = transport or httpx.AsyncHTTPTransport()
        self.cache = ConfigCache(self.config.cache_duration, clock=clock)
        self.service = ConfigServiceClient(
            str(self.config.service_url),
            api_token=self.config.api_token,
            transport=self.native_transport,
            timeout=self.config.request_timeout,
        )
        self._native_client = httpx.AsyncClient(
            transport=self.native_transport, timeout=self.config.request_timeout
        )
        self.preload_task: asyncio.Task | None = None

    def debug_log(self, event: str, **kwargs: Any) -> None:
        if self.debug:
            log.info(event, **kwargs)

    @property
    def default_config_url(self) -> str:
        site = httpx.URL(str(self.config.site_url))
        return str(site.join(self.config.default_config_path))

    def is_config_url(self, url: str | httpx.URL) -> bool:
        url = str(url)
        name = self.config.config_filename
        return (
            url.endswith(f"/{name}")
            or url.endswith(f"user-data/{name}")
            or f"/{name}?" in url
        )

    @staticmethod
    def is_bypassed(headers: Mapping[str, str] | httpx.Headers | None) -> bool:
        value = httpx.Headers(headers or {}).get(BYPASS_HEADER)
        return value is not None and value.strip().lower() not in FALSY_HEADER_VALUES

    def intercepts(
        self,
        method: str | None,
        url: str | httpx.URL,
        headers: Mapping[str, str] | httpx.Headers | None = None,
    ) -> Action | None:
        """Classifies a request as a config read, a config write, or neither."""
        if not self.is_config_url(url) or self.is_bypassed(headers):
            return None

        method = (method or "GET").upper()
        if method == "GET":
            return READ
        if method in ("POST", "PUT"):
            return WRITE
        return None

    async def load_config(self) -> str:
        """
        Returns the config text: from the cache while it is fresh, else from the
        config service, else from the static default file.

        Raises:
            ConfigUnavailableError: the static fallback failed as well.
        """
        if self.config.cache_enabled:
            cached = self.cache.get()
            if cached is not None:
                self.debug_log(
                    "Serving cached config", cache_age_s=round(self.cache.age_ms / 1000)
                )
                return cached

        self.debug_log("Fetching config from the config service")
        try:
            text = await self.service.get_config()
        except APIError as e:
            log.error(
                "Failed to fetch config from the config service",
                status_code=e.status_code,
                detail=e.detail,
            )
            self.debug_log("Falling back to the default config file")
            return await self.load_default_config()

        if text is None:
            log.warning("No config stored in the config service, using the default config file")
            return await self.load_default_config()

        self.debug_log("Fetched config from the config service", size=len(text))
        self.cache.store(text)
        return text

    async def load_default_config(self) -> str:
        """Reads the static conf.yml directly; the result is not cached."""
        url = self.default_config_url
        self.debug_log("Loading default config file", url=url)
        try:
            response = await self._native_client.get(url, headers={BYPASS_HEADER: "true"})
            response.raise_for_status()
        except httpx.HTTPError as e:
            log.error("Failed to load the default config file", url=url, error=str(e))
            raise ConfigUnavailableError(
                f"Could not load the default config file {url}: {e}"
            ) from e

        self.debug_log("Loaded default config file", size=len(response.text))
        return response.text

    async def save_config(self, text: str) -> dict[str, Any]:
        """
        Stores ``text`` in the config service and primes the cache with it.

        Raises:
            AuthenticationError: the service rejected the API token.
            APIError: any other failure.
        """
        self.debug_log("Saving config to the config service", size=len(text))
        try:
            result = await self.service.save_config(text)
        except APIError as e:
            log.error(
                "Failed to save config to the config service",
                status_code=e.status_code,
                detail=e.detail,
            )
            raise

        self.debug_log("Config saved", metadata=result.get("metadata"))
        self.cache.store(text)
        return {"success": True, **result}

    async def reset_config(self) -> dict[str, Any]:
        """Deletes the stored config and drops the cached copy once the service confirms."""
        result = await self.service.reset_config()
        self.cache.clear()
        self.debug_log("Config reset, cache cleared")
        return result

    async def get_meta(self) -> dict[str, Any] | None:
        try:
            return await self.service.get_meta()
        except APIError as e:
            log.error("Failed to fetch config metadata", status_code=e.status_code, detail=e.detail)
            return None

    def clear_cache(self) -> None:
        self.cache.clear()
        self.debug_log("Config cache cleared")

    def set_debug(self, enabled: bool) -> None:
        self.debug = enabled

    async def preload(self) -> None:
        """Warms the cache; a failure here only means the first real read fetches."""
        if not self.config.cache_enabled:
            return
        try:
            await self.load_config()
        except ConfigUnavailableError:
            log.warning("Preloading config failed, it will be fetched when needed")

    def client(self, **kwargs: Any) -> httpx.AsyncClient:
        """An httpx client whose conf.yml requests go to the config service."""
        kwargs.setdefault("timeout", self.config.request_timeout)
        return httpx.AsyncClient(
            transport=ConfigInterceptTransport(self, self.native_transport), **kwargs
        )

    def callback_request(self) -> CallbackRequest:
        return CallbackRequest(self, self._native_client)

    async def aclose(self) -> None:
        if self.preload_task and not self.preload_task.done():
            self.preload_task.cancel()
        await self.service.close()
        await self._native_client.aclose()


_adapter: ConfigAdapter | None = None


def install(
    config: AdapterConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ConfigAdapter:
    """
    Creates the process-wide adapter on first call and returns it on every call.

    Call it before the dashboard issues its first request; requests made
    through clients created earlier are not intercepted.
    """
    global _adapter
    if _adapter is None:
        _adapter = ConfigAdapter(config, transport=transport)
        log.info(
            "Config adapter installed",
            service_url=str(_adapter.config.service_url),
            api_token_configured=bool(_adapter.config.api_token),
        )
        if _adapter.config.preload:
            _schedule_preload(_adapter)
    return _adapter


def _schedule_preload(adapter: ConfigAdapter) -> None:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        log.debug("No running event loop, skipping config preload")
        return
    adapter.preload_task = loop.create_task(adapter.preload())


def get_adapter() -> ConfigAdapter:
    if _adapter is None:
        raise RuntimeError("Config adapter is not installed, call install() first")
    return _adapter


async def uninstall() -> None:
    global _adapter
    if _adapter is not None:
        await _adapter.aclose()
        _adapter = None
