"""Client-side adapter that keeps the dashboard's conf.yml in the config service."""

from .adapter import ConfigAdapter, get_adapter, install, uninstall
from .config import AdapterConfig
from .exceptions import APIError, AuthenticationError, ConfigUnavailableError
from .xhr import CallbackRequest

__all__ = [
    "APIError",
    "AdapterConfig",
    "AuthenticationError",
    "CallbackRequest",
    "ConfigAdapter",
    "ConfigUnavailableError",
    "get_adapter",
    "install",
    "uninstall",
]
