from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class AdapterConfig(BaseSettings):
    """Static settings of the config adapter, read once when it is installed."""

    service_name: str = Field(default="dashboard", alias="SERVICE_NAME")
    json_logs: bool = Field(default=False, alias="JSON_LOGS")

    service_url: HttpUrl = Field(default="http://localhost:8787", alias="CONFIG_SERVICE_URL")
    # Must match API_TOKEN on the config service when one is set there.
    api_token: str | None = Field(default=None, alias="CONFIG_API_TOKEN")

    site_url: HttpUrl = Field(default="http://localhost:8080", alias="DASHBOARD_URL")
    default_config_path: str = Field(default="/conf.yml", alias="DEFAULT_CONFIG_PATH")
    config_filename: str = Field(default="conf.yml", alias="CONFIG_FILENAME")

    cache_enabled: bool = Field(default=True, alias="CACHE_ENABLED")
    cache_duration: int = Field(default=60_000, ge=0, alias="CACHE_DURATION")

    debug: bool = Field(default=True, alias="ADAPTER_DEBUG")
    preload: bool = Field(default=True, alias="ADAPTER_PRELOAD")
    request_timeout: float = Field(default=30.0, alias="REQUEST_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )


settings = AdapterConfig()
