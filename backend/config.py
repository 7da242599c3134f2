from pydantic import Field, RedisDsn, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALLOWED_ORIGINS = [
    "https://dashy-8ke.pages.dev",
    "http://localhost:8080",
    "http://localhost:4000",
]


class AppConfig(BaseSettings):
    """
    Config service settings loaded from environment variables.

    API_TOKEN protects the write endpoints. Leaving it unset accepts every write,
    which is only acceptable for local development.
    """

    service_name: str = Field(default="config-service", alias="SERVICE_NAME")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    json_logs: bool = Field(default=False, alias="JSON_LOGS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    tracing_enabled: bool = Field(default=False, alias="TRACING_ENABLED")

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8787, alias="PORT")

    api_token: str | None = Field(default=None, alias="API_TOKEN")
    allowed_origins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS), alias="ALLOWED_ORIGINS"
    )

    redis_url: RedisDsn = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    redis_password: str | None = Field(default=None, alias="REDIS_PASSWORD")
    config_key: str = Field(default="dashy-config-yml", alias="CONFIG_KEY")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("allowed_origins")
    @classmethod
    def require_origin(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("ALLOWED_ORIGINS must contain at least one origin")
        return value


settings = AppConfig()
