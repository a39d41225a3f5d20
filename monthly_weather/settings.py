# ABOUTME: Startup configuration for the monthly weather service using Pydantic BaseModel.
# ABOUTME: Loads .env and environment variables once and builds the shared httpx.AsyncClient.

import logging
import os
from collections.abc import Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx
from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from monthly_weather.errors import ConfigError

DEFAULT_WEATHER_API_URL = "https://timemachine.pirateweather.net/forecast"

# Portland, OR
DEFAULT_LATITUDE = 45.5898
DEFAULT_LONGITUDE = -122.5951

# Environment variable -> Settings field
_ENV_FIELDS = {
    "API_KEY": "api_key",
    "WEATHER_API_URL": "weather_api_url",
    "WEATHER_TIMEZONE": "timezone",
    "HOST": "host",
    "PORT": "port",
    "URL_PREFIX": "url_prefix",
    "DEFAULT_LAT": "default_latitude",
    "DEFAULT_LONG": "default_longitude",
    "MAX_CONCURRENCY": "max_concurrency",
    "HTTP_TIMEOUT": "http_timeout",
    "LOG_LEVEL": "log_level",
}


class Settings(BaseModel):
    """Configuration constructed once at startup and passed to the app and upstream client."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    weather_api_url: str = DEFAULT_WEATHER_API_URL
    timezone: str = "America/Los_Angeles"
    host: str = "0.0.0.0"
    port: int = Field(5000, ge=1, le=65535)
    url_prefix: str = "/v1"
    default_latitude: float = Field(DEFAULT_LATITUDE, ge=-90, le=90, allow_inf_nan=False)
    default_longitude: float = Field(DEFAULT_LONGITUDE, ge=-180, le=180, allow_inf_nan=False)
    max_concurrency: int | None = None
    http_timeout: float = Field(30.0, gt=0, allow_inf_nan=False)
    log_level: str = "INFO"

    @field_validator("api_key")
    @classmethod
    def _require_api_key(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("API_KEY must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        value = value.strip().upper()
        # getLevelName maps known names to their numeric level
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level: {value}")
        return value

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone: {value}") from e
        return value

    @field_validator("url_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = "/" + value
        return value

    @field_validator("weather_api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("max_concurrency", mode="before")
    @classmethod
    def _zero_means_unbounded(cls, value):
        if value in (None, "", 0, "0"):
            return None
        return value

    @field_validator("max_concurrency")
    @classmethod
    def _positive_concurrency(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise ValueError("MAX_CONCURRENCY must be positive")
        return value

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def weather_api(self) -> str:
        """Provider base URL with the API key path segment."""
        return f"{self.weather_api_url}/{self.api_key}"


def load_settings(env_file: str | os.PathLike | None = ".env", environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from a dotenv file and the process environment.

    Values already present in the environment win over the dotenv file.
    Raises ConfigError when API_KEY is missing or a value does not validate.
    """
    values: dict[str, str] = {}
    if env_file is not None and os.path.exists(env_file):
        values.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    values.update(os.environ if environ is None else environ)

    if not values.get("API_KEY"):
        raise ConfigError("API_KEY is not configured (set it in the environment or a .env file)")

    fields = {field: values[name] for name, field in _ENV_FIELDS.items() if name in values and values[name] != ""}
    try:
        return Settings(**fields)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the httpx client used for upstream provider calls.

    No retry transport: a failed request fails its day immediately.
    """
    return httpx.AsyncClient(timeout=settings.http_timeout)
