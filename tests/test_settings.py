# ABOUTME: Contract tests for startup configuration loading.
# ABOUTME: Covers required API key, dotenv precedence, validation and defaults.

import httpx
import pytest

from monthly_weather.errors import ConfigError
from monthly_weather.settings import (
    DEFAULT_LATITUDE,
    DEFAULT_LONGITUDE,
    DEFAULT_WEATHER_API_URL,
    Settings,
    create_http_client,
    load_settings,
)


class TestLoadSettings:
    def test_defaults_with_only_api_key(self):
        """Only API_KEY is required; everything else has a default.

        Implementation: Loads settings from a mapping containing just the key.
        Passing implies: The server starts on port 5000 under /v1 with Portland defaults.
        """
        settings = load_settings(env_file=None, environ={"API_KEY": "abc"})

        assert settings.api_key == "abc"
        assert settings.port == 5000
        assert settings.url_prefix == "/v1"
        assert settings.default_latitude == DEFAULT_LATITUDE == 45.5898
        assert settings.default_longitude == DEFAULT_LONGITUDE == -122.5951
        assert settings.max_concurrency is None
        assert settings.weather_api == f"{DEFAULT_WEATHER_API_URL}/abc"

    def test_missing_api_key_is_fatal(self):
        """A missing API key raises ConfigError.

        Implementation: Loads settings from an empty mapping.
        Passing implies: The server cannot start without provider credentials.
        """
        with pytest.raises(ConfigError):
            load_settings(env_file=None, environ={})

    def test_blank_api_key_is_fatal(self):
        with pytest.raises(ConfigError):
            load_settings(env_file=None, environ={"API_KEY": "   "})

    def test_reads_dotenv_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("API_KEY=from-file\nPORT=8080\nMAX_CONCURRENCY=5\n")

        settings = load_settings(env_file=env_file, environ={})

        assert settings.api_key == "from-file"
        assert settings.port == 8080
        assert settings.max_concurrency == 5

    def test_environment_overrides_dotenv(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("API_KEY=from-file\nURL_PREFIX=/file\n")

        settings = load_settings(env_file=env_file, environ={"API_KEY": "from-env"})

        assert settings.api_key == "from-env"
        assert settings.url_prefix == "/file"

    def test_missing_dotenv_file_falls_back_to_environment(self, tmp_path):
        settings = load_settings(env_file=tmp_path / "absent.env", environ={"API_KEY": "abc"})
        assert settings.api_key == "abc"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"PORT": "not-a-port"},
            {"PORT": "99999"},
            {"PORT": "0"},
            {"HTTP_TIMEOUT": "-5"},
            {"HTTP_TIMEOUT": "0"},
            {"LOG_LEVEL": "verbose"},
            {"DEFAULT_LAT": "91"},
            {"WEATHER_TIMEZONE": "Mars/Olympus_Mons"},
            {"MAX_CONCURRENCY": "-2"},
        ],
    )
    def test_invalid_values_raise_config_error(self, overrides):
        with pytest.raises(ConfigError):
            load_settings(env_file=None, environ={"API_KEY": "abc", **overrides})

    def test_log_level_is_normalized(self):
        settings = load_settings(env_file=None, environ={"API_KEY": "abc", "LOG_LEVEL": " debug "})
        assert settings.log_level == "DEBUG"

    def test_zero_concurrency_means_unbounded(self):
        settings = load_settings(env_file=None, environ={"API_KEY": "abc", "MAX_CONCURRENCY": "0"})
        assert settings.max_concurrency is None


class TestSettings:
    def test_prefix_is_normalized(self):
        assert Settings(api_key="abc", url_prefix="api/").url_prefix == "/api"
        assert Settings(api_key="abc", url_prefix="").url_prefix == ""

    def test_timezone_property(self):
        assert str(Settings(api_key="abc", timezone="Europe/Copenhagen").tz) == "Europe/Copenhagen"


class TestCreateHttpClient:
    @pytest.mark.asyncio
    async def test_uses_configured_timeout(self):
        client = create_http_client(Settings(api_key="abc", http_timeout=5))
        try:
            assert isinstance(client, httpx.AsyncClient)
            assert client.timeout == httpx.Timeout(5)
        finally:
            await client.aclose()
