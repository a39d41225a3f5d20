# ABOUTME: Exception taxonomy for the monthly weather service.
# ABOUTME: Request validation, upstream provider and startup configuration failures.


class WeatherError(Exception):
    """Base class for errors raised by the monthly weather service."""


class InvalidMonth(WeatherError):
    """The requested month is not a known month name or index."""

    def __init__(self, month: object):
        super().__init__("Invalid Request")
        self.month = month


class InvalidCoordinates(WeatherError):
    """A latitude or longitude query parameter is not a number."""

    def __init__(self, value: object):
        super().__init__("Invalid Request")
        self.value = value


class UpstreamError(WeatherError):
    """The weather provider call failed or returned a malformed body."""


class ConfigError(WeatherError):
    """Required startup configuration is missing or invalid."""
