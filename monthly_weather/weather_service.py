# ABOUTME: Service layer for the upstream hourly weather provider and monthly aggregation.
# ABOUTME: Fetches one day per request, fans out across a month and groups samples by day.

import asyncio
import itertools
import logging
from collections.abc import Iterable
from datetime import datetime, tzinfo

import httpx

from monthly_weather.errors import UpstreamError
from monthly_weather.models import Coordinates, GroupedTemps, HourlySample, day_key
from monthly_weather.months import days_of_month
from monthly_weather.settings import Settings

logger = logging.getLogger(__name__)

# Only the hourly block is needed from the provider
EXCLUDE_BLOCKS = "currently,minutely,daily,flags,alerts"


async def fetch_day(
    client: httpx.AsyncClient,
    settings: Settings,
    latitude: float,
    longitude: float,
    day: datetime,
) -> list[HourlySample]:
    """Fetch the hourly temperatures for one day from the weather provider."""
    url = f"{settings.weather_api}/{latitude},{longitude},{int(day.timestamp())}"
    try:
        resp = await client.get(url, params={"exclude": EXCLUDE_BLOCKS})
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPStatusError as e:
        # The request URL carries the API key, keep it out of messages
        raise UpstreamError(
            f"Weather provider returned {e.response.status_code} for {day.date().isoformat()}"
        ) from e
    except httpx.HTTPError as e:
        raise UpstreamError(f"Weather provider request failed for {day.date().isoformat()}") from e
    except ValueError as e:
        raise UpstreamError(f"Weather provider returned invalid JSON for {day.date().isoformat()}") from e

    hourly = data.get("hourly") if isinstance(data, dict) else None
    if not isinstance(hourly, dict) or not isinstance(hourly.get("data"), list):
        raise UpstreamError(f"Weather provider response has no hourly data for {day.date().isoformat()}")

    return parse_hourly_data(hourly["data"], settings.tz)


def parse_hourly_data(rows: list[dict], tz: tzinfo) -> list[HourlySample]:
    """Convert raw hourly records ({time: unix seconds, temperature}) into HourlySample rows."""
    result = []
    for row in rows:
        try:
            result.append(
                HourlySample(
                    time=datetime.fromtimestamp(row["time"], tz),
                    temperature=row.get("temperature"),
                )
            )
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise UpstreamError(f"Malformed hourly record from weather provider: {row!r}") from e
    return result


async def get_monthly_temps_by_day(
    client: httpx.AsyncClient,
    settings: Settings,
    month: str | int,
    coordinates: Coordinates,
    now: datetime | None = None,
) -> list[list[HourlySample]]:
    """Fetch every day of the resolved month concurrently.

    All requests are started at once unless ``settings.max_concurrency`` caps
    them. The first failure fails the whole month; no partial results.
    """
    days = list(days_of_month(month, now=now, tz=settings.tz))
    semaphore = asyncio.Semaphore(settings.max_concurrency) if settings.max_concurrency else None

    async def fetch(day: datetime) -> list[HourlySample]:
        if semaphore is None:
            return await fetch_day(client, settings, coordinates.latitude, coordinates.longitude, day)
        async with semaphore:
            return await fetch_day(client, settings, coordinates.latitude, coordinates.longitude, day)

    logger.debug("Fetching %d days for %s at %s", len(days), month, coordinates)
    return list(await asyncio.gather(*(fetch(day) for day in days)))


def format_monthly_temps(per_day: Iterable[Iterable[HourlySample]]) -> GroupedTemps:
    """Flatten per-day results and group samples by their own MM-DD-YYYY date.

    Key order and sample order within a key follow first appearance.
    """
    grouped: GroupedTemps = {}
    for sample in itertools.chain.from_iterable(per_day):
        grouped.setdefault(day_key(sample.time), []).append(sample)
    return grouped
