# ABOUTME: ASGI web entry point exposing monthly hourly temperatures over HTTP.
# ABOUTME: Builds the Starlette app with CORS, the shared httpx client lifespan and the month route.

import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.datastructures import QueryParams
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from monthly_weather.errors import InvalidCoordinates, WeatherError
from monthly_weather.models import Coordinates, ErrorResponse, MonthResponse
from monthly_weather.months import resolve_month
from monthly_weather.settings import Settings, create_http_client, load_settings
from monthly_weather.weather_service import format_monthly_temps, get_monthly_temps_by_day

logger = logging.getLogger(__name__)

CORS_HEADERS = ["Origin", "X-Requested-With", "Content-Type", "Accept"]


def coordinates_from_query(query: QueryParams, settings: Settings) -> Coordinates:
    """Read lat/long query parameters, falling back to the configured default location."""
    lat = query.get("lat") or settings.default_latitude
    long = query.get("long") or settings.default_longitude
    try:
        return Coordinates(latitude=lat, longitude=long)
    except ValidationError as e:
        raise InvalidCoordinates(f"{lat},{long}") from e


def error_response(message: str) -> JSONResponse:
    body = ErrorResponse(message=message)
    return JSONResponse(body.model_dump(mode="json"), status_code=body.status)


async def monthly_weather(request: Request) -> JSONResponse:
    """GET /weather/{month}: hourly temperatures for each day of the month, grouped by date."""
    settings: Settings = request.app.state.settings
    month = request.path_params["month"]
    try:
        resolve_month(month)
        coordinates = coordinates_from_query(request.query_params, settings)
        logger.info("Monthly temperatures requested for %s at %s", month, coordinates)
        per_day = await get_monthly_temps_by_day(request.app.state.http_client, settings, month, coordinates)
        grouped = format_monthly_temps(per_day)
    except WeatherError as e:
        logger.warning("Request for %s failed: %s", month, e)
        return error_response(str(e))
    except Exception as e:
        logger.exception("Unexpected failure handling request for %s", month)
        return error_response(str(e))

    body = MonthResponse(data={month: grouped})
    return JSONResponse(body.model_dump(mode="json"), status_code=body.status)


def create_app(settings: Settings | None = None, http_client: httpx.AsyncClient | None = None) -> Starlette:
    """Build the ASGI application.

    Settings are loaded from the environment when not given. An injected
    http_client is used as-is and left open; otherwise one is created for
    the lifetime of the app.
    """
    if settings is None:
        settings = load_settings()

    @asynccontextmanager
    async def lifespan(app: Starlette):
        if http_client is not None:
            app.state.http_client = http_client
            yield
            return
        async with create_http_client(settings) as client:
            app.state.http_client = client
            yield

    routes = [Route("/weather/{month}", monthly_weather, methods=["GET"])]
    app = Starlette(
        routes=[Mount(settings.url_prefix, routes=routes)] if settings.url_prefix else routes,
        middleware=[
            Middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET"], allow_headers=CORS_HEADERS),
        ],
        lifespan=lifespan,
    )
    app.state.settings = settings
    # Available before lifespan startup for servers/tests that skip it
    app.state.http_client = http_client
    return app


def main() -> None:
    """Console entry point: load configuration, then serve with uvicorn."""
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Server listening on port %d", settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
