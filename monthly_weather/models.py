# ABOUTME: Pydantic BaseModels for hourly samples, coordinates and response payloads.
# ABOUTME: Defines the structured types passed between the client, formatter and web layer.

from datetime import datetime

from pydantic import AwareDatetime, BaseModel, Field


class Coordinates(BaseModel):
    """Location the monthly temperatures are fetched for."""

    latitude: float = Field(ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(ge=-180, le=180, allow_inf_nan=False)


class HourlySample(BaseModel):
    """One hourly temperature reading from the weather provider."""

    time: AwareDatetime
    temperature: float | None = None


GroupedTemps = dict[str, list[HourlySample]]


class MonthResponse(BaseModel):
    """Successful payload: samples grouped by MM-DD-YYYY under the requested month."""

    status: int = 200
    data: dict[str, GroupedTemps]


class ErrorResponse(BaseModel):
    message: str
    status: int = 500


def day_key(time: datetime) -> str:
    """Grouping key for a sample, taken from the sample's own timestamp."""
    return time.strftime("%m-%d-%Y")
