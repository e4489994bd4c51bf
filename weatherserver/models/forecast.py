"""weather.gov payload shapes and the decoded forecast period."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class PointsPayload(BaseModel):
    """``/points/{lat},{lon}`` response, JSON-LD flavour (no ``properties``)."""

    model_config = ConfigDict(extra="ignore")

    forecast: str = ""


class PeriodPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = ""
    temperature: float = 0.0
    temperature_unit: str = Field(default="F", alias="temperatureUnit")
    short_forecast: str = Field(default="", alias="shortForecast")

    @field_validator("temperature", "short_forecast", mode="before")
    @classmethod
    def _null_as_zero(cls, value, info: ValidationInfo):
        # JSON null decodes to the field's zero value, like an absent field
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class ForecastPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    periods: list[PeriodPayload] = []


@dataclass(frozen=True)
class ForecastPeriod:
    short_forecast: str
    temperature: float  # Fahrenheit, not converted
