from datetime import datetime, timezone
from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Scalar = Union[float, str, None]


class NormalizedObservation(BaseModel):
    """
    Flat weather observation produced from a raw telemetry document.

    Every field is a primitive or null; nested source structures never
    reach this model.
    """

    observed_at: datetime = Field(..., description="Observation time (UTC)")
    location: str = Field("Unknown", description="Human-readable location name")
    clouds: Optional[float] = Field(None, description="Cloudiness percentage")
    main: Optional[float] = Field(None, description="Temperature (°C)")
    precipitation: Optional[float] = Field(
        None, description="Rain over 3h if reported, else snow over 3h (mm)"
    )
    weather: Optional[str] = Field(None, description="Weather description")
    wind: Optional[float] = Field(None, description="Wind speed (m/s)")
    raw_payload: Dict[str, Scalar] = Field(
        default_factory=dict,
        description="Auxiliary scalar fields (icon, humidity, pressure, gust, direction, rain/snow)",
    )

    @field_validator("observed_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive timestamps; everything stored is UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class PersistedRow(NormalizedObservation):
    """
    Observation as stored under the fixed target identity.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Target row identity")
    location_point: Optional[dict] = Field(
        None, description="Geographic point of the location (not populated yet)"
    )
