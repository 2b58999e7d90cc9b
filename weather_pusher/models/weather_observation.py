from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from weather_pusher.models.base import Base


class WeatherObservation(Base):
    """
    Latest weather observation.

    The table is meant to hold one logical row per configured target id:
    every push upserts the row keyed on `id`, so the table never grows
    beyond the number of distinct targets that were ever configured.
    """

    __tablename__ = "weather_observations"

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Configured target identity of the observation row",
    )

    observed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Observation time reported by the source, or ingestion time (UTC)",
    )

    location: Mapped[str] = mapped_column(
        String(256),
        nullable=False,
        default="Unknown",
        comment="Human-readable location name",
    )

    location_point: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
        comment="Geographic point of the location; not populated by the source yet",
    )

    clouds: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        comment="Cloudiness percentage",
    )

    main: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        comment="Air temperature in degrees Celsius",
    )

    precipitation: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        comment="Rain over the last 3h, else snow over the last 3h (mm)",
    )

    weather: Mapped[Optional[str]] = mapped_column(
        String(256),
        nullable=True,
        comment="Textual weather description",
    )

    wind: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        comment="Wind speed (m/s)",
    )

    raw_payload: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
        comment="Whitelisted auxiliary scalar fields from the source payload",
    )
