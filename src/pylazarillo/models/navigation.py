"""Navigation value models: coordinates, destinations, routes and replies."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Coordinates(BaseModel):
    """A WGS84 coordinate pair.

    Accepts the English field names as well as the Spanish ones sent by
    existing clients (``latitud``/``longitud``) and the short ``lat``/``lng``
    pair used by Google Maps.

    Parameters
    ----------
    latitude : float
        Latitude in degrees, ``-90..90``.
    longitude : float
        Longitude in degrees, ``-180..180``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    latitude: float = Field(
        ge=-90.0,
        le=90.0,
        validation_alias=AliasChoices("latitude", "latitud", "lat"),
        serialization_alias="latitud",
    )
    longitude: float = Field(
        ge=-180.0,
        le=180.0,
        validation_alias=AliasChoices("longitude", "longitud", "lng", "lon"),
        serialization_alias="longitud",
    )

    def as_query(self) -> str:
        """``"lat,lng"`` form used by the directions provider."""
        return f"{self.latitude},{self.longitude}"


class Destination(BaseModel):
    """A resolved destination: canonical name plus geocoded position."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("name", "nombre"),
        serialization_alias="nombre",
    )
    latitude: float = Field(
        validation_alias=AliasChoices("latitude", "latitud"),
        serialization_alias="latitud",
    )
    longitude: float = Field(
        validation_alias=AliasChoices("longitude", "longitud"),
        serialization_alias="longitud",
    )

    @classmethod
    def from_coordinates(cls, name: str, coordinates: Coordinates) -> Destination:
        return cls(name=name, latitude=coordinates.latitude, longitude=coordinates.longitude)

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class Route(BaseModel):
    """Ordered, immutable sequence of walking instructions (at least one)."""

    model_config = ConfigDict(frozen=True)

    steps: tuple[str, ...] = Field(min_length=1)

    @field_validator("steps")
    @classmethod
    def _reject_blank_steps(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if any(not step.strip() for step in value):
            raise ValueError("route steps must be non-empty")
        return value

    def __len__(self) -> int:
        return len(self.steps)

    def __getitem__(self, index: int) -> str:
        return self.steps[index]

    @property
    def last_index(self) -> int:
        return len(self.steps) - 1


class NavigationResponse(BaseModel):
    """Outbound ``respuesta`` event.

    ``text`` is always present; the destination record and the full route
    are only attached to a successful resolution.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str = Field(serialization_alias="respuesta")
    destination: Destination | None = Field(default=None, serialization_alias="destino")
    route: tuple[str, ...] | None = Field(default=None, serialization_alias="ruta")

    def to_payload(self) -> dict[str, Any]:
        """Wire representation sent to the client."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
