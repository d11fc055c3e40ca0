"""Google Maps web-service response models.

Only the fields the navigation pipeline reads are modelled; everything
else in the provider payload is ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pylazarillo.models.navigation import Coordinates

#: Statuses that mean "the request was fine, there is simply nothing to return".
EMPTY_STATUSES = frozenset({"ZERO_RESULTS", "NOT_FOUND"})


class _MapsModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class GeocodeGeometry(_MapsModel):
    location: Coordinates


class GeocodeResult(_MapsModel):
    formatted_address: str | None = None
    geometry: GeocodeGeometry


class GeocodeResponse(_MapsModel):
    status: str
    error_message: str | None = None
    results: list[GeocodeResult] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "OK"

    def first_location(self) -> Coordinates | None:
        if not self.ok or not self.results:
            return None
        return self.results[0].geometry.location


class DirectionsStep(_MapsModel):
    html_instructions: str = ""


class DirectionsLeg(_MapsModel):
    steps: list[DirectionsStep] = Field(default_factory=list)


class DirectionsRoute(_MapsModel):
    summary: str | None = None
    legs: list[DirectionsLeg] = Field(default_factory=list)


class DirectionsResponse(_MapsModel):
    status: str
    error_message: str | None = None
    routes: list[DirectionsRoute] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "OK"

    def first_leg(self) -> DirectionsLeg | None:
        """First leg of the first route, or ``None`` when there is no usable leg."""
        if not self.ok or not self.routes:
            return None
        legs = self.routes[0].legs
        if not legs or not legs[0].steps:
            return None
        return legs[0]
