"""Typed models for pylazarillo payloads and provider responses."""

from pylazarillo.models.emergency import EmergencyContact, EmergencyRequest, EmergencyResult
from pylazarillo.models.maps import (
    DirectionsLeg,
    DirectionsResponse,
    DirectionsRoute,
    DirectionsStep,
    GeocodeResponse,
    GeocodeResult,
)
from pylazarillo.models.navigation import Coordinates, Destination, NavigationResponse, Route

__all__ = [
    "Coordinates",
    "Destination",
    "DirectionsLeg",
    "DirectionsResponse",
    "DirectionsRoute",
    "DirectionsStep",
    "EmergencyContact",
    "EmergencyRequest",
    "EmergencyResult",
    "GeocodeResponse",
    "GeocodeResult",
    "NavigationResponse",
    "Route",
]
