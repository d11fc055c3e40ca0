"""Google Maps Geocoding and Directions endpoints.

Endpoints:
  - /geocode/json (destination name -> coordinates)
  - /directions/json (origin + destination -> walking steps)
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from pylazarillo._normalize import strip_markup
from pylazarillo._transport import Transport
from pylazarillo.config import LazarilloConfig
from pylazarillo.exceptions import ExternalServiceError
from pylazarillo.models.maps import EMPTY_STATUSES, DirectionsResponse, GeocodeResponse
from pylazarillo.models.navigation import Coordinates

_logger = logging.getLogger(__name__)


def _raise_for_status(service: str, status: str, error_message: str | None) -> None:
    if status == "OK" or status in EMPTY_STATUSES:
        return
    detail = f" message={error_message}" if error_message else ""
    raise ExternalServiceError(
        f"{service} failed: status={status}{detail}",
        service=service,
        code=status,
    )


async def geocode(
    config: LazarilloConfig,
    transport: Transport,
    name: str,
) -> Coordinates | None:
    """Resolve *name* to coordinates, scoped to the configured city.

    Returns ``None`` when the provider finds nothing.
    """
    params = {
        "address": f"{name}, {config.city}",
        "key": config.google_maps_api_key,
        "language": config.user_language,
    }
    raw = await transport.get_json(f"{config.maps_base_url}/geocode/json", params)
    try:
        response = GeocodeResponse.model_validate(raw)
    except ValidationError as exc:
        raise ExternalServiceError(f"Unexpected geocoding payload: {exc}", service="geocoding") from exc

    _raise_for_status("geocoding", response.status, response.error_message)
    location = response.first_location()
    if location is None:
        _logger.debug("No geocoding result for %r (status=%s)", name, response.status)
    return location


async def directions(
    config: LazarilloConfig,
    transport: Transport,
    origin: Coordinates,
    destination: Coordinates,
) -> list[str]:
    """Return the walking maneuvers of the first route leg, markup stripped.

    An empty list means the provider has no usable leg.
    """
    params = {
        "origin": origin.as_query(),
        "destination": destination.as_query(),
        "mode": "walking",
        "language": config.directions_language,
        "key": config.google_maps_api_key,
    }
    raw = await transport.get_json(f"{config.maps_base_url}/directions/json", params)
    try:
        response = DirectionsResponse.model_validate(raw)
    except ValidationError as exc:
        raise ExternalServiceError(f"Unexpected directions payload: {exc}", service="directions") from exc

    _raise_for_status("directions", response.status, response.error_message)
    leg = response.first_leg()
    if leg is None:
        _logger.debug("No usable leg between %s and %s (status=%s)", origin.as_query(), destination.as_query(), response.status)
        return []

    steps = [strip_markup(step.html_instructions) for step in leg.steps]
    return [step for step in steps if step]
