"""Route resolution pipeline: directions lookup followed by batch translation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Sequence
from typing import Protocol, TypeVar

from pydantic import ValidationError

from pylazarillo.exceptions import (
    ExternalServiceError,
    ExternalServiceTimeout,
    LazarilloTransportError,
    RouteUnavailable,
    TranslationFailed,
)
from pylazarillo.models.navigation import Coordinates, Route

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class DirectionsProvider(Protocol):
    async def directions(self, origin: Coordinates, destination: Coordinates) -> list[str]:
        ...


class Translator(Protocol):
    async def translate(self, steps: Sequence[str]) -> list[str]:
        ...


class RoutePipeline:
    """Compose the directions provider and the translator into one operation.

    The route is produced whole or not at all: any failure along the way
    raises :class:`RouteUnavailable` (or its :class:`TranslationFailed`
    subclass) and no untranslated step ever reaches the user.

    Parameters
    ----------
    directions : DirectionsProvider
        Walking directions lookup.
    translator : Translator
        Batch step translator.
    timeout : float or None
        Upper bound in seconds for each of the two calls, applied
        separately. ``None`` leaves them unbounded.
    """

    def __init__(
        self,
        directions: DirectionsProvider,
        translator: Translator,
        *,
        timeout: float | None = None,
    ) -> None:
        self._directions = directions
        self._translator = translator
        self._timeout = timeout

    async def plan(self, origin: Coordinates, destination: Coordinates) -> Route:
        try:
            steps = await self._bounded("directions", self._directions.directions(origin, destination))
        except (ExternalServiceError, LazarilloTransportError) as exc:
            raise RouteUnavailable(f"Directions lookup failed: {exc}") from exc

        if not steps:
            raise RouteUnavailable("Directions provider returned no usable leg")

        # TranslationFailed propagates as-is; it already is a RouteUnavailable.
        try:
            translated = await self._bounded("translator", self._translator.translate(steps))
        except (ExternalServiceError, LazarilloTransportError) as exc:
            raise TranslationFailed(f"Route translation failed: {exc}") from exc
        if len(translated) != len(steps):
            raise RouteUnavailable(f"Expected {len(steps)} translated steps, got {len(translated)}")

        try:
            route = Route(steps=tuple(translated))
        except ValidationError as exc:
            raise RouteUnavailable(f"Translated route is not usable: {exc}") from exc

        _logger.debug("Planned %d-step route %s -> %s", len(route), origin.as_query(), destination.as_query())
        return route

    async def _bounded(self, service: str, awaitable: Awaitable[T]) -> T:
        if self._timeout is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, self._timeout)
        except TimeoutError as exc:
            raise ExternalServiceTimeout(
                f"{service} did not answer within {self._timeout}s",
                service=service,
            ) from exc
