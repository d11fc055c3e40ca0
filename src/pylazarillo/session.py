"""Per-connection navigation session state machine.

A :class:`NavigationSession` owns the location, destination, route and
progress pointer of exactly one connected client. It is not safe to call
concurrently; :class:`pylazarillo.registry.SessionWorker` feeds it one
event at a time, in arrival order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, TypeVar

from pydantic import BaseModel, ConfigDict

from pylazarillo._constants import (
    MSG_ARRIVED,
    MSG_DESCRIBE_FAILED,
    MSG_DESTINATION_FOUND,
    MSG_GEOCODING_FAILED,
    MSG_NEXT_STEP,
    MSG_NO_DESTINATION,
    MSG_NO_DESTINATION_SELECTED,
    MSG_NO_ROUTE,
    MSG_REPEAT_STEP,
    MSG_RESET,
    MSG_ROUTE_UNAVAILABLE,
    MSG_TRAVERSAL_STARTED,
    MSG_WAITING_LOCATION,
)
from pylazarillo.events import InboundEvent, SessionEventType, classify_voice_command
from pylazarillo.exceptions import (
    ExternalServiceError,
    ExternalServiceTimeout,
    GeocodingFailed,
    InvalidState,
    LazarilloTransportError,
    LocationUnavailable,
    NoDestinationFound,
    RouteUnavailable,
)
from pylazarillo.models.navigation import Coordinates, Destination, NavigationResponse, Route

_logger = logging.getLogger(__name__)

T = TypeVar("T")

_SERVICE_ERRORS = (ExternalServiceError, LazarilloTransportError)


class NavigationState(StrEnum):
    IDLE = "idle"
    ROUTE_READY = "route_ready"
    TRAVERSING = "traversing"


# ------------------------------------------------------------------
# Collaborator interfaces
# ------------------------------------------------------------------


class DestinationResolver(Protocol):
    async def resolve(self, utterance: str) -> str | None:
        ...

    async def describe(self, place: str) -> str:
        ...


class Geocoder(Protocol):
    async def geocode(self, name: str) -> Coordinates | None:
        ...


class RoutePlanner(Protocol):
    """Builds a route; implementations bound each of their external calls."""

    async def plan(self, origin: Coordinates, destination: Coordinates) -> Route:
        ...


@dataclass(frozen=True, slots=True)
class NavigationServices:
    """The external collaborators a session consults."""

    resolver: DestinationResolver
    geocoder: Geocoder
    planner: RoutePlanner


# ------------------------------------------------------------------
# State
# ------------------------------------------------------------------


class SessionState(BaseModel):
    """Mutable navigation state of one session.

    ``route`` and ``destination`` are set and cleared together, and
    ``step_index`` only means something while ``route`` is present.
    """

    model_config = ConfigDict(extra="forbid")

    location: Coordinates | None = None
    destination: Destination | None = None
    route: Route | None = None
    step_index: int = 0
    state: NavigationState = NavigationState.IDLE
    pending_destination: Destination | None = None

    def is_consistent(self) -> bool:
        if self.route is None:
            return self.destination is None and self.step_index == 0 and self.state == NavigationState.IDLE
        return self.destination is not None and 0 <= self.step_index < len(self.route)

    @property
    def current_step(self) -> str | None:
        if self.route is None:
            return None
        return self.route[self.step_index]


class NavigationSession:
    """Navigation state machine for a single client.

    States: ``IDLE`` → ``ROUTE_READY`` (route resolved) → ``TRAVERSING``
    (stepping through the route) → arrival, which returns to ``IDLE``.
    Location updates are accepted in every state and never change it.

    Every operation returns the :class:`NavigationResponse` to send back to
    the client, or ``None`` when nothing should be sent. External failures
    are turned into guiding replies; they never escape this class.
    """

    def __init__(
        self,
        session_id: str,
        services: NavigationServices,
        *,
        timeout: float,
        resume_pending_destination: bool = False,
    ) -> None:
        self.session_id = session_id
        self._services = services
        self._timeout = timeout
        self._resume_pending = resume_pending_destination
        self._state = SessionState()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> NavigationState:
        return self._state.state

    @property
    def location(self) -> Coordinates | None:
        return self._state.location

    @property
    def destination(self) -> Destination | None:
        return self._state.destination

    @property
    def route(self) -> Route | None:
        return self._state.route

    @property
    def step_index(self) -> int:
        return self._state.step_index

    def snapshot(self) -> SessionState:
        """Copy of the current state, safe to keep after further events."""
        return self._state.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Event dispatch
    # ------------------------------------------------------------------

    async def handle(self, event: InboundEvent) -> NavigationResponse | None:
        """Apply one inbound event and return the reply, if any."""
        event_type = event.type
        if event_type == SessionEventType.VOICE_COMMAND:
            assert event.text is not None  # noqa: S101
            event_type = classify_voice_command(event.text)
            _logger.debug("[%s] voice command %r -> %s", self.session_id, event.text, event_type)

        if event_type == SessionEventType.LOCATION_UPDATE:
            assert event.location is not None  # noqa: S101
            return await self.update_location(event.location)
        if event_type == SessionEventType.DESTINATION_REQUEST:
            assert event.text is not None  # noqa: S101
            return await self.resolve_destination(event.text)
        if event_type == SessionEventType.NEXT_STEP:
            return self.advance_step()
        if event_type == SessionEventType.REPEAT_STEP:
            return self.repeat_step()
        if event_type == SessionEventType.START_TRAVERSAL:
            return self.restart_traversal()
        if event_type == SessionEventType.DESCRIBE_DESTINATION:
            return await self.describe_destination()
        if event_type == SessionEventType.RESET:
            return self.reset()
        raise ValueError(f"Unhandled event type {event_type!r}")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def update_location(self, coordinates: Coordinates) -> NavigationResponse | None:
        """Record the latest position.

        Silent, except when a destination is waiting for a location
        (``resume_pending_destination``): routing is then finished here.
        """
        self._state.location = coordinates
        pending = self._state.pending_destination
        if pending is None:
            return None

        self._state.pending_destination = None
        _logger.info("[%s] location arrived, resuming route to %s", self.session_id, pending.name)
        try:
            return await self._route_to(pending, coordinates)
        except RouteUnavailable as exc:
            _logger.warning("[%s] route to %s unavailable: %s", self.session_id, pending.name, exc)
            return NavigationResponse(text=MSG_ROUTE_UNAVAILABLE)

    async def resolve_destination(self, utterance: str) -> NavigationResponse:
        """Resolve, geocode and route to the destination named in *utterance*.

        Each step short-circuits on failure and leaves the previous
        destination/route untouched; the new route is only stored once the
        whole chain has succeeded.
        """
        # A new request always supersedes one that was waiting for a location.
        self._state.pending_destination = None
        try:
            destination = await self._locate(utterance)
            location = self._state.location
            if location is None:
                if self._resume_pending:
                    self._state.pending_destination = destination
                raise LocationUnavailable(f"No location yet for destination {destination.name!r}")
            return await self._route_to(destination, location)
        except NoDestinationFound as exc:
            _logger.info("[%s] %s", self.session_id, exc)
            return NavigationResponse(text=MSG_NO_DESTINATION)
        except GeocodingFailed as exc:
            _logger.warning("[%s] %s", self.session_id, exc)
            return NavigationResponse(text=MSG_GEOCODING_FAILED)
        except LocationUnavailable as exc:
            _logger.info("[%s] %s", self.session_id, exc)
            return NavigationResponse(text=MSG_WAITING_LOCATION)
        except RouteUnavailable as exc:
            _logger.warning("[%s] route unavailable: %s", self.session_id, exc)
            return NavigationResponse(text=MSG_ROUTE_UNAVAILABLE)

    def advance_step(self) -> NavigationResponse:
        """Move to the next instruction, or finish the journey from the last one."""
        route = self._state.route
        if route is None or self._state.step_index >= route.last_index:
            if route is None:
                _logger.debug("[%s] next step without a route", self.session_id)
            else:
                _logger.info("[%s] arrived at %s", self.session_id, self._destination_name())
            self._clear_route()
            return NavigationResponse(text=MSG_ARRIVED)

        self._state.step_index += 1
        self._state.state = NavigationState.TRAVERSING
        return NavigationResponse(text=MSG_NEXT_STEP.format(step=route[self._state.step_index]))

    def repeat_step(self) -> NavigationResponse | None:
        """Say the current instruction again; silent when there is no route."""
        step = self._state.current_step
        if step is None:
            _logger.debug("[%s] repeat requested without a route, ignoring", self.session_id)
            return None
        return NavigationResponse(text=MSG_REPEAT_STEP.format(step=step))

    def restart_traversal(self) -> NavigationResponse:
        """Go back to the first instruction of the current route."""
        try:
            route = self._require_route()
        except InvalidState:
            return NavigationResponse(text=MSG_NO_ROUTE)

        self._state.step_index = 0
        self._state.state = NavigationState.TRAVERSING
        return NavigationResponse(text=MSG_TRAVERSAL_STARTED.format(step=route[0]))

    async def describe_destination(self) -> NavigationResponse:
        """Answer "what is this place?" for the current destination."""
        destination = self._state.destination
        if destination is None:
            return NavigationResponse(text=MSG_NO_DESTINATION_SELECTED)

        _logger.info("[%s] describing %s", self.session_id, destination.name)
        try:
            answer = await self._guarded("place-describer", self._services.resolver.describe(destination.name))
        except _SERVICE_ERRORS as exc:
            _logger.warning("[%s] could not describe %s: %s", self.session_id, destination.name, exc)
            return NavigationResponse(text=MSG_DESCRIBE_FAILED)
        return NavigationResponse(text=answer)

    def reset(self) -> NavigationResponse:
        """Forget destination, route and any pending destination. Location is kept."""
        self._state.pending_destination = None
        self._clear_route()
        _logger.info("[%s] navigation reset", self.session_id)
        return NavigationResponse(text=MSG_RESET)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _guarded(self, service: str, awaitable: Awaitable[T]) -> T:
        """Await an external call, bounded by the session timeout."""
        try:
            return await asyncio.wait_for(awaitable, self._timeout)
        except TimeoutError as exc:
            raise ExternalServiceTimeout(
                f"{service} did not answer within {self._timeout}s",
                service=service,
            ) from exc

    async def _locate(self, utterance: str) -> Destination:
        try:
            name = await self._guarded("destination-resolver", self._services.resolver.resolve(utterance))
        except _SERVICE_ERRORS as exc:
            raise NoDestinationFound(f"Destination resolver failed for {utterance!r}: {exc}") from exc
        if name is None:
            raise NoDestinationFound(f"No destination in {utterance!r}")

        _logger.info("[%s] destination detected: %s", self.session_id, name)
        try:
            coordinates = await self._guarded("geocoding", self._services.geocoder.geocode(name))
        except _SERVICE_ERRORS as exc:
            raise GeocodingFailed(f"Geocoding {name!r} failed: {exc}") from exc
        if coordinates is None:
            raise GeocodingFailed(f"No coordinates for {name!r}")
        return Destination.from_coordinates(name, coordinates)

    async def _route_to(self, destination: Destination, origin: Coordinates) -> NavigationResponse:
        # The planner bounds each of its external calls itself.
        try:
            route = await self._services.planner.plan(origin, destination.coordinates)
        except _SERVICE_ERRORS as exc:
            raise RouteUnavailable(f"Route planning failed: {exc}") from exc

        self._set_route(destination, route)
        _logger.info("[%s] route to %s ready (%d steps)", self.session_id, destination.name, len(route))
        return NavigationResponse(
            text=MSG_DESTINATION_FOUND.format(name=destination.name),
            destination=destination,
            route=route.steps,
        )

    def _require_route(self) -> Route:
        route = self._state.route
        if route is None:
            raise InvalidState("No active route")
        return route

    def _destination_name(self) -> str:
        destination = self._state.destination
        return destination.name if destination is not None else "<none>"

    def _set_route(self, destination: Destination, route: Route) -> None:
        self._state.destination = destination
        self._state.route = route
        self._state.step_index = 0
        self._state.state = NavigationState.ROUTE_READY

    def _clear_route(self) -> None:
        self._state.destination = None
        self._state.route = None
        self._state.step_index = 0
        self._state.state = NavigationState.IDLE
