from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import pytest

from pylazarillo.models.navigation import Coordinates, Route
from pylazarillo.session import NavigationServices, NavigationSession

PLAZA_URQUIZA = Coordinates(latitude=-26.8241, longitude=-65.2226)


@dataclass
class StubNavigation:
    """Resolver, geocoder and planner in one object.

    When ``gate`` is set, ``resolve`` blocks until the test releases it.
    """

    name: str | None = "Plaza Urquiza"
    coordinates: Coordinates | None = PLAZA_URQUIZA
    steps: tuple[str, ...] = ("Camina hacia el norte por Av. Mitre", "Gira a la derecha en 24 de Septiembre")
    gate: asyncio.Event | None = None
    started: asyncio.Event = field(default_factory=asyncio.Event)
    utterances: list[str] = field(default_factory=list)
    origins: list[Coordinates] = field(default_factory=list)

    async def resolve(self, utterance: str) -> str | None:
        self.utterances.append(utterance)
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        return self.name

    async def describe(self, place: str) -> str:
        return f"Información sobre {place}"

    async def geocode(self, _name: str) -> Coordinates | None:
        return self.coordinates

    async def plan(self, origin: Coordinates, _destination: Coordinates) -> Route:
        self.origins.append(origin)
        return Route(steps=self.steps)

    def services(self) -> NavigationServices:
        return NavigationServices(resolver=self, geocoder=self, planner=self)


class FrameRecorder:
    """Collects ``(event, payload)`` pairs sent to one client."""

    def __init__(self) -> None:
        self.frames: list[tuple[str, dict[str, Any]]] = []

    async def __call__(self, event_name: str, payload: dict[str, Any]) -> None:
        self.frames.append((event_name, payload))

    @property
    def texts(self) -> list[str]:
        return [payload.get("respuesta", "") for _event, payload in self.frames]


@pytest.fixture
def navigation() -> StubNavigation:
    return StubNavigation()


@pytest.fixture
def session_factory(navigation: StubNavigation) -> Callable[[str], NavigationSession]:
    def _factory(session_id: str) -> NavigationSession:
        return NavigationSession(session_id, navigation.services(), timeout=5.0)

    return _factory
