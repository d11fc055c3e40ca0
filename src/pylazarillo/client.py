"""High-level async façade over the external services pylazarillo uses."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp
import openai

from pylazarillo._api import maps as _maps_api
from pylazarillo._api import sms as _sms_api
from pylazarillo._transport import HttpTransport
from pylazarillo.config import LazarilloConfig
from pylazarillo.emergency import EmergencyDispatcher
from pylazarillo.exceptions import LazarilloError
from pylazarillo.models.navigation import Coordinates
from pylazarillo.pipeline import RoutePipeline
from pylazarillo.resolver import DestinationResolver
from pylazarillo.session import NavigationServices, NavigationSession
from pylazarillo.translator import StepTranslator

_logger = logging.getLogger(__name__)


class LazarilloClient:
    """Owns the HTTP and chat clients and builds the collaborators on top.

    Usage::

        async with LazarilloClient(config) as client:
            session = client.create_session("client-1")
            await session.update_location(Coordinates(latitude=-26.83, longitude=-65.20))
            reply = await session.resolve_destination("llevame a Plaza Urquiza")
    """

    def __init__(
        self,
        config: LazarilloConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        openai_client: openai.AsyncOpenAI | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._external_openai = openai_client is not None
        self._openai = openai_client
        self._transport: HttpTransport | None = None
        self._resolver: DestinationResolver | None = None
        self._pipeline: RoutePipeline | None = None
        self._emergency: EmergencyDispatcher | None = None

    @property
    def config(self) -> LazarilloConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> LazarilloClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        if self._openai is None:
            self._openai = openai.AsyncOpenAI(
                api_key=self._config.openai_api_key,
                base_url=self._config.openai_base_url,
                timeout=self._config.request_timeout,
                max_retries=0,
            )
        self._transport = HttpTransport(self._http_session, timeout=self._config.request_timeout)
        self._resolver = DestinationResolver(self._config, self._openai)
        self._pipeline = RoutePipeline(
            self,
            StepTranslator(self._config, self._openai),
            timeout=self._config.request_timeout,
        )
        self._emergency = EmergencyDispatcher(self._config, self)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_openai and self._openai is not None:
            await self._openai.close()
            self._openai = None
        self._transport = None
        self._resolver = None
        self._pipeline = None
        self._emergency = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> HttpTransport:
        if self._transport is None:
            raise LazarilloError("Client not initialized. Use 'async with LazarilloClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Provider endpoints
    # ------------------------------------------------------------------

    async def geocode(self, name: str) -> Coordinates | None:
        return await _maps_api.geocode(self._config, self._require_transport(), name)

    async def directions(self, origin: Coordinates, destination: Coordinates) -> list[str]:
        return await _maps_api.directions(self._config, self._require_transport(), origin, destination)

    async def send_sms(self, to: str, body: str) -> dict[str, Any]:
        return await _sms_api.send_sms(self._config, self._require_transport(), to, body)

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    @property
    def resolver(self) -> DestinationResolver:
        if self._resolver is None:
            raise LazarilloError("Client not initialized")
        return self._resolver

    @property
    def pipeline(self) -> RoutePipeline:
        if self._pipeline is None:
            raise LazarilloError("Client not initialized")
        return self._pipeline

    @property
    def emergency(self) -> EmergencyDispatcher:
        if self._emergency is None:
            raise LazarilloError("Client not initialized")
        return self._emergency

    def navigation_services(self) -> NavigationServices:
        return NavigationServices(resolver=self.resolver, geocoder=self, planner=self.pipeline)

    def create_session(self, session_id: str) -> NavigationSession:
        """Build a fresh, empty session wired to this client's collaborators."""
        return NavigationSession(
            session_id,
            self.navigation_services(),
            timeout=self._config.request_timeout,
            resume_pending_destination=self._config.resume_pending_destination,
        )
