"""aiohttp application: the WebSocket session channel and the emergency routes."""

from __future__ import annotations

import contextlib
import json
import logging
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from aiohttp import WSMsgType, web
from pydantic import ValidationError

from pylazarillo.client import LazarilloClient
from pylazarillo.config import LazarilloConfig
from pylazarillo.emergency import EmergencyDispatcher
from pylazarillo.exceptions import ExternalServiceError, InvalidPayloadError, LazarilloConfigError
from pylazarillo.models.emergency import EmergencyRequest
from pylazarillo.registry import ConnectionRegistry, SessionFactory

_logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    """Per-app collaborators, filled in when the app starts."""

    config: LazarilloConfig
    registry: ConnectionRegistry | None = None
    emergency: EmergencyDispatcher | None = None

    def require_registry(self) -> ConnectionRegistry:
        if self.registry is None:
            raise web.HTTPServiceUnavailable(reason="Service is starting")
        return self.registry

    def require_emergency(self) -> EmergencyDispatcher:
        if self.emergency is None:
            raise web.HTTPServiceUnavailable(reason="Service is starting")
        return self.emergency


SERVICES_KEY = web.AppKey("services", AppServices)

_Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def cors_middleware(request: web.Request, handler: _Handler) -> web.StreamResponse:
    """Allow any origin, GET and POST, like the mobile/web clients expect."""
    if request.method == "OPTIONS":
        response: web.StreamResponse = web.Response(status=204)
    else:
        response = await handler(request)
    if not response.prepared:
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    return response


# ------------------------------------------------------------------
# Session channel
# ------------------------------------------------------------------


def _decode_frame(raw: str) -> tuple[str, Any]:
    try:
        frame = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidPayloadError(f"Frame is not JSON: {raw[:64]}") from exc
    if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
        raise InvalidPayloadError("Frame must be an object with an 'event' name")
    return frame["event"], frame.get("data")


async def websocket_handler(request: web.Request) -> web.WebSocketResponse:
    registry = request.app[SERVICES_KEY].require_registry()
    ws = web.WebSocketResponse(heartbeat=30.0)
    await ws.prepare(request)

    connection_id = uuid.uuid4().hex

    async def send(event_name: str, payload: dict[str, Any]) -> None:
        if not ws.closed:
            await ws.send_json({"event": event_name, "data": payload})

    registry.connect(connection_id, send)
    try:
        async for msg in ws:
            if msg.type == WSMsgType.TEXT:
                try:
                    event_name, data = _decode_frame(msg.data)
                except InvalidPayloadError as exc:
                    registry.reject(connection_id, exc)
                    continue
                with contextlib.suppress(InvalidPayloadError):
                    # Already answered with an error frame by the registry.
                    registry.submit(connection_id, event_name, data)
            elif msg.type == WSMsgType.BINARY:
                registry.reject(connection_id, InvalidPayloadError("Binary frames are not supported, send JSON text"))
            elif msg.type == WSMsgType.ERROR:
                _logger.warning("[%s] connection error: %s", connection_id, ws.exception())
    finally:
        registry.disconnect(connection_id)
    return ws


# ------------------------------------------------------------------
# HTTP routes
# ------------------------------------------------------------------


async def send_emergency(request: web.Request) -> web.Response:
    dispatcher = request.app[SERVICES_KEY].require_emergency()
    try:
        body = await request.json()
        alert = EmergencyRequest.model_validate(body)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as exc:
        return web.json_response({"success": False, "error": f"Invalid request: {exc}"}, status=400)

    try:
        result = await dispatcher.send_alert(alert.phone_number, alert.message)
    except (ExternalServiceError, LazarilloConfigError) as exc:
        _logger.error("Error sending emergency message: %s", exc)
        return web.json_response({"success": False, "error": str(exc)}, status=500)
    return web.json_response(result.model_dump(mode="json"))


async def emergency_contact(request: web.Request) -> web.Response:
    contact = request.app[SERVICES_KEY].require_emergency().get_emergency_contact()
    return web.json_response(contact.model_dump(by_alias=True))


async def health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "sessions": len(request.app[SERVICES_KEY].require_registry())})


# ------------------------------------------------------------------
# Application factory
# ------------------------------------------------------------------


def create_app(
    config: LazarilloConfig,
    *,
    session_factory: SessionFactory | None = None,
    emergency: EmergencyDispatcher | None = None,
) -> web.Application:
    """Build the application.

    Without overrides a :class:`LazarilloClient` is opened for the lifetime of
    the app and provides both the sessions and the emergency dispatcher.
    """
    app = web.Application(middlewares=[cors_middleware])
    services = AppServices(config=config)
    app[SERVICES_KEY] = services

    async def services_ctx(app: web.Application) -> AsyncIterator[None]:
        async with contextlib.AsyncExitStack() as stack:
            client: LazarilloClient | None = None
            if session_factory is None or emergency is None:
                client = await stack.enter_async_context(LazarilloClient(config))

            factory = session_factory if session_factory is not None else client.create_session  # type: ignore[union-attr]
            registry = ConnectionRegistry(factory)
            services.registry = registry
            services.emergency = emergency if emergency is not None else client.emergency  # type: ignore[union-attr]
            yield
            await registry.close()
            services.registry = None
            services.emergency = None

    app.cleanup_ctx.append(services_ctx)
    app.router.add_get("/ws", websocket_handler)
    app.router.add_post("/enviar-emergencia", send_emergency)
    app.router.add_get("/llamar-emergencia", emergency_contact)
    app.router.add_get("/health", health)
    return app
