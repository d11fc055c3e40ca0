"""Normalized inbound session events.

Every frame a client sends is converted into an :class:`InboundEvent`
before it reaches a session. Malformed payloads are rejected here, so the
session machine only ever sees well-formed events.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, model_validator

from pylazarillo._normalize import normalize_text
from pylazarillo.exceptions import InvalidPayloadError
from pylazarillo.models.navigation import Coordinates


class SessionEventType(StrEnum):
    LOCATION_UPDATE = "ubicacion"
    DESTINATION_REQUEST = "encontrar_destino"
    NEXT_STEP = "siguiente_paso"
    REPEAT_STEP = "repetir_paso"
    START_TRAVERSAL = "comenzar_recorrido"
    DESCRIBE_DESTINATION = "detalles_destino"
    RESET = "cancelar"
    VOICE_COMMAND = "comando"


_TEXT_EVENTS = frozenset({SessionEventType.DESTINATION_REQUEST, SessionEventType.VOICE_COMMAND})


class _TextPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    text: str = Field(min_length=1, validation_alias=AliasChoices("text", "mensaje", "texto"))


class InboundEvent(BaseModel):
    """A validated event addressed to one session."""

    model_config = ConfigDict(frozen=True)

    type: SessionEventType
    location: Coordinates | None = None
    text: str | None = None
    received_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def _check_payload(self) -> InboundEvent:
        if self.type == SessionEventType.LOCATION_UPDATE and self.location is None:
            raise ValueError("location update requires coordinates")
        if self.type in _TEXT_EVENTS and not self.text:
            raise ValueError(f"{self.type} requires text")
        return self


def parse_event(name: str, data: Any = None) -> InboundEvent:
    """Validate a raw ``(event name, payload)`` pair.

    Raises
    ------
    InvalidPayloadError
        Unknown event name or missing/invalid required fields.
    """
    try:
        event_type = SessionEventType(name)
    except ValueError as exc:
        raise InvalidPayloadError(f"Unknown event {name!r}", event=str(name)) from exc

    try:
        if event_type == SessionEventType.LOCATION_UPDATE:
            if not isinstance(data, dict):
                raise InvalidPayloadError("Location update payload must be an object", event=name)
            return InboundEvent(type=event_type, location=Coordinates.model_validate(data))
        if event_type in _TEXT_EVENTS:
            if isinstance(data, str):
                data = {"text": data}
            if not isinstance(data, dict):
                raise InvalidPayloadError(f"{name} payload must be an object", event=name)
            return InboundEvent(type=event_type, text=_TextPayload.model_validate(data).text)
        return InboundEvent(type=event_type)
    except ValidationError as exc:
        raise InvalidPayloadError(f"Invalid {name} payload: {exc.errors(include_url=False)}", event=name) from exc


_COMMAND_KEYWORDS: tuple[tuple[SessionEventType, tuple[str, ...]], ...] = (
    (SessionEventType.RESET, ("cancelar", "cancela", "detener", "olvidalo", "olvidate")),
    (SessionEventType.NEXT_STEP, ("siguiente", "proximo", "avanzar", "avanza")),
    (SessionEventType.REPEAT_STEP, ("repetir", "repite", "repetime", "otra vez")),
    (SessionEventType.START_TRAVERSAL, ("comenzar", "iniciar", "empezar", "empeza", "comenza")),
    (SessionEventType.DESCRIBE_DESTINATION, ("detalles", "informacion", "que es", "contame")),
)


def classify_voice_command(text: str) -> SessionEventType:
    """Map a free-text command to the event it stands for.

    Matching is done on whole words of the accent-stripped, lowercased text.
    Anything that is not a known command is a destination request.
    """
    normalized = normalize_text(text)
    for event_type, keywords in _COMMAND_KEYWORDS:
        if any(re.search(rf"\b{re.escape(keyword)}\b", normalized) for keyword in keywords):
            return event_type
    return SessionEventType.DESTINATION_REQUEST
