from __future__ import annotations

import pytest

from pylazarillo.events import SessionEventType, classify_voice_command, parse_event
from pylazarillo.exceptions import InvalidPayloadError


@pytest.mark.parametrize(
    "payload",
    [
        {"latitude": -26.83, "longitude": -65.204},
        {"latitud": -26.83, "longitud": -65.204},
        {"lat": -26.83, "lng": -65.204, "accuracy": 12},
    ],
)
def test_location_update_accepts_known_field_names(payload: dict[str, float]) -> None:
    event = parse_event("ubicacion", payload)

    assert event.type == SessionEventType.LOCATION_UPDATE
    assert event.location is not None
    assert event.location.latitude == -26.83
    assert event.location.longitude == -65.204


@pytest.mark.parametrize(
    "payload",
    [None, "here", {"latitude": -26.83}, {"latitude": 123.0, "longitude": -65.2}, {"latitude": "x", "longitude": 1}],
)
def test_location_update_rejects_bad_payloads(payload: object) -> None:
    with pytest.raises(InvalidPayloadError) as exc_info:
        parse_event("ubicacion", payload)
    assert exc_info.value.event == "ubicacion"


@pytest.mark.parametrize(
    "payload",
    ["llevame a Plaza Urquiza", {"text": "llevame a Plaza Urquiza"}, {"mensaje": "  llevame a Plaza Urquiza "}],
)
def test_destination_request_text_forms(payload: object) -> None:
    event = parse_event("encontrar_destino", payload)

    assert event.text == "llevame a Plaza Urquiza"


@pytest.mark.parametrize("payload", [None, {}, {"text": "   "}, 42])
def test_destination_request_requires_text(payload: object) -> None:
    with pytest.raises(InvalidPayloadError):
        parse_event("encontrar_destino", payload)


def test_command_events_ignore_payload() -> None:
    event = parse_event("siguiente_paso", {"whatever": True})

    assert event.type == SessionEventType.NEXT_STEP
    assert event.location is None and event.text is None
    assert event.received_at.tzinfo is not None


def test_unknown_event_is_rejected() -> None:
    with pytest.raises(InvalidPayloadError) as exc_info:
        parse_event("teletransportar", {})
    assert exc_info.value.event == "teletransportar"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Siguiente", SessionEventType.NEXT_STEP),
        ("próximo paso por favor", SessionEventType.NEXT_STEP),
        ("repetí, otra vez", SessionEventType.REPEAT_STEP),
        ("¿Podés repetir?", SessionEventType.REPEAT_STEP),
        ("Comenzar recorrido", SessionEventType.START_TRAVERSAL),
        ("empezá", SessionEventType.START_TRAVERSAL),
        ("¿Qué es este lugar?", SessionEventType.DESCRIBE_DESTINATION),
        ("dame más información", SessionEventType.DESCRIBE_DESTINATION),
        ("llevame a Plaza Urquiza", SessionEventType.DESTINATION_REQUEST),
        ("quiero ir a la Casa Histórica", SessionEventType.DESTINATION_REQUEST),
        ("Cancelá la navegación", SessionEventType.RESET),
        ("olvidalo, detené todo", SessionEventType.RESET),
    ],
)
def test_classify_voice_command(text: str, expected: SessionEventType) -> None:
    assert classify_voice_command(text) == expected


def test_cancel_event_takes_no_payload() -> None:
    event = parse_event("cancelar")

    assert event.type == SessionEventType.RESET
    assert event.text is None
