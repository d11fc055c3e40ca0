from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import pytest

from pylazarillo._api.sms import send_sms
from pylazarillo.config import LazarilloConfig
from pylazarillo.emergency import EmergencyDispatcher
from pylazarillo.exceptions import ExternalServiceError, LazarilloConfigError, LazarilloTransportError

PHONE = "+5493811234567"


class _FakeTransport:
    def __init__(self, response: dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self._response = response or {}
        self._error = error
        self.posts: list[tuple[str, dict[str, str], tuple[str, str] | None]] = []

    async def get_json(self, url: str, params: Mapping[str, str]) -> dict[str, Any]:
        raise AssertionError("unexpected GET")

    async def post_form(self, url: str, data: Mapping[str, str], *, auth: tuple[str, str] | None = None) -> dict[str, Any]:
        self.posts.append((url, dict(data), auth))
        if self._error is not None:
            raise self._error
        return self._response


class _TransportSender:
    """Adapts a transport to the dispatcher's sender interface, like the client does."""

    def __init__(self, config: LazarilloConfig, transport: _FakeTransport) -> None:
        self._config = config
        self._transport = transport

    async def send_sms(self, to: str, body: str) -> dict[str, Any]:
        return await send_sms(self._config, self._transport, to, body)


def _config(**overrides: Any) -> LazarilloConfig:
    values: dict[str, Any] = {
        "twilio_account_sid": "AC123",
        "twilio_auth_token": "auth-token",
        "twilio_phone_number": "+15550001111",
    }
    values.update(overrides)
    return LazarilloConfig(**values)


@pytest.mark.asyncio
async def test_send_sms_posts_to_messages_resource() -> None:
    transport = _FakeTransport({"sid": "SM1", "status": "queued"})

    response = await send_sms(_config(), transport, PHONE, "ayuda")

    assert response == {"sid": "SM1", "status": "queued"}
    url, data, auth = transport.posts[0]
    assert url == "https://api.twilio.com/2010-04-01/Accounts/AC123/Messages.json"
    assert data == {"To": PHONE, "From": "+15550001111", "Body": "ayuda"}
    assert auth == ("AC123", "auth-token")


@pytest.mark.asyncio
async def test_send_sms_requires_credentials() -> None:
    transport = _FakeTransport()

    with pytest.raises(LazarilloConfigError):
        await send_sms(_config(twilio_auth_token=""), transport, PHONE, "ayuda")
    assert transport.posts == []


@pytest.mark.asyncio
async def test_send_sms_http_error_keeps_status_code() -> None:
    transport = _FakeTransport(error=LazarilloTransportError("HTTP 401", status_code=401))

    with pytest.raises(ExternalServiceError) as exc_info:
        await send_sms(_config(), transport, PHONE, "ayuda")
    assert exc_info.value.code == "401"
    assert exc_info.value.service == "sms"


@pytest.mark.asyncio
async def test_send_sms_failed_status_raises() -> None:
    transport = _FakeTransport({"sid": "SM1", "status": "failed", "error_code": 30003})

    with pytest.raises(ExternalServiceError) as exc_info:
        await send_sms(_config(), transport, PHONE, "ayuda")
    assert exc_info.value.code == "30003"


@pytest.mark.asyncio
async def test_dispatcher_reports_success_with_provider_response() -> None:
    config = _config()
    dispatcher = EmergencyDispatcher(config, _TransportSender(config, _FakeTransport({"sid": "SM1", "status": "sent"})))

    result = await dispatcher.send_alert(PHONE, "Necesito ayuda")

    assert result.success is True
    assert result.message == "Mensaje de emergencia enviado"
    assert result.response["sid"] == "SM1"


@pytest.mark.asyncio
async def test_dispatcher_does_not_retry_failures() -> None:
    config = _config()
    transport = _FakeTransport(error=LazarilloTransportError("HTTP 500", status_code=500))
    dispatcher = EmergencyDispatcher(config, _TransportSender(config, transport))

    with pytest.raises(ExternalServiceError):
        await dispatcher.send_alert(PHONE, "Necesito ayuda")
    assert len(transport.posts) == 1


@pytest.mark.asyncio
async def test_dispatcher_logs_transport_failure_as_service_error(caplog: pytest.LogCaptureFixture) -> None:
    config = _config()
    transport = _FakeTransport(error=LazarilloTransportError("connection reset"))
    dispatcher = EmergencyDispatcher(config, _TransportSender(config, transport))

    with caplog.at_level(logging.WARNING, logger="pylazarillo.emergency"):
        with pytest.raises(ExternalServiceError) as exc_info:
            await dispatcher.send_alert(PHONE, "Necesito ayuda")

    assert exc_info.value.service == "sms"
    assert isinstance(exc_info.value.__cause__, LazarilloTransportError)
    warnings = [record for record in caplog.records if record.name == "pylazarillo.emergency"]
    assert len(warnings) == 1
    assert PHONE not in warnings[0].getMessage()


def test_emergency_contact_uses_configured_number() -> None:
    dispatcher = EmergencyDispatcher(_config(emergency_number="+5493819999999"), _TransportSender(_config(), _FakeTransport()))

    contact = dispatcher.get_emergency_contact()

    assert contact.number == "+5493819999999"
    assert contact.model_dump(by_alias=True) == {"numero": "+5493819999999"}
