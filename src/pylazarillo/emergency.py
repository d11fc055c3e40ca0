"""Emergency channel: SMS alerts and the static call-back number.

Independent of any navigation session.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from pylazarillo._constants import MSG_EMERGENCY_SENT
from pylazarillo._redact import mask_phone
from pylazarillo.config import LazarilloConfig
from pylazarillo.exceptions import ExternalServiceError, LazarilloConfigError
from pylazarillo.models.emergency import EmergencyContact, EmergencyResult

_logger = logging.getLogger(__name__)


class SmsSender(Protocol):
    async def send_sms(self, to: str, body: str) -> dict[str, Any]:
        ...


class EmergencyDispatcher:
    """Send alerts through the SMS provider. Failures are raised, never retried."""

    def __init__(self, config: LazarilloConfig, sender: SmsSender) -> None:
        self._config = config
        self._sender = sender

    async def send_alert(self, phone_number: str, message: str) -> EmergencyResult:
        """Deliver *message* to *phone_number*.

        Raises
        ------
        ExternalServiceError
            The provider rejected the message or could not be reached.
        LazarilloConfigError
            No SMS provider is configured.
        """
        try:
            response = await self._sender.send_sms(phone_number, message)
        except (ExternalServiceError, LazarilloConfigError):
            _logger.warning("Emergency alert to %s failed", mask_phone(phone_number), exc_info=True)
            raise
        return EmergencyResult(success=True, message=MSG_EMERGENCY_SENT, response=response)

    def get_emergency_contact(self) -> EmergencyContact:
        return EmergencyContact(number=self._config.emergency_number)
