"""Twilio Messages endpoint.

Endpoint:
  - /Accounts/{AccountSid}/Messages.json
"""

from __future__ import annotations

import logging
from typing import Any

from pylazarillo._redact import mask_phone
from pylazarillo._transport import Transport
from pylazarillo.config import LazarilloConfig
from pylazarillo.exceptions import ExternalServiceError, LazarilloConfigError, LazarilloTransportError

_logger = logging.getLogger(__name__)

#: Message states Twilio reports for a request it could not accept.
_FAILED_STATUSES = frozenset({"failed", "undelivered", "canceled"})


async def send_sms(
    config: LazarilloConfig,
    transport: Transport,
    to: str,
    body: str,
) -> dict[str, Any]:
    """Send *body* to *to* and return the provider's message resource."""
    if not config.sms_enabled:
        raise LazarilloConfigError("Twilio credentials are not configured")

    url = f"{config.twilio_base_url}/Accounts/{config.twilio_account_sid}/Messages.json"
    data = {"To": to, "From": config.twilio_phone_number, "Body": body}
    try:
        response = await transport.post_form(
            url,
            data,
            auth=(config.twilio_account_sid, config.twilio_auth_token),
        )
    except LazarilloTransportError as exc:
        code = str(exc.status_code) if exc.status_code is not None else ""
        raise ExternalServiceError(f"SMS delivery failed: {exc}", service="sms", code=code) from exc

    status = str(response.get("status", ""))
    if status in _FAILED_STATUSES:
        raise ExternalServiceError(
            f"SMS delivery failed: status={status} message={response.get('error_message', '')}",
            service="sms",
            code=str(response.get("error_code", "")),
        )

    _logger.info("Emergency SMS to %s accepted (sid=%s status=%s)", mask_phone(to), response.get("sid"), status)
    return response
