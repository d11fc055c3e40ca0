"""Service configuration for pylazarillo."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pylazarillo._constants import (
    DEFAULT_EMERGENCY_NUMBER,
    MAPS_BASE_URL,
    TWILIO_BASE_URL,
)
from pylazarillo.exceptions import LazarilloConfigError


_TRUTHY = frozenset({"1", "true", "yes", "y", "on", "si", "sí"})
_FALSY = frozenset({"0", "false", "no", "n", "off"})


def _env_bool(value: str | None, default: bool) -> bool:
    """Parse a boolean env var; unrecognized values keep *default*."""
    flag = (value or "").strip().lower()
    if flag in _TRUTHY:
        return True
    if flag in _FALSY:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class LazarilloConfig:
    """Service configuration.

    Parameters
    ----------
    openai_api_key : str
        API key for the chat-completions provider used for destination
        extraction, step translation and place descriptions.
    openai_base_url : str or None
        Optional OpenAI-compatible endpoint. ``None`` uses the SDK default.
    openai_model : str
        Chat model name.
    google_maps_api_key : str
        Key for the Google Maps Geocoding and Directions web services.
    maps_base_url : str
        Base URL of the Google Maps web services.
    twilio_account_sid : str
        Twilio account SID used for emergency SMS.
    twilio_auth_token : str
        Twilio auth token.
    twilio_phone_number : str
        Sender number registered with Twilio.
    twilio_base_url : str
        Base URL of the Twilio REST API.
    emergency_number : str
        Static number returned to clients so they can dial locally.
    city : str
        Service city. Destinations outside it are rejected by the resolver
        and every geocoding lookup is scoped to it.
    city_region : str
        Province and country appended to the city in prompts.
    user_language : str
        Language the route is narrated in.
    directions_language : str
        Language requested from the directions provider. When it equals
        ``user_language`` translation is skipped.
    host : str
        Bind address for the HTTP/WebSocket server.
    port : int
        Listen port for the HTTP/WebSocket server.
    request_timeout : float
        Upper bound in seconds for every external call.
    resume_pending_destination : bool
        Keep a geocoded destination when no location is known yet and
        finish routing on the next location update. Off by default: the
        request has to be repeated once the location arrives.
    """

    openai_api_key: str = ""
    openai_base_url: str | None = None
    openai_model: str = "gpt-4-turbo"
    google_maps_api_key: str = ""
    maps_base_url: str = MAPS_BASE_URL
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_phone_number: str = ""
    twilio_base_url: str = TWILIO_BASE_URL
    emergency_number: str = DEFAULT_EMERGENCY_NUMBER
    city: str = "San Miguel de Tucumán"
    city_region: str = "Tucumán, Argentina"
    user_language: str = "es"
    directions_language: str = "en"
    host: str = "0.0.0.0"
    port: int = 3001
    request_timeout: float = 15.0
    resume_pending_destination: bool = False

    @property
    def city_context(self) -> str:
        """City plus region, as used in prompts and geocoding queries."""
        return f"{self.city}, {self.city_region}"

    def validate(self) -> None:
        """Raise :class:`LazarilloConfigError` if a required key is missing."""
        missing = [
            name
            for name in ("openai_api_key", "google_maps_api_key")
            if not getattr(self, name)
        ]
        if missing:
            raise LazarilloConfigError(f"Missing required configuration: {', '.join(missing)}")
        if self.request_timeout <= 0:
            raise LazarilloConfigError("request_timeout must be positive")

    @property
    def sms_enabled(self) -> bool:
        return bool(self.twilio_account_sid and self.twilio_auth_token and self.twilio_phone_number)

    @classmethod
    def from_env(cls, **overrides: Any) -> LazarilloConfig:
        """Create configuration from environment variables.

        Reads the provider keys under their usual names (``OPENAI_API_KEY``,
        ``GOOGLE_MAPS_API_KEY``, ``TWILIO_*``, ``PORT``) and optional
        ``LAZARILLO_*`` variables. Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        LazarilloConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "OPENAI_API_KEY": "openai_api_key",
            "OPENAI_BASE_URL": "openai_base_url",
            "LAZARILLO_OPENAI_MODEL": "openai_model",
            "GOOGLE_MAPS_API_KEY": "google_maps_api_key",
            "LAZARILLO_MAPS_BASE_URL": "maps_base_url",
            "TWILIO_ACCOUNT_SID": "twilio_account_sid",
            "TWILIO_AUTH_TOKEN": "twilio_auth_token",
            "TWILIO_PHONE_NUMBER": "twilio_phone_number",
            "LAZARILLO_EMERGENCY_NUMBER": "emergency_number",
            "LAZARILLO_CITY": "city",
            "LAZARILLO_CITY_REGION": "city_region",
            "LAZARILLO_USER_LANGUAGE": "user_language",
            "LAZARILLO_DIRECTIONS_LANGUAGE": "directions_language",
            "LAZARILLO_HOST": "host",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # Numeric fields, handled separately
        port_env = env.get("PORT")
        if port_env is not None and "port" not in overrides:
            config_kwargs["port"] = int(port_env)

        timeout_env = env.get("LAZARILLO_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        if "resume_pending_destination" not in overrides:
            config_kwargs["resume_pending_destination"] = _env_bool(
                env.get("LAZARILLO_RESUME_PENDING_DESTINATION"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
