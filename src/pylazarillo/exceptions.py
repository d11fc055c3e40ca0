"""Custom exception hierarchy for pylazarillo."""

from __future__ import annotations


class LazarilloError(Exception):
    """Base exception for all pylazarillo errors."""


class LazarilloConfigError(LazarilloError):
    """Invalid or missing configuration."""


class LazarilloTransportError(LazarilloError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class ExternalServiceError(LazarilloError):
    """An external collaborator answered with an application-level error."""

    def __init__(
        self,
        message: str,
        *,
        service: str = "",
        code: str = "",
    ) -> None:
        self.service = service
        self.code = code
        super().__init__(message)


class ExternalServiceTimeout(ExternalServiceError):
    """An external collaborator did not answer within the configured timeout."""


class InvalidPayloadError(LazarilloError):
    """An inbound event or request body is missing required fields."""

    def __init__(self, message: str, *, event: str = "") -> None:
        self.event = event
        super().__init__(message)


class NavigationError(LazarilloError):
    """Base for conditions that end a navigation operation with a guiding reply.

    These never terminate a session; the session machine converts each one
    into a user-facing response.
    """


class NoDestinationFound(NavigationError):
    """The utterance did not name a destination inside the service city."""


class GeocodingFailed(NavigationError):
    """The destination name could not be converted to coordinates."""


class LocationUnavailable(NavigationError):
    """No location update has been received for the session yet."""


class RouteUnavailable(NavigationError):
    """No walking route could be built between location and destination."""


class TranslationFailed(RouteUnavailable):
    """Route steps could not be translated into the user's language.

    Folded into :class:`RouteUnavailable` so a route is never narrated
    in a mix of languages.
    """


class InvalidState(NavigationError):
    """A command was issued with no active route or destination."""
