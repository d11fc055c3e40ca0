"""pylazarillo - Async guided-navigation service for visually-impaired pedestrians."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pylazarillo")
except PackageNotFoundError:
    __version__ = "0+local"
from pylazarillo.client import LazarilloClient
from pylazarillo.config import LazarilloConfig
from pylazarillo.emergency import EmergencyDispatcher
from pylazarillo.events import InboundEvent, SessionEventType, parse_event
from pylazarillo.exceptions import (
    ExternalServiceError,
    ExternalServiceTimeout,
    GeocodingFailed,
    InvalidPayloadError,
    InvalidState,
    LazarilloConfigError,
    LazarilloError,
    LazarilloTransportError,
    LocationUnavailable,
    NavigationError,
    NoDestinationFound,
    RouteUnavailable,
    TranslationFailed,
)
from pylazarillo.models import (
    Coordinates,
    Destination,
    EmergencyContact,
    EmergencyRequest,
    EmergencyResult,
    NavigationResponse,
    Route,
)
from pylazarillo.pipeline import RoutePipeline
from pylazarillo.registry import ConnectionRegistry, SessionWorker
from pylazarillo.session import NavigationServices, NavigationSession, NavigationState, SessionState

__all__ = [
    "__version__",
    "ConnectionRegistry",
    "Coordinates",
    "Destination",
    "EmergencyContact",
    "EmergencyDispatcher",
    "EmergencyRequest",
    "EmergencyResult",
    "ExternalServiceError",
    "ExternalServiceTimeout",
    "GeocodingFailed",
    "InboundEvent",
    "InvalidPayloadError",
    "InvalidState",
    "LazarilloClient",
    "LazarilloConfig",
    "LazarilloConfigError",
    "LazarilloError",
    "LazarilloTransportError",
    "LocationUnavailable",
    "NavigationError",
    "NavigationResponse",
    "NavigationServices",
    "NavigationSession",
    "NavigationState",
    "NoDestinationFound",
    "Route",
    "RoutePipeline",
    "SessionEventType",
    "SessionState",
    "SessionWorker",
    "TranslationFailed",
    "parse_event",
]
