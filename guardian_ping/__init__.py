# guardian_ping/__init__.py

from .dispatcher import PingDispatcher
from .store import RequestStore
from .config import PingConfig
from .models import (
    PingType,
    Urgency,
    EmergencyStatus,
    PingRequest,
    PingResponse,
    LocationUpdate,
)
from .errors import (
    PingError,
    CapabilityUnavailableError,
    PermissionDeniedError,
    LocationError,
    LocationPermissionError,
    NotificationError,
    UnknownPingError,
    AlreadyAcknowledgedError,
)

__all__ = [
    "PingDispatcher",
    "RequestStore",
    "PingConfig",
    "PingType",
    "Urgency",
    "EmergencyStatus",
    "PingRequest",
    "PingResponse",
    "LocationUpdate",
    "PingError",
    "CapabilityUnavailableError",
    "PermissionDeniedError",
    "LocationError",
    "LocationPermissionError",
    "NotificationError",
    "UnknownPingError",
    "AlreadyAcknowledgedError",
]
