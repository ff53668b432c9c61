# guardian_ping/errors.py

class PingError(Exception):
    """Base exception class for all device ping errors."""

class CapabilityUnavailableError(PingError):
    """Raised when a device capability (audio, speech, vibration) is missing."""

class PermissionDeniedError(PingError):
    """Raised when the user refused a permission needed by a capability."""

class LocationError(PingError):
    """Raised when the current position cannot be retrieved."""

class LocationPermissionError(LocationError, PermissionDeniedError):
    """
    Raised when location services are disabled or permission was refused.
    """

class NotificationError(PingError):
    """Raised when the notification bridge fails to schedule an alert."""

class UnknownPingError(PingError):
    """Raised when a ping id is not present in the request store."""

class AlreadyAcknowledgedError(PingError):
    """Raised on a strict acknowledge of a ping that already has a response."""
