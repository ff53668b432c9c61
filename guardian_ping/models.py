# guardian_ping/models.py

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional


class PingType(str, Enum):
    RING = "ring"
    LOCATE = "locate"
    CHECK_IN = "check-in"
    EMERGENCY = "emergency"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EMERGENCY = "emergency"


class EmergencyStatus(str, Enum):
    SAFE = "safe"
    HELP = "help"


class NetworkStatus(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    LIMITED = "limited"


@dataclass
class Position:
    """A raw position fix as returned by the location provider."""
    latitude: float
    longitude: float
    accuracy: float = 0.0
    timestamp: float = 0.0


@dataclass
class Address:
    """Reverse geocoding result. Every part may be missing."""
    street_number: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None

    def format(self) -> str:
        parts = (self.street_number, self.street, self.city, self.region)
        return ", ".join(p for p in parts if p)


@dataclass
class LocationUpdate:
    """Location captured in response to a locate or emergency ping."""
    latitude: float
    longitude: float
    accuracy: float
    timestamp: float
    address: Optional[str] = None
    network_status: NetworkStatus = NetworkStatus.CONNECTED

    @classmethod
    def from_position(cls, position: Position,
                      address: Optional[str] = None) -> "LocationUpdate":
        return cls(
            latitude=position.latitude,
            longitude=position.longitude,
            accuracy=position.accuracy or 0.0,
            timestamp=position.timestamp,
            address=address,
        )


@dataclass
class PingResponse:
    """
    Payload recorded when the child answers a ping.

    Attributes:
        message: Free text or canned check-in answer
        needs_help: True for "Need Help" check-ins or urgent free text
        location: Location captured with the response, if any
        status: Emergency answer (safe/help), emergency pings only
        responded_at: When the answer was captured
    """
    message: Optional[str] = None
    needs_help: bool = False
    location: Optional[LocationUpdate] = None
    status: Optional[EmergencyStatus] = None
    responded_at: Optional[float] = None


@dataclass
class PingRequest:
    """
    One guardian-initiated ping.

    Only the RequestStore mutates the acknowledgment fields; everything else
    is fixed at creation.
    """
    id: str
    type: PingType
    urgency: Urgency
    timestamp: float
    expires_at: float
    message: Optional[str] = None
    parent_id: str = "parent"
    acknowledged: bool = False
    acknowledged_at: Optional[float] = None
    response: Optional[PingResponse] = None

    @property
    def ttl(self) -> float:
        return self.expires_at - self.timestamp

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def is_pending(self, now: float) -> bool:
        return not self.acknowledged and not self.is_expired(now)


AlertHandler = Callable[[], Awaitable[None]]


@dataclass
class AlertAction:
    label: str
    handler: Optional[AlertHandler] = None


@dataclass
class Alert:
    """A modal prompt shown to the child. The UI awaits the chosen handler."""
    title: str
    message: str
    actions: List[AlertAction] = field(default_factory=list)
    cancelable: bool = True
    ping_id: Optional[str] = None

    def action(self, label: str) -> Optional[AlertAction]:
        for a in self.actions:
            if a.label == label:
                return a
        return None


@dataclass
class TextPrompt:
    """Free-text entry prompt. `on_submit` receives the text typed by the child."""
    title: str
    message: str
    on_submit: Callable[[str], Awaitable[None]]
    default: str = ""
    ping_id: Optional[str] = None


@dataclass
class Notification:
    title: str
    body: str
    data: Dict[str, Any] = field(default_factory=dict)
    priority: str = "high"
    sound: Optional[str] = None
