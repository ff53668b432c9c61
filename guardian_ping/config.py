# guardian_ping/config.py

from dataclasses import dataclass, field
from typing import Dict, List

from .models import PingType, Urgency

EMERGENCY_VIBRATION = [0, 1000, 500, 1000, 500, 1000]  # long, slow pulses (ms)
NORMAL_VIBRATION = [0, 300, 200, 300, 200]  # short, quick pulses (ms)


def _default_urgencies() -> Dict[PingType, Urgency]:
    return {
        PingType.RING: Urgency.MEDIUM,
        PingType.LOCATE: Urgency.MEDIUM,
        PingType.CHECK_IN: Urgency.LOW,
        PingType.EMERGENCY: Urgency.EMERGENCY,
    }


@dataclass
class PingConfig:
    """
    Timing and cadence settings for the ping manager.

    Attributes:
        emergency_ttl: Seconds an emergency ping stays pending
        default_ttl: Seconds any other ping stays pending
        emergency_ring_timeout: Auto-stop delay for an emergency ring session
        default_ring_timeout: Auto-stop delay for any other ring session
        emergency_vibration: Vibration pattern for emergency urgency
        normal_vibration: Vibration pattern for every other urgency
        history_limit: Default number of entries returned by history()
        default_urgencies: Urgency assigned per ping type when none is given
    """
    emergency_ttl: float = 30 * 60.0
    default_ttl: float = 15 * 60.0
    emergency_ring_timeout: float = 60.0
    default_ring_timeout: float = 30.0
    emergency_vibration: List[int] = field(default_factory=lambda: list(EMERGENCY_VIBRATION))
    normal_vibration: List[int] = field(default_factory=lambda: list(NORMAL_VIBRATION))
    history_limit: int = 20
    default_urgencies: Dict[PingType, Urgency] = field(default_factory=_default_urgencies)

    def __post_init__(self):
        if self.emergency_ttl <= 0 or self.default_ttl <= 0:
            raise ValueError("TTL values must be positive")
        if self.emergency_ring_timeout <= 0 or self.default_ring_timeout <= 0:
            raise ValueError("Ring timeouts must be positive")

    def ttl_for(self, urgency: Urgency) -> float:
        return self.emergency_ttl if urgency == Urgency.EMERGENCY else self.default_ttl

    def ring_timeout_for(self, urgency: Urgency) -> float:
        if urgency == Urgency.EMERGENCY:
            return self.emergency_ring_timeout
        return self.default_ring_timeout

    def vibration_pattern_for(self, urgency: Urgency) -> List[int]:
        if urgency == Urgency.EMERGENCY:
            return list(self.emergency_vibration)
        return list(self.normal_vibration)

    def urgency_for(self, ping_type: PingType) -> Urgency:
        # Emergency pings always carry emergency urgency.
        if ping_type == PingType.EMERGENCY:
            return Urgency.EMERGENCY
        return self.default_urgencies.get(ping_type, Urgency.MEDIUM)
