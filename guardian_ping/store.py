# guardian_ping/store.py

import copy
import logging
import time
import uuid
from typing import Callable, Dict, List, Optional

from .config import PingConfig
from .errors import AlreadyAcknowledgedError, UnknownPingError
from .models import PingRequest, PingResponse, PingType, Urgency

logger = logging.getLogger(__name__)


class RequestStore:
    """
    Owns every PingRequest created during the life of the manager.

    Args:
        config: TTL settings
        clock: Returns the current wall-clock time in seconds

    Expiry is evaluated lazily from the clock whenever a view is read;
    nothing is ever evicted. Requests handed out are copies, so acknowledge()
    is the only way to change one.
    """

    def __init__(self, config: Optional[PingConfig] = None,
                 clock: Callable[[], float] = time.time):
        self.config = config or PingConfig()
        self._clock = clock
        self._requests: Dict[str, PingRequest] = {}
        self._callbacks = set()

    def now(self) -> float:
        return self._clock()

    def add_callback(self, callback: Callable[[PingRequest], None]) -> None:
        """Register a callback called with a request whenever it is created or acknowledged."""
        self._callbacks.add(callback)

    def remove_callback(self, callback: Callable[[PingRequest], None]) -> None:
        self._callbacks.discard(callback)

    def _notify_callbacks(self, request: PingRequest) -> None:
        snapshot = _snapshot(request)
        for callback in self._callbacks:
            try:
                callback(snapshot)
            except Exception as e:
                logger.error("Error in request store callback: %s", e)

    def create(self, ping_type: PingType, message: Optional[str] = None,
               urgency: Optional[Urgency] = None,
               parent_id: str = "parent") -> PingRequest:
        ping_type = PingType(ping_type)
        if ping_type == PingType.EMERGENCY or urgency is None:
            urgency = self.config.urgency_for(ping_type)
        urgency = Urgency(urgency)

        timestamp = self._clock()
        request = PingRequest(
            id=uuid.uuid4().hex,
            type=ping_type,
            urgency=urgency,
            timestamp=timestamp,
            expires_at=timestamp + self.config.ttl_for(urgency),
            message=message,
            parent_id=parent_id,
        )
        self._requests[request.id] = request
        logger.info("Created %s ping %s (urgency=%s, expires in %.0fs)",
                    ping_type.value, request.id, urgency.value, request.ttl)
        self._notify_callbacks(request)
        return _snapshot(request)

    def acknowledge(self, ping_id: str, response: Optional[PingResponse] = None,
                    strict: bool = False) -> bool:
        """
        Record the child's response to a ping.

        Acknowledgment is allowed even after expiry. Only the first call has
        an effect; later calls keep the first response.

        Returns:
            True if this call acknowledged the request, False if it was already acknowledged

        Raises:
            UnknownPingError: If no request has this id
            AlreadyAcknowledgedError: On a repeated call when strict is set
        """
        request = self._requests.get(ping_id)
        if request is None:
            raise UnknownPingError(f"Unknown ping id: {ping_id}")

        if request.acknowledged:
            if strict:
                raise AlreadyAcknowledgedError(f"Ping {ping_id} already acknowledged")
            logger.debug("Ping %s already acknowledged, keeping first response", ping_id)
            return False

        now = self._clock()
        response = copy.deepcopy(response) if response is not None else PingResponse()
        if response.responded_at is None:
            response.responded_at = now
        request.acknowledged = True
        # Clock skew must not put the acknowledgment before creation.
        request.acknowledged_at = max(now, request.timestamp)
        request.response = response
        if request.is_expired(now):
            logger.info("Ping %s acknowledged after expiry", ping_id)
        else:
            logger.info("Ping %s acknowledged", ping_id)
        self._notify_callbacks(request)
        return True

    def get(self, ping_id: str) -> Optional[PingRequest]:
        request = self._requests.get(ping_id)
        return _snapshot(request) if request else None

    def pending(self) -> List[PingRequest]:
        """Unacknowledged, unexpired requests, newest first."""
        now = self._clock()
        items = [r for r in self._requests.values() if r.is_pending(now)]
        items.sort(key=lambda r: r.timestamp, reverse=True)
        return [_snapshot(r) for r in items]

    def history(self, limit: Optional[int] = None) -> List[PingRequest]:
        """All requests regardless of state, newest first, at most `limit` of them."""
        if limit is None:
            limit = self.config.history_limit
        items = sorted(self._requests.values(), key=lambda r: r.timestamp, reverse=True)
        return [_snapshot(r) for r in items[:max(limit, 0)]]

    def __len__(self) -> int:
        return len(self._requests)


def _snapshot(request: PingRequest) -> PingRequest:
    # Deep copy so the response and its location cannot be edited from outside.
    return copy.deepcopy(request)
