# guardian_ping/emergency.py

import asyncio
import functools
import logging
from typing import Awaitable, Callable, Dict, Optional

from . import messages
from .capabilities import AlertPresenter, best_effort
from .locate import LocateOrchestrator
from .models import (
    Alert,
    AlertAction,
    EmergencyStatus,
    LocationUpdate,
    PingRequest,
    PingResponse,
)
from .ring import RingOrchestrator
from .store import RequestStore

logger = logging.getLogger(__name__)


class EmergencyOrchestrator:
    """
    Emergency pings: a ring session at emergency cadence presenting the
    Safe / Need Help / Call Parent choice, plus an immediate location fetch.

    The location found here does not acknowledge the ping; it is attached to
    the child's safe/help answer so the status is always recorded.

    Args:
        store: Request store
        ring: Ring orchestrator shared with ring pings
        locate: Locate orchestrator used for the location fetch
        presenter: Modal presenter (optional)
        call_handler: Awaited with the parent id when the child taps "Call Parent"
    """

    def __init__(self, store: RequestStore, ring: RingOrchestrator,
                 locate: LocateOrchestrator,
                 presenter: Optional[AlertPresenter] = None,
                 call_handler: Optional[Callable[[str], Awaitable[None]]] = None):
        self._store = store
        self._ring = ring
        self._locate = locate
        self._presenter = presenter
        self.call_handler = call_handler
        self._locations: Dict[str, LocationUpdate] = {}

    def emergency_alert(self, request: PingRequest) -> Alert:
        return Alert(
            title=messages.EMERGENCY_TITLE,
            message=request.message or messages.EMERGENCY_DEFAULT_MESSAGE,
            actions=[
                AlertAction(messages.ACTION_EMERGENCY_SAFE,
                            functools.partial(self.respond, request.id, EmergencyStatus.SAFE)),
                AlertAction(messages.ACTION_EMERGENCY_HELP,
                            functools.partial(self.respond, request.id, EmergencyStatus.HELP)),
                AlertAction(messages.ACTION_CALL_PARENT,
                            functools.partial(self.call_parent, request.id)),
            ],
            cancelable=False,
            ping_id=request.id,
        )

    async def handle(self, request: PingRequest) -> None:
        # Both start before either is awaited; a failed fix cannot hold up the alert.
        ring_task = asyncio.create_task(
            self._ring.start_ring(request, alert=self.emergency_alert(request),
                                  spoken=messages.EMERGENCY_SPOKEN),
            name=f"emergency_ring_{request.id}"
        )
        locate_task = asyncio.create_task(
            self._capture_location(request),
            name=f"emergency_locate_{request.id}"
        )
        results = await asyncio.gather(ring_task, locate_task, return_exceptions=True)
        for label, result in zip(("alert", "location"), results):
            if isinstance(result, Exception):
                logger.error("Emergency %s step failed for ping %s: %s", label, request.id, result)

    async def _capture_location(self, request: PingRequest) -> None:
        update = await self._locate.handle(request, acknowledge=False)
        self._prune_locations()
        if update is None:
            return
        current = self._store.get(request.id)
        if current is None or not current.is_pending(self._store.now()):
            logger.debug("Emergency %s settled before its location arrived, dropping fix",
                         request.id)
            return
        self._locations[request.id] = update

    def _prune_locations(self) -> None:
        """Drop fixes kept for emergencies that were answered or have expired."""
        now = self._store.now()
        for ping_id in list(self._locations):
            current = self._store.get(ping_id)
            if current is None or not current.is_pending(now):
                del self._locations[ping_id]

    async def respond(self, ping_id: str, status: EmergencyStatus) -> bool:
        """
        Record the child's safe/help answer.

        Returns:
            True if the ping was acknowledged by this answer
        """
        status = EmergencyStatus(status)
        await self._ring.stop_ring(ping_id)

        location = self._locations.pop(ping_id, None)
        self._prune_locations()
        if location is None:
            location = await self._locate.current_location_safe()

        response = PingResponse(
            message=(messages.EMERGENCY_SAFE_MESSAGE if status == EmergencyStatus.SAFE
                     else messages.EMERGENCY_HELP_MESSAGE),
            needs_help=status == EmergencyStatus.HELP,
            location=location,
            status=status,
        )
        acknowledged = self._store.acknowledge(ping_id, response)
        # A fix may have landed while the fallback location was awaited.
        self._locations.pop(ping_id, None)
        if not acknowledged:
            logger.warning("Emergency ping %s already answered, ignoring status %s",
                           ping_id, status.value)
            return False

        logger.info("Emergency response for %s: %s", ping_id, status.value)
        if status == EmergencyStatus.HELP:
            await best_effort(self._presenter, "present", Alert(
                title=messages.HELP_REQUEST_TITLE,
                message=messages.HELP_REQUEST_MESSAGE,
                ping_id=ping_id,
            ))
        return True

    async def call_parent(self, ping_id: str) -> None:
        """Hand off to telephony. Does not acknowledge the ping."""
        await self._ring.stop_ring(ping_id)
        request = self._store.get(ping_id)
        parent_id = request.parent_id if request else None
        self._prune_locations()
        logger.info("Child requested a call to parent %s from ping %s", parent_id, ping_id)

        await best_effort(self._presenter, "present", Alert(
            title=messages.CALL_TITLE,
            message=messages.CALL_MESSAGE,
            ping_id=ping_id,
        ))
        if self.call_handler is not None and parent_id is not None:
            try:
                await self.call_handler(parent_id)
            except Exception as e:
                logger.error("Call handler failed for parent %s: %s", parent_id, e)
