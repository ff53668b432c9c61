# guardian_ping/dispatcher.py

import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict, List, Optional

from . import messages
from .capabilities import (
    AlertPresenter,
    AudioProvider,
    LocationProvider,
    NotificationScheduler,
    SpeechProvider,
    VibrationProvider,
    best_effort,
)
from .check_in import CheckInOrchestrator
from .config import PingConfig
from .emergency import EmergencyOrchestrator
from .errors import NotificationError, UnknownPingError
from .locate import LocateOrchestrator
from .models import Alert, PingRequest, PingResponse, PingType, Urgency
from .notification import NotificationBridge
from .ring import RingOrchestrator
from .store import RequestStore

logger = logging.getLogger(__name__)

ACTION_RESPOND = "RESPOND"
ACTION_DISMISS = "DISMISS"


class PingDispatcher:
    """
    Public entry point of the ping manager.

    Construct one per running app and hand it to whatever needs it.

    Args:
        vibration: Vibration provider
        audio: Looping ring sound, None if no sound could be loaded
        speech: Speech synthesis provider
        location: Location provider
        presenter: Modal/prompt presenter
        notifications: Local notification scheduler
        config: Timing configuration
        clock: Wall-clock source, injectable for tests
        call_handler: Awaited with the parent id when the child asks to call

    The manager can:
    - Send ring, locate, check-in and emergency pings
    - Run the matching local response on the child's device
    - Record the child's answer
    - List pending pings and the ping history
    """

    def __init__(self,
                 vibration: Optional[VibrationProvider] = None,
                 audio: Optional[AudioProvider] = None,
                 speech: Optional[SpeechProvider] = None,
                 location: Optional[LocationProvider] = None,
                 presenter: Optional[AlertPresenter] = None,
                 notifications: Optional[NotificationScheduler] = None,
                 config: Optional[PingConfig] = None,
                 clock: Callable[[], float] = time.time,
                 call_handler: Optional[Callable[[str], Awaitable[None]]] = None):
        self.config = config or PingConfig()
        self._presenter = presenter

        self.store = RequestStore(self.config, clock=clock)
        self.bridge = NotificationBridge(notifications)
        self.ring = RingOrchestrator(
            vibration=vibration,
            audio=audio,
            speech=speech,
            presenter=presenter,
            config=self.config,
            respond_handler=self.respond_to_ping,
            store=self.store,
        )
        self.locate = LocateOrchestrator(self.store, location, speech, presenter)
        self.check_in = CheckInOrchestrator(self.store, self.locate, speech, presenter)
        self.emergency = EmergencyOrchestrator(
            self.store, self.ring, self.locate, presenter, call_handler
        )

        self._handlers: Dict[PingType, Callable[[PingRequest], Awaitable[None]]] = {
            PingType.RING: self.ring.start_ring,
            PingType.LOCATE: self.locate.handle,
            PingType.CHECK_IN: self.check_in.handle,
            PingType.EMERGENCY: self.emergency.handle,
        }
        self._tasks = set()

    async def initialize(self) -> bool:
        """
        Ask for the permissions pings rely on. Refusals are logged, not raised.

        Returns:
            True if every permission was granted
        """
        location_ok = await self.locate.request_permission()
        notifications_ok = await self.bridge.request_permission()
        return location_ok and notifications_ok

    async def send(self, ping_type: PingType, message: Optional[str] = None,
                   urgency: Optional[Urgency] = None, parent_id: str = "parent") -> str:
        """
        Create a ping and start delivering it.

        The request is stored before this returns; the notification and the
        local response run in a background task whose failures are logged.

        Args:
            ping_type: ring, locate, check-in or emergency
            message: Optional guardian text
            urgency: Overrides the default urgency (ignored for emergency pings)
            parent_id: Guardian that sent the ping

        Returns:
            The new ping id
        """
        request = self.store.create(ping_type, message, urgency, parent_id)
        task = asyncio.create_task(self._deliver(request), name=f"deliver_{request.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return request.id

    async def ring_child(self, message: Optional[str] = None) -> str:
        return await self.send(PingType.RING, message, Urgency.MEDIUM)

    async def request_location(self, message: Optional[str] = None) -> str:
        return await self.send(PingType.LOCATE, message, Urgency.MEDIUM)

    async def request_check_in(self, message: Optional[str] = None) -> str:
        return await self.send(PingType.CHECK_IN, message, Urgency.LOW)

    async def send_emergency_ping(self, message: Optional[str] = None) -> str:
        return await self.send(PingType.EMERGENCY, message, Urgency.EMERGENCY)

    async def _deliver(self, request: PingRequest) -> None:
        try:
            await self.bridge.schedule(request)
        except NotificationError as e:
            logger.warning("Notification for ping %s not delivered: %s", request.id, e)
        except Exception as e:
            logger.exception("Unexpected error scheduling notification for %s: %s", request.id, e)

        if request.is_expired(self.store.now()):
            logger.info("Ping request expired before delivery: %s", request.id)
            return

        handler = self._handlers[request.type]
        try:
            await handler(request)
        except Exception as e:
            logger.exception("Handling %s ping %s failed: %s", request.type.value, request.id, e)

    async def drain(self) -> None:
        """Wait until every in-flight delivery has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def respond_to_ping(self, ping_id: str) -> None:
        """
        Answer a ping from the "Respond" button or notification action.

        Raises:
            UnknownPingError: If ping_id is not known
        """
        request = self.store.get(ping_id)
        if request is None:
            raise UnknownPingError(f"Unknown ping id: {ping_id}")

        await self.ring.stop_ring()
        logger.info("Responding to %s ping %s", request.type.value, ping_id)

        if request.type == PingType.RING:
            if self.store.acknowledge(ping_id, PingResponse(message=messages.RING_RESPONSE_MESSAGE)):
                await best_effort(self._presenter, "present", Alert(
                    title=messages.RESPONSE_SENT_TITLE,
                    message=messages.RESPONSE_SENT_MESSAGE,
                    ping_id=ping_id,
                ))
            else:
                logger.warning("Ring ping %s already acknowledged", ping_id)
        elif request.type == PingType.LOCATE:
            await self.locate.handle(request)
        elif request.type == PingType.CHECK_IN:
            await self.check_in.handle(request)
        elif request.type == PingType.EMERGENCY:
            await self.emergency.handle(request)

    async def handle_notification_action(self, ping_id: str, action: str) -> None:
        """Route a tap on the ping notification."""
        if action == ACTION_RESPOND:
            await self.respond_to_ping(ping_id)
        elif action == ACTION_DISMISS:
            await self.ring.stop_ring()
        else:
            logger.debug("Ignoring notification action %s for ping %s", action, ping_id)

    def acknowledge(self, ping_id: str, response: Optional[PingResponse] = None) -> bool:
        return self.store.acknowledge(ping_id, response)

    def pending(self) -> List[PingRequest]:
        return self.store.pending()

    def history(self, limit: Optional[int] = None) -> List[PingRequest]:
        return self.store.history(limit)

    def get(self, ping_id: str) -> Optional[PingRequest]:
        return self.store.get(ping_id)

    async def shutdown(self) -> None:
        """Finish deliveries, stop any ring and release the ring sound. History is kept."""
        await self.drain()
        await self.ring.shutdown()

    def __repr__(self):
        return (f"<PingDispatcher pending={len(self.pending())}, "
                f"total={len(self.store)}, ringing={self.ring.is_ringing}>")
