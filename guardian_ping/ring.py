# guardian_ping/ring.py

import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, Optional

from . import messages
from .capabilities import (
    AlertPresenter,
    AudioProvider,
    SpeechProvider,
    VibrationProvider,
    best_effort,
)
from .config import PingConfig
from .models import Alert, AlertAction, PingRequest
from .store import RequestStore

logger = logging.getLogger(__name__)


class _RingSession:
    """Resources owned by one ring session."""

    def __init__(self, request: PingRequest):
        self.request = request
        self.active = True
        self.timer: Optional[asyncio.Task] = None
        self.audio_handle: Any = None

    def __repr__(self):
        return f"<RingSession ping={self.request.id}, active={self.active}>"


class RingOrchestrator:
    """
    Runs the attention-grabbing ring session on the child's device.

    At most one session exists at a time. Entering a session speaks an
    announcement, starts a looping vibration, plays the looping alert sound
    (if one is loaded), presents a modal and arms a single auto-stop timer.
    Leaving it, through "Stop Ring", "Respond" or the timer, releases all
    three resources together.

    Args:
        vibration: Vibration provider (optional)
        audio: Looping sound provider, None when no sound is loaded
        speech: Speech provider (optional)
        presenter: Modal presenter (optional)
        config: Ring timeouts and vibration cadences
        respond_handler: Awaited with the ping id after "Respond" stops the ring
        store: When given, pings already answered by the time the session would
            start are not rung
    """

    def __init__(self,
                 vibration: Optional[VibrationProvider] = None,
                 audio: Optional[AudioProvider] = None,
                 speech: Optional[SpeechProvider] = None,
                 presenter: Optional[AlertPresenter] = None,
                 config: Optional[PingConfig] = None,
                 respond_handler: Optional[Callable[[str], Awaitable[None]]] = None,
                 store: Optional[RequestStore] = None):
        self._vibration = vibration
        self._audio = audio
        self._speech = speech
        self._presenter = presenter
        self._config = config or PingConfig()
        self.respond_handler = respond_handler
        self._store = store

        self._session: Optional[_RingSession] = None
        self._lock = asyncio.Lock()

    @property
    def is_ringing(self) -> bool:
        return self._session is not None

    @property
    def active_request_id(self) -> Optional[str]:
        return self._session.request.id if self._session else None

    def ring_alert(self, request: PingRequest) -> Alert:
        """The default two-action modal for a ring ping."""
        return Alert(
            title=messages.RING_TITLE,
            message=request.message or messages.RING_DEFAULT_MESSAGE,
            actions=[
                AlertAction(messages.ACTION_STOP_RING,
                            functools.partial(self.stop_ring, request.id)),
                AlertAction(messages.ACTION_RESPOND,
                            functools.partial(self._respond, request.id)),
            ],
            cancelable=False,
            ping_id=request.id,
        )

    async def start_ring(self, request: PingRequest, alert: Optional[Alert] = None,
                         spoken: str = messages.RING_SPOKEN) -> None:
        """
        Start a ring session for request, tearing down any active one first.

        Args:
            request: The ping being rung
            alert: Modal to present instead of the default Stop/Respond pair
            spoken: Announcement spoken when the session starts
        """
        async with self._lock:
            if self._already_answered(request.id):
                logger.info("Ping %s answered before its ring started, not ringing", request.id)
                return

            if self._session is not None:
                logger.info("Ring for %s replaces active ring for %s",
                            request.id, self._session.request.id)
                await self._teardown(self._session)

            session = _RingSession(request)
            self._session = session
            timeout = self._config.ring_timeout_for(request.urgency)
            session.timer = asyncio.create_task(
                self._auto_stop(session, timeout),
                name=f"ring_timeout_{request.id}"
            )
            logger.info("Ringing for ping %s (urgency=%s, auto-stop in %.0fs)",
                        request.id, request.urgency.value, timeout)

            pattern = self._config.vibration_pattern_for(request.urgency)
            _, vibrating, _, _ = await asyncio.gather(
                best_effort(self._speech, "speak", spoken),
                best_effort(self._vibration, "vibrate", pattern, True),
                self._start_audio(session),
                best_effort(self._presenter, "present", alert or self.ring_alert(request)),
            )

            # The session may have been stopped while the side effects were starting.
            if not session.active and vibrating[0]:
                await best_effort(self._vibration, "cancel")

    def _already_answered(self, ping_id: str) -> bool:
        if self._store is None:
            return False
        current = self._store.get(ping_id)
        return current is not None and current.acknowledged

    async def stop_ring(self, ping_id: Optional[str] = None) -> None:
        """
        Stop the active ring session. Safe to call when idle.

        Args:
            ping_id: Only stop if the active session belongs to this ping
        """
        session = self._session
        if session is None:
            return
        if ping_id is not None and session.request.id != ping_id:
            logger.debug("Ignoring stop for %s, active ring is %s",
                         ping_id, session.request.id)
            return
        await self._teardown(session)

    async def shutdown(self) -> None:
        await self.stop_ring()
        if self._audio is not None and hasattr(self._audio, "unload"):
            await best_effort(self._audio, "unload")

    async def _teardown(self, session: _RingSession) -> None:
        # State is released before the first await so a concurrent stop is a no-op.
        if self._session is session:
            self._session = None
        if not session.active:
            return
        session.active = False

        timer, session.timer = session.timer, None
        if timer is not None and timer is not asyncio.current_task():
            timer.cancel()
        handle, session.audio_handle = session.audio_handle, None

        await asyncio.gather(
            best_effort(self._vibration, "cancel"),
            self._stop_audio(handle),
        )
        logger.info("Ring stopped for ping %s", session.request.id)

    async def _start_audio(self, session: _RingSession) -> None:
        if self._audio is None:
            logger.debug("No ring sound loaded, vibration only")
            return
        ok, handle = await best_effort(self._audio, "play_loop")
        if not ok:
            return
        if session.active:
            session.audio_handle = handle
        else:
            await self._stop_audio(handle)

    async def _stop_audio(self, handle: Any) -> None:
        if handle is None or self._audio is None:
            return
        await best_effort(self._audio, "stop", handle)

    async def _auto_stop(self, session: _RingSession, timeout: float) -> None:
        await asyncio.sleep(timeout)
        if self._session is session:
            logger.info("Ring for ping %s timed out after %.0fs", session.request.id, timeout)
            await self._teardown(session)

    async def _respond(self, ping_id: str) -> None:
        await self.stop_ring(ping_id)
        if self.respond_handler is not None:
            await self.respond_handler(ping_id)
