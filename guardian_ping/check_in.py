# guardian_ping/check_in.py

import functools
import logging
from typing import Optional

from . import messages
from .capabilities import AlertPresenter, SpeechProvider, best_effort
from .locate import LocateOrchestrator
from .models import Alert, AlertAction, PingRequest, PingResponse, TextPrompt
from .store import RequestStore

logger = logging.getLogger(__name__)

# (button label, message sent, needs_help)
CANNED_RESPONSES = (
    (messages.ACTION_OK, messages.CHECK_IN_OK, False),
    (messages.ACTION_SAFE, messages.CHECK_IN_SAFE, False),
    (messages.ACTION_NEED_HELP, messages.CHECK_IN_HELP, True),
)


class CheckInOrchestrator:
    """Asks the child how they are doing and records the answer."""

    def __init__(self, store: RequestStore, locate: LocateOrchestrator,
                 speech: Optional[SpeechProvider] = None,
                 presenter: Optional[AlertPresenter] = None):
        self._store = store
        self._locate = locate
        self._speech = speech
        self._presenter = presenter

    def check_in_alert(self, request: PingRequest) -> Alert:
        actions = [
            AlertAction(label, functools.partial(self.respond, request.id, text, needs_help))
            for label, text, needs_help in CANNED_RESPONSES
        ]
        actions.append(AlertAction(messages.ACTION_CUSTOM,
                                   functools.partial(self.prompt_custom, request.id)))
        return Alert(
            title=messages.CHECK_IN_TITLE,
            message=request.message or messages.CHECK_IN_DEFAULT_MESSAGE,
            actions=actions,
            ping_id=request.id,
        )

    async def handle(self, request: PingRequest) -> None:
        await best_effort(self._presenter, "present", self.check_in_alert(request))

    async def prompt_custom(self, ping_id: str, urgent: bool = False) -> None:
        """Ask for a free-text answer. An empty answer sends nothing."""
        async def on_submit(text: str) -> None:
            if text and text.strip():
                await self.respond(ping_id, text.strip(), urgent)
            else:
                logger.debug("Empty check-in message for %s, nothing sent", ping_id)

        await best_effort(self._presenter, "prompt_text", TextPrompt(
            title=messages.CUSTOM_TITLE,
            message=messages.CUSTOM_MESSAGE,
            on_submit=on_submit,
            default=messages.CUSTOM_DEFAULT,
            ping_id=ping_id,
        ))

    async def respond(self, ping_id: str, message: str, needs_help: bool = False) -> bool:
        """
        Record a check-in answer for ping_id.

        Returns:
            True if the ping was acknowledged by this answer
        """
        location = await self._locate.current_location_safe()
        response = PingResponse(message=message, needs_help=needs_help, location=location)
        acknowledged = self._store.acknowledge(ping_id, response)
        if not acknowledged:
            logger.warning("Check-in %s already answered, ignoring %r", ping_id, message)
            return False

        logger.info("Check-in response for %s: %r (needs_help=%s)", ping_id, message, needs_help)
        spoken = messages.HELP_SENT_SPOKEN if needs_help else messages.CHECK_IN_SENT_SPOKEN
        await best_effort(self._speech, "speak", spoken)
        return True
