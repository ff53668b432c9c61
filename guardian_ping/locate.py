# guardian_ping/locate.py

import logging
from typing import Optional

from . import messages
from .capabilities import (
    AlertPresenter,
    LocationProvider,
    SpeechProvider,
    best_effort,
    request_permission,
)
from .errors import LocationError, LocationPermissionError
from .models import Alert, LocationUpdate, PingRequest, PingResponse
from .store import RequestStore

logger = logging.getLogger(__name__)


class LocateOrchestrator:
    """
    Captures the child's current position for locate and emergency pings.

    A failed fix never raises: the request stays pending until it expires
    and the child sees a "Location Error" alert.
    """

    def __init__(self, store: RequestStore,
                 location: Optional[LocationProvider] = None,
                 speech: Optional[SpeechProvider] = None,
                 presenter: Optional[AlertPresenter] = None):
        self._store = store
        self._location = location
        self._speech = speech
        self._presenter = presenter

    async def request_permission(self) -> bool:
        return await request_permission(self._location, "Location")

    async def handle(self, request: PingRequest, acknowledge: bool = True) -> Optional[LocationUpdate]:
        """
        Fetch a high-accuracy location for request.

        Args:
            request: The locate (or emergency) ping
            acknowledge: Acknowledge the ping with the location on success

        Returns:
            The captured location, or None if it could not be retrieved
        """
        try:
            update = await self.fetch_location()
        except LocationError as e:
            if isinstance(e, LocationPermissionError):
                logger.warning("Location permission denied for ping %s: %s", request.id, e)
            else:
                logger.error("Failed to get location for ping %s: %s", request.id, e)
            await best_effort(self._presenter, "present", Alert(
                title=messages.LOCATION_ERROR_TITLE,
                message=messages.LOCATION_ERROR_MESSAGE,
                ping_id=request.id,
            ))
            return None

        logger.info("Location update for ping %s: %.5f,%.5f (+/-%.0fm) %s",
                    request.id, update.latitude, update.longitude,
                    update.accuracy, update.address or "")

        if acknowledge:
            if not self._store.acknowledge(request.id, PingResponse(location=update)):
                logger.warning("Ping %s was already acknowledged, location not recorded", request.id)

        await best_effort(self._speech, "speak", messages.LOCATION_SHARED_SPOKEN)
        return update

    async def fetch_location(self) -> LocationUpdate:
        """
        Raises:
            LocationPermissionError: If location access was refused
            LocationError: If no position could be retrieved
        """
        if self._location is None:
            raise LocationError("No location provider available")
        try:
            position = await self._location.get_current_position(high_accuracy=True)
        except LocationError:
            raise
        except Exception as e:
            raise LocationError(f"Position retrieval failed: {e}") from e

        address = None
        ok, result = await best_effort(self._location, "reverse_geocode", position)
        if ok and result is not None:
            address = result.format() or None
        elif not ok:
            logger.warning("Could not get address, sending coordinates only")

        return LocationUpdate.from_position(position, address)

    async def current_location_safe(self) -> Optional[LocationUpdate]:
        """Balanced-accuracy position attached to responses, None on any failure."""
        ok, position = await best_effort(self._location, "get_current_position", high_accuracy=False)
        if not ok or position is None:
            return None
        return LocationUpdate.from_position(position)
