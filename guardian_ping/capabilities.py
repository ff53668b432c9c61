# guardian_ping/capabilities.py
"""
Device capability contracts consumed by the ping manager.

Each provider is independent: a missing or failing provider degrades only its
own side effect. Concrete implementations live in the host application.
"""

import logging
from typing import Any, List, Optional, Protocol, Tuple, runtime_checkable

from .models import Address, Alert, Notification, Position, TextPrompt

logger = logging.getLogger(__name__)


@runtime_checkable
class VibrationProvider(Protocol):
    async def vibrate(self, pattern: List[int], repeat: bool) -> None: ...

    async def cancel(self) -> None: ...


@runtime_checkable
class AudioProvider(Protocol):
    """Looping alert sound. A manager without one simply skips audio."""

    async def play_loop(self) -> Any: ...

    async def stop(self, handle: Any) -> None: ...


@runtime_checkable
class SpeechProvider(Protocol):
    async def speak(self, text: str) -> None: ...


@runtime_checkable
class LocationProvider(Protocol):
    async def get_current_position(self, high_accuracy: bool) -> Position:
        """Raise LocationPermissionError or LocationError on failure."""
        ...

    async def reverse_geocode(self, position: Position) -> Optional[Address]: ...


@runtime_checkable
class AlertPresenter(Protocol):
    async def present(self, alert: Alert) -> None: ...

    async def prompt_text(self, prompt: TextPrompt) -> None: ...


@runtime_checkable
class NotificationScheduler(Protocol):
    async def schedule(self, notification: Notification) -> Optional[str]: ...


async def best_effort(provider: Any, method: str, *args, **kwargs) -> Tuple[bool, Any]:
    """
    Call provider.method(*args) and report the outcome instead of raising.

    Returns:
        (True, result) on success, (False, None) if the provider is missing,
        lacks the method, or raised.
    """
    name = f"{type(provider).__name__}.{method}"
    if provider is None:
        logger.debug("Capability unavailable, skipping %s", method)
        return False, None
    func = getattr(provider, method, None)
    if func is None:
        logger.debug("Capability %s not supported", name)
        return False, None
    try:
        return True, await func(*args, **kwargs)
    except Exception as e:
        logger.warning("Capability call %s failed: %s", name, e)
        return False, None


async def request_permission(provider: Any, label: str) -> bool:
    """Ask an optional provider for permission. Missing support counts as granted."""
    if provider is None or not hasattr(provider, "request_permission"):
        return True
    ok, granted = await best_effort(provider, "request_permission")
    if not ok or not granted:
        logger.warning("%s permission not granted for ping functionality", label)
        return False
    return True
