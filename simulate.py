# simulate.py
import argparse
import asyncio
import itertools
import logging
import time

from guardian_ping import PingDispatcher, PingConfig, PingType
from guardian_ping.errors import CapabilityUnavailableError, LocationPermissionError
from guardian_ping.models import Address, Position

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)


class ConsoleVibration:
    async def vibrate(self, pattern, repeat):
        print(f"[vibration] pattern={pattern} repeat={repeat}")

    async def cancel(self):
        print("[vibration] cancelled")


class ConsoleAudio:
    def __init__(self):
        self._ids = itertools.count(1)

    async def play_loop(self):
        handle = next(self._ids)
        print(f"[audio] looping ring sound (handle {handle})")
        return handle

    async def stop(self, handle):
        print(f"[audio] stopped handle {handle}")


class ConsoleSpeech:
    def __init__(self, muted=False):
        self.muted = muted

    async def speak(self, text):
        if self.muted:
            raise CapabilityUnavailableError("No speech engine")
        print(f"[speech] {text}")


class ConsoleLocation:
    def __init__(self, deny=False):
        self.deny = deny

    async def request_permission(self):
        return not self.deny

    async def get_current_position(self, high_accuracy):
        if self.deny:
            raise LocationPermissionError("Location permission denied")
        return Position(latitude=51.5007, longitude=-0.1246,
                        accuracy=5.0 if high_accuracy else 25.0, timestamp=time.time())

    async def reverse_geocode(self, position):
        return Address(street="Westminster Bridge Road", city="London", region="England")


class ConsolePresenter:
    """Prints alerts and picks an action after a delay, like a child tapping a button."""

    def __init__(self, choice=None, delay=2.0):
        self.choice = choice
        self.delay = delay
        self._tasks = set()

    async def present(self, alert):
        labels = ", ".join(a.label for a in alert.actions) or "OK"
        print(f"[alert] {alert.title}: {alert.message} [{labels}]")
        action = alert.action(self.choice) if self.choice else None
        if action and action.handler:
            asyncio.get_running_loop().call_later(self.delay, self._tap, action)

    def _tap(self, action):
        task = asyncio.create_task(action.handler(), name=f"tap_{action.label}")
        self._tasks.add(task)
        task.add_done_callback(self._tap_done)

    def _tap_done(self, task):
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Alert action failed: %s", task.exception())

    async def drain(self):
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def prompt_text(self, prompt):
        print(f"[prompt] {prompt.title}: {prompt.message}")
        await prompt.on_submit(prompt.default)


class ConsoleNotifications:
    def __init__(self):
        self._ids = itertools.count(1)

    async def schedule(self, notification):
        print(f"[notification] ({notification.priority}) {notification.title}: {notification.body}")
        return f"local-{next(self._ids)}"


async def main():
    parser = argparse.ArgumentParser(description="Simulate a guardian ping on this device")
    parser.add_argument("type", choices=[t.value for t in PingType],
                        help="Kind of ping to send")
    parser.add_argument("--message", default=None,
                        help="Guardian message shown with the ping")
    parser.add_argument("--choose", default=None,
                        help="Alert action the simulated child taps (e.g. 'Respond', 'Need Help')")
    parser.add_argument("--deny-location", action="store_true",
                        help="Simulate refused location permission")
    parser.add_argument("--no-audio", action="store_true",
                        help="Simulate a ring sound that failed to load")
    parser.add_argument("--mute", action="store_true",
                        help="Simulate a missing speech engine")
    parser.add_argument("--ring-timeout", type=float, default=5.0,
                        help="Ring auto-stop delay in seconds")
    args = parser.parse_args()

    presenter = ConsolePresenter(choice=args.choose)
    manager = PingDispatcher(
        vibration=ConsoleVibration(),
        audio=None if args.no_audio else ConsoleAudio(),
        speech=ConsoleSpeech(muted=args.mute),
        location=ConsoleLocation(deny=args.deny_location),
        presenter=presenter,
        notifications=ConsoleNotifications(),
        config=PingConfig(default_ring_timeout=args.ring_timeout,
                          emergency_ring_timeout=args.ring_timeout * 2),
    )
    await manager.initialize()

    ping_id = await manager.send(PingType(args.type), args.message)
    print(f"Sent {args.type} ping {ping_id}. Waiting for the session to finish...")
    try:
        await manager.drain()
        await asyncio.sleep(args.ring_timeout * 2 + 1)
    except KeyboardInterrupt:
        print("Exiting simulation.")
    finally:
        await presenter.drain()
        await manager.shutdown()

    for request in manager.history(10):
        print(f"\n{request.type.value} ping {request.id}")
        print(f"  Urgency: {request.urgency.value}")
        print(f"  Message: {request.message or '-'}")
        print(f"  Acknowledged: {request.acknowledged}")
        if request.response:
            print(f"  Response: {request.response}")
    print(f"\nPending: {len(manager.pending())}")

if __name__ == "__main__":
    asyncio.run(main())
