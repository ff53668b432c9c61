"""Shared fakes and fixtures for the guardian_ping test suite."""

import asyncio
import itertools

import pytest
import pytest_asyncio

from guardian_ping import PingConfig, PingDispatcher
from guardian_ping.errors import LocationError
from guardian_ping.models import Address, Position

START = 1_700_000_000.0


async def settle(rounds: int = 10) -> None:
    """Let already-scheduled tasks run a few steps."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeClock:
    def __init__(self, now: float = START):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeVibration:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.active = False
        self.patterns = []
        self.cancel_count = 0

    async def vibrate(self, pattern, repeat):
        if self.fail:
            raise RuntimeError("vibration motor unavailable")
        self.patterns.append((list(pattern), repeat))
        self.active = True

    async def cancel(self):
        self.cancel_count += 1
        self.active = False


class FakeAudio:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.playing = set()
        self.stopped = []
        self.unloaded = False
        self.gate = None
        self._ids = itertools.count(1)

    async def play_loop(self):
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("ring sound not loaded")
        handle = next(self._ids)
        self.playing.add(handle)
        return handle

    async def stop(self, handle):
        self.playing.discard(handle)
        self.stopped.append(handle)

    async def unload(self):
        self.unloaded = True


class FakeSpeech:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.spoken = []

    async def speak(self, text):
        if self.fail:
            raise RuntimeError("no speech engine")
        self.spoken.append(text)


class FakeLocation:
    def __init__(self, error: Exception = None, geocode_error: bool = False,
                 granted: bool = True):
        self.error = error
        self.geocode_error = geocode_error
        self.granted = granted
        self.calls = []
        self.gate = None

    async def request_permission(self):
        return self.granted

    async def get_current_position(self, high_accuracy):
        self.calls.append(high_accuracy)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return Position(latitude=40.7128, longitude=-74.0060, accuracy=4.0, timestamp=START)

    async def reverse_geocode(self, position):
        if self.geocode_error:
            raise LocationError("geocoder offline")
        return Address(street_number="1", street="Main St", city="Springfield", region="IL")


class FakePresenter:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.alerts = []
        self.prompts = []

    async def present(self, alert):
        if self.fail:
            raise RuntimeError("no window to present on")
        self.alerts.append(alert)

    async def prompt_text(self, prompt):
        self.prompts.append(prompt)

    def titles(self):
        return [a.title for a in self.alerts]

    def last(self, title=None):
        for alert in reversed(self.alerts):
            if title is None or alert.title == title:
                return alert
        return None


class FakeNotifications:
    def __init__(self, fail: bool = False, granted: bool = True):
        self.fail = fail
        self.granted = granted
        self.scheduled = []

    async def request_permission(self):
        return self.granted

    async def schedule(self, notification):
        if self.fail:
            raise RuntimeError("notification service down")
        self.scheduled.append(notification)
        return f"n{len(self.scheduled)}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def vibration():
    return FakeVibration()


@pytest.fixture
def audio():
    return FakeAudio()


@pytest.fixture
def speech():
    return FakeSpeech()


@pytest.fixture
def location():
    return FakeLocation()


@pytest.fixture
def presenter():
    return FakePresenter()


@pytest.fixture
def notifications():
    return FakeNotifications()


@pytest.fixture
def config():
    return PingConfig()


@pytest.fixture
def calls():
    return []


@pytest_asyncio.fixture
async def manager(vibration, audio, speech, location, presenter, notifications,
                  config, clock, calls):
    async def call_handler(parent_id):
        calls.append(parent_id)

    dispatcher = PingDispatcher(
        vibration=vibration,
        audio=audio,
        speech=speech,
        location=location,
        presenter=presenter,
        notifications=notifications,
        config=config,
        clock=clock,
        call_handler=call_handler,
    )
    yield dispatcher
    await dispatcher.shutdown()
