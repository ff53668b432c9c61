"""Tests for emergency pings."""

import asyncio

import pytest

from guardian_ping import EmergencyStatus, LocationPermissionError, Urgency
from guardian_ping.config import EMERGENCY_VIBRATION
from tests.conftest import settle

EMERGENCY_TITLE = "\U0001F6A8 EMERGENCY PING"


@pytest.mark.asyncio
async def test_emergency_rings_and_locates(manager, presenter, vibration, location, speech):
    ping_id = await manager.send_emergency_ping("Help!")
    await manager.drain()

    request = manager.get(ping_id)
    assert request.urgency == Urgency.EMERGENCY
    assert request.ttl == 30 * 60

    alert = presenter.last(EMERGENCY_TITLE)
    assert alert.message == "Help!"
    assert [a.label for a in alert.actions] == ["I'm Safe", "I Need Help", "Call Parent"]
    assert alert.cancelable is False

    assert manager.ring.active_request_id == ping_id
    assert vibration.patterns == [(EMERGENCY_VIBRATION, True)]
    assert location.calls == [True]
    assert any(text.startswith("EMERGENCY:") for text in speech.spoken)

    # The location fetch alone does not answer the emergency.
    assert request.acknowledged is False
    assert [r.id for r in manager.pending()] == [ping_id]


@pytest.mark.asyncio
async def test_location_failure_does_not_suppress_alert(manager, presenter, location):
    location.error = LocationPermissionError("denied")

    ping_id = await manager.send_emergency_ping()
    await manager.drain()

    assert presenter.last(EMERGENCY_TITLE) is not None
    assert presenter.last("Location Error") is not None
    assert manager.ring.is_ringing
    assert manager.get(ping_id).acknowledged is False


@pytest.mark.asyncio
async def test_slow_location_does_not_delay_alert(manager, presenter, location):
    location.gate = asyncio.Event()

    await manager.send_emergency_ping()
    await settle()

    assert presenter.last(EMERGENCY_TITLE) is not None
    assert manager.ring.is_ringing

    location.gate.set()
    await manager.drain()


@pytest.mark.asyncio
async def test_safe_answer(manager, presenter, vibration):
    ping_id = await manager.send_emergency_ping()
    await manager.drain()

    await presenter.last(EMERGENCY_TITLE).action("I'm Safe").handler()

    request = manager.get(ping_id)
    assert request.acknowledged is True
    assert request.response.status == EmergencyStatus.SAFE
    assert request.response.message == "I'm safe and OK"
    assert request.response.needs_help is False
    assert request.response.location.address == "1, Main St, Springfield, IL"
    assert not manager.ring.is_ringing
    assert vibration.active is False
    assert presenter.last("Help Request Sent") is None


@pytest.mark.asyncio
async def test_help_answer_is_distinct_from_safe(manager, presenter):
    ping_id = await manager.send_emergency_ping()
    await manager.drain()

    await presenter.last(EMERGENCY_TITLE).action("I Need Help").handler()

    response = manager.get(ping_id).response
    assert response.status == EmergencyStatus.HELP
    assert response.status != EmergencyStatus.SAFE
    assert response.needs_help is True
    assert response.message == "I need help right now"
    assert presenter.last("Help Request Sent") is not None


@pytest.mark.asyncio
async def test_help_after_safe_keeps_safe(manager, presenter):
    ping_id = await manager.send_emergency_ping()
    await manager.drain()

    alert = presenter.last(EMERGENCY_TITLE)
    await alert.action("I'm Safe").handler()
    await alert.action("I Need Help").handler()

    assert manager.get(ping_id).response.status == EmergencyStatus.SAFE


@pytest.mark.asyncio
async def test_call_parent_hands_off_without_acknowledging(manager, presenter, calls):
    ping_id = await manager.send_emergency_ping()
    await manager.drain()

    await presenter.last(EMERGENCY_TITLE).action("Call Parent").handler()

    assert calls == ["parent"]
    assert not manager.ring.is_ringing
    assert presenter.last("Emergency Call") is not None
    assert manager.get(ping_id).acknowledged is False


@pytest.mark.asyncio
async def test_emergency_expires_after_thirty_minutes(manager, clock):
    ping_id = await manager.send_emergency_ping("Help!")
    await manager.drain()

    clock.advance(29 * 60)
    assert [r.id for r in manager.pending()] == [ping_id]

    clock.advance(2 * 60)
    assert manager.pending() == []
    history = manager.history(10)
    assert [r.id for r in history] == [ping_id]
    assert history[0].acknowledged is False


@pytest.mark.asyncio
async def test_answer_before_fix_keeps_no_location(manager, presenter, location):
    location.gate = asyncio.Event()

    ping_id = await manager.send_emergency_ping()
    await settle()
    tap = asyncio.create_task(presenter.last(EMERGENCY_TITLE).action("I'm Safe").handler())
    await settle()

    location.gate.set()
    await tap
    await manager.drain()

    assert manager.get(ping_id).acknowledged is True
    assert manager.emergency._locations == {}


@pytest.mark.asyncio
async def test_fix_for_expired_emergency_is_dropped(manager, clock):
    first = await manager.send_emergency_ping()
    await manager.drain()
    assert list(manager.emergency._locations) == [first]

    clock.advance(31 * 60)
    second = await manager.send_emergency_ping()
    await manager.drain()

    assert list(manager.emergency._locations) == [second]
