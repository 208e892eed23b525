import asyncio

import pytest

from hotel_admin.services.permission_cascade import TOTAL_FAILURE_MESSAGE, PermissionWrite, apply_plan

ROLE = "Front Office Manager"

PLAN = [
    PermissionWrite("room-operation", ROLE, True),
    PermissionWrite("room-type", ROLE, True),
    PermissionWrite("rooms", ROLE, True),
]


async def test_partial_failure_reports_each_entry():
    calls = []

    async def write_one(menu_id, role_name, can_view):
        calls.append(menu_id)
        if menu_id == "room-type":
            raise ConnectionError("store unavailable")

    result = await apply_plan(PLAN, write_one)

    assert sorted(calls) == sorted(write.menu_id for write in PLAN)
    assert result.succeeded == [PLAN[0], PLAN[2]]
    assert len(result.failed) == 1
    assert result.failed[0].write == PLAN[1]
    assert isinstance(result.failed[0].error, ConnectionError)
    assert not result.ok
    assert not result.total_failure
    assert result.error_message() == (
        "Failed to update 1 of 3 permission(s): room-type (Front Office Manager) -> visible: store unavailable"
    )


async def test_every_write_succeeds():
    result = await apply_plan(PLAN, lambda menu_id, role_name, can_view: None)

    assert result.ok
    assert result.succeeded == PLAN
    assert result.failed == []
    assert result.error_message() is None


async def test_total_failure_uses_generic_message():
    def write_one(menu_id, role_name, can_view):
        raise RuntimeError("nope")

    result = await apply_plan(PLAN, write_one)

    assert result.total_failure
    assert result.succeeded == []
    assert result.error_message() == TOTAL_FAILURE_MESSAGE


async def test_writes_run_concurrently():
    started = asyncio.Event()
    in_flight = 0
    peak = 0

    async def write_one(menu_id, role_name, can_view):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        if peak == len(PLAN):
            started.set()
        await asyncio.wait_for(started.wait(), timeout=1)
        in_flight -= 1

    result = await apply_plan(PLAN, write_one)

    assert result.ok
    assert peak == len(PLAN)


async def test_empty_plan():
    result = await apply_plan([], lambda *args: None)

    assert result.ok
    assert result.succeeded == []


async def test_cancellation_propagates():
    async def write_one(menu_id, role_name, can_view):
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await apply_plan(PLAN[:1], write_one)
