import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from src.config.table_names import TableNames
from src.invitations.dtos import InvalidInputError, InvitationNotFoundError, LogType
from src.invitations.features.record_view.write_model import StoreRecordViewWriteModel
from src.invitations.locks import KeyedLock
from src.invitations.repository.tests.inmemory_store import (
    FrozenClock,
    create_test_store,
    seed_invitation,
    stored_invitation,
)

T0 = datetime(2026, 5, 4, 12, 0, tzinfo=UTC)


@pytest.fixture
def store():
    return create_test_store()


@pytest.fixture
def clock():
    return FrozenClock(T0 + timedelta(minutes=3))


@pytest.fixture
def write_model(store, clock):
    return StoreRecordViewWriteModel(store=store, clock=clock, locks=KeyedLock())


@pytest.mark.asyncio
async def test_first_view_is_recorded_once(write_model, store, clock):
    invitation = seed_invitation(store, created_at=T0, confirm_by=T0 + timedelta(hours=2))

    first = await write_model.record_view(invitation.id, "device-a")
    clock.advance(minutes=5)
    second = await write_model.record_view(invitation.id, "device-a")

    assert first.recorded is True
    assert second.recorded is False
    assert len(store.tables[TableNames.VIEWS]) == 1
    row = stored_invitation(store, invitation.id)
    assert row.view_count_unique == 1
    assert row.first_view_at == T0 + timedelta(minutes=3)
    logs = [r for r in store.tables[TableNames.LOGS] if r.type == LogType.FIRST_VIEW]
    assert len(logs) == 1


@pytest.mark.asyncio
async def test_unique_views_never_exceed_distinct_devices(write_model, store, clock):
    invitation = seed_invitation(store, created_at=T0, confirm_by=T0 + timedelta(hours=2))

    for device in ["a", "b", "a", "c", "b", "a"]:
        clock.advance(seconds=30)
        await write_model.record_view(invitation.id, device)

    row = stored_invitation(store, invitation.id)
    assert row.view_count_unique == 3
    assert row.first_view_at == T0 + timedelta(minutes=3, seconds=30)


@pytest.mark.asyncio
async def test_views_are_tracked_per_invitation(write_model, store):
    first = seed_invitation(store, created_at=T0, confirm_by=T0 + timedelta(hours=2))
    second = seed_invitation(store, created_at=T0, confirm_by=T0 + timedelta(hours=2))

    assert (await write_model.record_view(first.id, "device-a")).recorded is True
    assert (await write_model.record_view(second.id, "device-a")).recorded is True


@pytest.mark.asyncio
async def test_views_are_recorded_on_closed_invitations(write_model, store, clock):
    invitation = seed_invitation(store, created_at=T0, confirm_by=T0 + timedelta(minutes=1))

    assert (await write_model.record_view(invitation.id, "device-a")).recorded is True


@pytest.mark.asyncio
async def test_counter_failure_keeps_the_view(write_model, store):
    invitation = seed_invitation(store, created_at=T0, confirm_by=T0 + timedelta(hours=2))
    store.fail_updates = True

    recorded = await write_model.record_view(invitation.id, "device-a")

    assert recorded.recorded is True
    assert len(store.tables[TableNames.VIEWS]) == 1
    assert stored_invitation(store, invitation.id).view_count_unique == 0


@pytest.mark.asyncio
async def test_unknown_invitation(write_model, store):
    with pytest.raises(InvitationNotFoundError):
        await write_model.record_view("f" * 32, "device-a")

    assert store.writes() == []


@pytest.mark.asyncio
async def test_missing_device_id(write_model, store):
    invitation = seed_invitation(store, created_at=T0, confirm_by=T0 + timedelta(hours=2))

    with pytest.raises(InvalidInputError):
        await write_model.record_view(invitation.id, "  ")

    assert store.calls == []


@pytest.mark.asyncio
async def test_concurrent_first_views_of_one_device_record_once(write_model, store):
    store.yield_on_read = True
    invitation = seed_invitation(store, created_at=T0, confirm_by=T0 + timedelta(hours=2))

    results = await asyncio.gather(
        write_model.record_view(invitation.id, "device-a"),
        write_model.record_view(invitation.id, "device-a"),
    )

    assert sorted(r.recorded for r in results) == [False, True]
    assert len(store.tables[TableNames.VIEWS]) == 1
    logs = [r for r in store.tables[TableNames.LOGS] if r.type == LogType.FIRST_VIEW]
    assert len(logs) == 1
    assert stored_invitation(store, invitation.id).view_count_unique == 1
