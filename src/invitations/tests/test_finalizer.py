from datetime import UTC, datetime, timedelta

import pytest

from src.config.table_names import TableNames
from src.invitations.dtos import (
    Choice,
    ClosureCause,
    InvitationNotFoundError,
    InvitationStatus,
    LogType,
    ResponseCounts,
    StoreUnavailableError,
    Verdict,
)
from src.invitations.finalizer import ClosureFinalizer
from src.invitations.repository.rows import ViewRow
from src.invitations.repository.tests.inmemory_store import (
    create_test_store,
    seed_invitation,
    seed_response,
    stored_invitation,
)

T0 = datetime(2026, 5, 4, 12, 0, tzinfo=UTC)
DEADLINE = T0 + timedelta(hours=3)


def _closed_logs(store):
    return [r for r in store.tables[TableNames.LOGS] if r.type == LogType.INVITATION_CLOSED]


@pytest.mark.asyncio
async def test_sync_refreshes_counters_while_open():
    store = create_test_store()
    invitation = seed_invitation(store, created_at=T0, confirm_by=DEADLINE)
    seed_response(store, invitation.id, "ana", "Ana", Choice.MAYBE, T0 + timedelta(minutes=5))
    seed_response(store, invitation.id, "bo", "Bo", Choice.NO, T0 + timedelta(minutes=6))

    result = await ClosureFinalizer(store).sync(invitation, T0 + timedelta(minutes=10))

    assert result.state.status == InvitationStatus.OPEN
    assert result.verdict is None
    assert result.finalized is False
    row = stored_invitation(store, invitation.id)
    assert (row.yes_count, row.no_count, row.maybe_count) == (1, 1, 1)
    assert row.status == InvitationStatus.OPEN
    assert row.verdict is None
    assert _closed_logs(store) == []


@pytest.mark.asyncio
async def test_sync_finalizes_on_expiry_with_decayed_counts():
    store = create_test_store()
    invitation = seed_invitation(store, created_at=T0, confirm_by=DEADLINE, capacity_min=3)
    seed_response(store, invitation.id, "ana", "Ana", Choice.YES, T0 + timedelta(minutes=5))
    seed_response(store, invitation.id, "bo", "Bo", Choice.MAYBE, T0 + timedelta(minutes=6))

    result = await ClosureFinalizer(store).sync(invitation, DEADLINE)

    assert result.finalized is True
    assert result.counts == ResponseCounts(yes=2, no=1, maybe=0)
    assert result.verdict == Verdict.FAILURE
    row = stored_invitation(store, invitation.id)
    assert row.status == InvitationStatus.CLOSED
    assert row.closure_cause == ClosureCause.EXPIRED
    assert row.closed_at == DEADLINE
    assert row.verdict == Verdict.FAILURE
    assert (row.yes_count, row.no_count, row.maybe_count) == (2, 1, 0)
    [log] = _closed_logs(store)
    assert log.payload["verdict"] == "FAILURE"


@pytest.mark.asyncio
async def test_verdict_is_written_once():
    store = create_test_store()
    invitation = seed_invitation(store, created_at=T0, confirm_by=DEADLINE, capacity_min=3)
    finalizer = ClosureFinalizer(store)
    await finalizer.sync(invitation, DEADLINE)

    # A late row appearing after closure must not flip the outcome
    seed_response(store, invitation.id, "ana", "Ana", Choice.YES, T0 + timedelta(minutes=1))
    seed_response(store, invitation.id, "bo", "Bo", Choice.YES, T0 + timedelta(minutes=2))
    later = DEADLINE + timedelta(hours=1)
    result = await finalizer.sync(invitation, later)

    assert result.finalized is False
    assert result.verdict == Verdict.FAILURE
    row = stored_invitation(store, invitation.id)
    assert row.verdict == Verdict.FAILURE
    assert row.closed_at == DEADLINE
    assert len(_closed_logs(store)) == 1


@pytest.mark.asyncio
async def test_first_response_latency_is_recorded_once():
    store = create_test_store()
    invitation = seed_invitation(store, created_at=T0, confirm_by=DEADLINE)
    finalizer = ClosureFinalizer(store)

    first = T0 + timedelta(seconds=90)
    await finalizer.sync(invitation, first, response_created_at=first)
    await finalizer.sync(invitation, first, response_created_at=first + timedelta(minutes=5))

    row = stored_invitation(store, invitation.id)
    assert row.first_response_at == first
    assert row.response_time_delta_ms == 90_000


@pytest.mark.asyncio
async def test_store_failure_is_best_effort():
    store = create_test_store()
    invitation = seed_invitation(store, created_at=T0, confirm_by=DEADLINE)
    store.fail_updates = True

    result = await ClosureFinalizer(store).sync(invitation, DEADLINE)

    assert result.persisted is False
    assert result.state.closure_cause == ClosureCause.EXPIRED
    assert result.verdict == Verdict.FAILURE
    assert stored_invitation(store, invitation.id).status == InvitationStatus.OPEN


@pytest.mark.asyncio
async def test_store_failure_can_be_raised():
    store = create_test_store()
    invitation = seed_invitation(store, created_at=T0, confirm_by=DEADLINE)
    store.fail_updates = True

    with pytest.raises(StoreUnavailableError):
        await ClosureFinalizer(store).sync(invitation, DEADLINE, raise_on_failure=True)


@pytest.mark.asyncio
async def test_refresh_recounts_views_and_finalizes_due_invitation():
    store = create_test_store()
    invitation = seed_invitation(store, created_at=T0, confirm_by=DEADLINE)
    seed_response(store, invitation.id, "ana", "Ana", Choice.YES, T0 + timedelta(minutes=1))
    for device in ["ana", "bo", "ana"]:
        store.tables[TableNames.VIEWS].append(ViewRow(invitation.id, device, T0))

    result = await ClosureFinalizer(store).refresh(invitation.id, DEADLINE + timedelta(days=1))

    assert result.finalized is True
    assert result.verdict == Verdict.SUCCESS
    row = stored_invitation(store, invitation.id)
    assert row.view_count_unique == 2
    assert row.yes_count == 2


@pytest.mark.asyncio
async def test_refresh_unknown_invitation():
    with pytest.raises(InvitationNotFoundError):
        await ClosureFinalizer(create_test_store()).refresh("f" * 32, T0)
