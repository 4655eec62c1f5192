"""SqlTableStore against an in-memory SQLite database."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.config.table_names import TableNames
from src.invitations.dtos import (
    Choice,
    ClosureCause,
    InvitationStatus,
    LogType,
    StoreUnavailableError,
    Verdict,
)
from src.invitations.repository.rows import InvitationRow, LogRow, ResponseRow, ViewRow
from src.invitations.repository.sql_store import SqlTableStore
from src.models.base import Base

T0 = datetime(2026, 5, 4, 12, 0, tzinfo=UTC)


@pytest.fixture
async def sql_store():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield SqlTableStore(async_sessionmaker(engine, expire_on_commit=False))

    await engine.dispose()


def _invitation(invitation_id: str = "a" * 32) -> InvitationRow:
    return InvitationRow(
        id=invitation_id,
        title="Padel",
        event_at=T0 + timedelta(hours=4),
        event_has_time=True,
        confirm_by=T0 + timedelta(hours=3),
        capacity_min=2,
        capacity_max=4,
        created_at=T0,
    )


@pytest.mark.asyncio
async def test_invitation_round_trip(sql_store):
    await sql_store.append_row(TableNames.INVITATIONS, _invitation())

    rows = await sql_store.read_all_rows(TableNames.INVITATIONS)

    assert rows == [_invitation()]
    assert rows[0].confirm_by.tzinfo is not None
    assert rows[0].status == InvitationStatus.OPEN


@pytest.mark.asyncio
async def test_non_utc_timestamps_come_back_as_utc(sql_store):
    paris = datetime(2026, 5, 4, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    await sql_store.append_row(TableNames.VIEWS, ViewRow("a" * 32, "device", paris))

    [view] = await sql_store.read_all_rows(TableNames.VIEWS)

    assert view.first_seen_at == paris
    assert view.first_seen_at.utcoffset() == timedelta(0)


@pytest.mark.asyncio
async def test_response_and_log_rows(sql_store):
    response = ResponseRow(
        id="b" * 32,
        invitation_id="a" * 32,
        device_id="device-1",
        name="Ana",
        choice=Choice.MAYBE,
        created_at=T0,
    )
    log = LogRow(
        created_at=T0,
        type=LogType.RESPONSE_CREATED,
        invitation_id="a" * 32,
        device_id="device-1",
        payload={"choice": "MAYBE"},
    )
    await sql_store.append_row(TableNames.RESPONSES, response)
    await sql_store.append_row(TableNames.LOGS, log)

    assert await sql_store.read_all_rows(TableNames.RESPONSES) == [response]
    assert await sql_store.read_all_rows(TableNames.LOGS) == [log]


@pytest.mark.asyncio
async def test_views_keep_append_order(sql_store):
    for device in ["c", "a", "b"]:
        await sql_store.append_row(TableNames.VIEWS, ViewRow("a" * 32, device, T0))

    views = await sql_store.read_all_rows(TableNames.VIEWS)

    assert [v.device_id for v in views] == ["c", "a", "b"]


@pytest.mark.asyncio
async def test_update_row_where(sql_store):
    await sql_store.append_row(TableNames.INVITATIONS, _invitation("a" * 32))
    await sql_store.append_row(TableNames.INVITATIONS, _invitation("c" * 32))

    matched = await sql_store.update_row_where(
        TableNames.INVITATIONS,
        lambda row: row.id == "a" * 32,
        lambda row: replace(
            row,
            status=InvitationStatus.CLOSED,
            closure_cause=ClosureCause.FULL,
            verdict=Verdict.SUCCESS,
            closed_at=T0 + timedelta(hours=1),
            yes_count=4,
        ),
    )

    assert matched is True
    first, second = await sql_store.read_all_rows(TableNames.INVITATIONS)
    assert first.status == InvitationStatus.CLOSED
    assert first.closure_cause == ClosureCause.FULL
    assert first.verdict == Verdict.SUCCESS
    assert first.closed_at == T0 + timedelta(hours=1)
    assert first.yes_count == 4
    assert second == _invitation("c" * 32)


@pytest.mark.asyncio
async def test_update_without_match(sql_store):
    await sql_store.append_row(TableNames.INVITATIONS, _invitation())

    matched = await sql_store.update_row_where(
        TableNames.INVITATIONS, lambda row: row.id == "z", lambda row: row
    )

    assert matched is False


@pytest.mark.asyncio
async def test_backend_errors_become_store_unavailable():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    # No tables created
    store = SqlTableStore(async_sessionmaker(engine, expire_on_commit=False))

    with pytest.raises(StoreUnavailableError) as exc_info:
        await store.read_all_rows(TableNames.INVITATIONS)

    assert isinstance(exc_info.value.__cause__, OperationalError)
    await engine.dispose()
