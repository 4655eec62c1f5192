import logging
from abc import ABC, abstractmethod
from contextlib import nullcontext
from dataclasses import replace

from src.config.table_names import TableNames
from src.invitations.audit import append_log
from src.invitations.dtos import InvalidInputError, LogType, RecordedViewDTO, StoreUnavailableError
from src.invitations.locks import KeyedLock
from src.invitations.repository.aggregates import AggregateProjector, count_unique_views
from src.invitations.repository.rows import InvitationRow, ViewRow
from src.invitations.repository.store import TableStore
from src.invitations.utils import Clock, utc_now

logger = logging.getLogger(__name__)


class RecordViewWriteModel(ABC):
    @abstractmethod
    async def record_view(self, invitation_id: str, device_id: str) -> RecordedViewDTO:
        """Record that a device opened an invitation. Idempotent per (invitation, device)."""
        raise NotImplementedError


class StoreRecordViewWriteModel(RecordViewWriteModel):
    def __init__(
        self,
        store: TableStore,
        clock: Clock = utc_now,
        locks: KeyedLock | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._locks = locks
        self._projector = AggregateProjector(store)

    async def record_view(self, invitation_id: str, device_id: str) -> RecordedViewDTO:
        device_id = (device_id or "").strip()
        if not device_id:
            raise InvalidInputError("Missing device id")

        lock = self._locks.hold(invitation_id) if self._locks else nullcontext()
        async with lock:
            return await self._record(invitation_id, device_id)

    async def _record(self, invitation_id: str, device_id: str) -> RecordedViewDTO:
        await self._projector.load_invitation(invitation_id)

        views = await self._store.read_all_rows(TableNames.VIEWS)
        already_seen = any(
            v.invitation_id == invitation_id and v.device_id == device_id for v in views
        )
        if already_seen:
            return RecordedViewDTO(recorded=False)

        now = self._clock()
        await self._store.append_row(
            TableNames.VIEWS,
            ViewRow(invitation_id=invitation_id, device_id=device_id, first_seen_at=now),
        )
        await append_log(
            self._store,
            LogType.FIRST_VIEW,
            created_at=now,
            invitation_id=invitation_id,
            device_id=device_id,
        )

        # The cached counter is a convenience for the invitation row only
        try:
            views = await self._store.read_all_rows(TableNames.VIEWS)
            unique_views = count_unique_views(views, invitation_id)

            def mutate(row: InvitationRow) -> InvitationRow:
                return replace(
                    row,
                    view_count_unique=unique_views,
                    first_view_at=row.first_view_at or now,
                )

            await self._store.update_row_where(
                TableNames.INVITATIONS, lambda row: row.id == invitation_id, mutate
            )
        except StoreUnavailableError as e:
            logger.warning(f"Could not refresh view counter of invitation {invitation_id}: {e}")

        return RecordedViewDTO(recorded=True)
