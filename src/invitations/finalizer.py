"""Closure finalization and cache refresh for the invitation row.

``ClosureFinalizer.sync`` recomputes the aggregates, then writes the cached
counters and, on the first observed OPEN -> CLOSED transition, the status,
closure cause and verdict, all in a single ``update_row_where`` call. The
transition check runs inside the mutator against the row as the store just
read it, which keeps the window between "observe OPEN" and "write CLOSED" as
small as the store allows. The verdict is write-once: a persisted verdict is
never replaced.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime

from src.config.table_names import TableNames
from src.invitations.audit import append_log
from src.invitations.dtos import (
    InvitationState,
    InvitationStatus,
    LogType,
    ResponseCounts,
    StoreUnavailableError,
    Verdict,
)
from src.invitations.lifecycle import compute_verdict, decay_maybes, resolve_status
from src.invitations.repository.aggregates import AggregateProjector
from src.invitations.repository.rows import InvitationRow
from src.invitations.repository.store import TableStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    state: InvitationState
    counts: ResponseCounts
    verdict: Verdict | None
    finalized: bool
    persisted: bool


class ClosureFinalizer:
    def __init__(self, store: TableStore, projector: AggregateProjector | None = None) -> None:
        self._store = store
        self._projector = projector or AggregateProjector(store)

    async def sync(
        self,
        invitation: InvitationRow,
        now: datetime,
        response_created_at: datetime | None = None,
        unique_views: int | None = None,
        raise_on_failure: bool = False,
    ) -> SyncResult:
        """Refresh the cached state of ``invitation`` and finalize it if it just closed.

        Args:
            invitation: The invitation row as last read by the caller
            now: The instant the triggering mutation happened
            response_created_at: Creation time of the response that triggered
                this sync, used for the first-response latency metric
            unique_views: Freshly counted unique views, if the caller has them
            raise_on_failure: Propagate store failures instead of logging them

        Returns:
            SyncResult with the recomputed state and reported counts
        """
        aggregate = await self._projector.project(invitation.id)
        state = resolve_status(
            invitation.confirm_by, invitation.capacity_max, aggregate.counts.yes, now
        )
        counts = decay_maybes(invitation.confirm_by, now, aggregate.counts)
        verdict = compute_verdict(invitation.capacity_min, counts.yes) if state.is_closed else None

        outcome = {"finalized": False, "verdict": verdict}

        def mutate(row: InvitationRow) -> InvitationRow:
            changes = {
                "yes_count": counts.yes,
                "no_count": counts.no,
                "maybe_count": counts.maybe,
            }
            if unique_views is not None:
                changes["view_count_unique"] = unique_views
            if response_created_at is not None:
                if row.first_response_at is None:
                    changes["first_response_at"] = response_created_at
                if row.response_time_delta_ms is None:
                    delta_ms = int((response_created_at - row.created_at).total_seconds() * 1000)
                    if delta_ms >= 0:
                        changes["response_time_delta_ms"] = delta_ms
            if state.is_closed and row.status == InvitationStatus.OPEN:
                outcome["finalized"] = True
                changes["status"] = InvitationStatus.CLOSED
                changes["closed_at"] = row.closed_at or now
                changes["closure_cause"] = state.closure_cause
            if state.is_closed:
                if row.verdict is None:
                    changes["verdict"] = verdict
                else:
                    outcome["verdict"] = row.verdict
            return replace(row, **changes)

        try:
            await self._store.update_row_where(
                TableNames.INVITATIONS, lambda row: row.id == invitation.id, mutate
            )
        except StoreUnavailableError as e:
            if raise_on_failure:
                raise
            # Status is recomputed on every read; the verdict falls back to
            # being computed on read until a later sync persists it.
            logger.warning(f"Could not persist state of invitation {invitation.id}: {e}")
            return SyncResult(
                state=state, counts=counts, verdict=verdict, finalized=False, persisted=False
            )

        if outcome["finalized"]:
            logger.info(
                f"Invitation {invitation.id} closed ({state.closure_cause.value}), "
                f"verdict {outcome['verdict'].value}"
            )
            await append_log(
                self._store,
                LogType.INVITATION_CLOSED,
                created_at=now,
                invitation_id=invitation.id,
                payload={
                    "closure_cause": state.closure_cause.value,
                    "verdict": outcome["verdict"].value,
                    "yes": counts.yes,
                },
            )

        return SyncResult(
            state=state,
            counts=counts,
            verdict=outcome["verdict"],
            finalized=outcome["finalized"],
            persisted=True,
        )

    async def refresh(self, invitation_id: str, now: datetime) -> SyncResult:
        """Recompute every cached field of one invitation row from the source rows."""
        invitation = await self._projector.load_invitation(invitation_id)
        unique_views = await self._projector.unique_views(invitation_id)
        return await self.sync(
            invitation, now, unique_views=unique_views, raise_on_failure=True
        )
