from contextlib import nullcontext

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.invitations.dependencies import get_clock, get_invitation_locks, get_table_store
from src.invitations.dtos import ClosureCause, InvitationError, InvitationStatus, Verdict
from src.invitations.finalizer import ClosureFinalizer
from src.invitations.http_errors import to_http_exception
from src.invitations.locks import KeyedLock
from src.invitations.repository.store import TableStore
from src.invitations.urls import REFRESH_INVITATION_URL
from src.invitations.utils import Clock

router = APIRouter()


class RefreshInvitationResponse(BaseModel):
    status: InvitationStatus
    closure_cause: ClosureCause | None = None
    verdict: Verdict | None = None
    yes: int
    no: int
    maybe: int
    finalized: bool


def get_closure_finalizer(store: TableStore = Depends(get_table_store)) -> ClosureFinalizer:
    return ClosureFinalizer(store)


@router.post(REFRESH_INVITATION_URL, response_model=RefreshInvitationResponse)
async def refresh_invitation(
    invitation_id: str,
    finalizer: ClosureFinalizer = Depends(get_closure_finalizer),
    clock: Clock = Depends(get_clock),
    locks: KeyedLock | None = Depends(get_invitation_locks),
) -> RefreshInvitationResponse:
    """
    Recompute the cached counters of an invitation from its responses and views.
    Finalizes the invitation if it is due and nobody has done it yet.
    """
    lock = locks.hold(invitation_id) if locks else nullcontext()
    try:
        async with lock:
            result = await finalizer.refresh(invitation_id, clock())
    except InvitationError as e:
        raise to_http_exception(e)

    return RefreshInvitationResponse(
        status=result.state.status,
        closure_cause=result.state.closure_cause,
        verdict=result.verdict,
        yes=result.counts.yes,
        no=result.counts.no,
        maybe=result.counts.maybe,
        finalized=result.finalized,
    )
