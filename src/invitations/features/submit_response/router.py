from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.invitations.dependencies import get_clock, get_invitation_locks, get_table_store
from src.invitations.dtos import Choice, ClosureCause, InvitationError, InvitationStatus
from src.invitations.features.submit_response.write_model import (
    StoreSubmitResponseWriteModel,
    SubmitResponseWriteModel,
)
from src.invitations.http_errors import to_http_exception
from src.invitations.locks import KeyedLock
from src.invitations.repository.store import TableStore
from src.invitations.urls import SUBMIT_RESPONSE_URL
from src.invitations.utils import Clock

router = APIRouter()


class SubmitResponseRequest(BaseModel):
    device_id: str
    name: str
    # Validated by the write model, case-insensitively
    choice: str


class SubmitResponseResponse(BaseModel):
    invitation_id: str
    choice: Choice
    modified: bool
    status: InvitationStatus
    closure_cause: ClosureCause | None = None


def get_submit_response_write_model(
    store: TableStore = Depends(get_table_store),
    clock: Clock = Depends(get_clock),
    locks: KeyedLock | None = Depends(get_invitation_locks),
) -> SubmitResponseWriteModel:
    """Dependency to get submit response write model instance."""
    return StoreSubmitResponseWriteModel(store=store, clock=clock, locks=locks)


@router.post(SUBMIT_RESPONSE_URL, response_model=SubmitResponseResponse)
async def submit_response(
    invitation_id: str,
    request: SubmitResponseRequest,
    write_model: SubmitResponseWriteModel = Depends(get_submit_response_write_model),
) -> SubmitResponseResponse:
    """
    Answer an invitation with YES, NO or MAYBE.
    A MAYBE can be changed once to YES or NO; any other second answer is a 409.
    """
    try:
        submitted = await write_model.submit_response(
            invitation_id=invitation_id,
            device_id=request.device_id,
            name=request.name,
            choice=request.choice,
        )
    except InvitationError as e:
        raise to_http_exception(e)

    return SubmitResponseResponse(
        invitation_id=submitted.invitation_id,
        choice=submitted.choice,
        modified=submitted.modified,
        status=submitted.state.status,
        closure_cause=submitted.state.closure_cause,
    )
