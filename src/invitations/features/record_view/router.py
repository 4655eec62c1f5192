from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.invitations.dependencies import get_clock, get_invitation_locks, get_table_store
from src.invitations.dtos import InvitationError
from src.invitations.features.record_view.write_model import (
    RecordViewWriteModel,
    StoreRecordViewWriteModel,
)
from src.invitations.http_errors import to_http_exception
from src.invitations.locks import KeyedLock
from src.invitations.repository.store import TableStore
from src.invitations.urls import RECORD_VIEW_URL
from src.invitations.utils import Clock

router = APIRouter()


class RecordViewRequest(BaseModel):
    device_id: str


class RecordViewResponse(BaseModel):
    recorded: bool


def get_record_view_write_model(
    store: TableStore = Depends(get_table_store),
    clock: Clock = Depends(get_clock),
    locks: KeyedLock | None = Depends(get_invitation_locks),
) -> RecordViewWriteModel:
    """Dependency to get record view write model instance."""
    return StoreRecordViewWriteModel(store=store, clock=clock, locks=locks)


@router.post(RECORD_VIEW_URL, response_model=RecordViewResponse)
async def record_view(
    invitation_id: str,
    request: RecordViewRequest,
    write_model: RecordViewWriteModel = Depends(get_record_view_write_model),
) -> RecordViewResponse:
    """
    Count a device opening the invitation. Repeated views of the same device
    are ignored.
    """
    try:
        recorded = await write_model.record_view(invitation_id, request.device_id)
    except InvitationError as e:
        raise to_http_exception(e)

    return RecordViewResponse(recorded=recorded.recorded)
