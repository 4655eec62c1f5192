from dataclasses import asdict

from fastapi import APIRouter, Depends

from src.invitations.dependencies import get_clock, get_table_store
from src.invitations.dtos import InvitationError
from src.invitations.features.create_invitation.dtos import (
    CreateInvitationRequest,
    CreateInvitationResponse,
    InvitationResponse,
)
from src.invitations.features.create_invitation.write_model import (
    InvitationCreateWriteModel,
    StoreInvitationCreateWriteModel,
)
from src.invitations.http_errors import to_http_exception
from src.invitations.repository.store import TableStore
from src.invitations.urls import CREATE_INVITATION_URL
from src.invitations.utils import Clock

router = APIRouter()


def get_create_invitation_write_model(
    store: TableStore = Depends(get_table_store),
    clock: Clock = Depends(get_clock),
) -> InvitationCreateWriteModel:
    """Dependency to get invitation create write model instance."""
    return StoreInvitationCreateWriteModel(store=store, clock=clock)


@router.post(CREATE_INVITATION_URL, response_model=CreateInvitationResponse, status_code=201)
async def create_invitation(
    request: CreateInvitationRequest,
    write_model: InvitationCreateWriteModel = Depends(get_create_invitation_write_model),
) -> CreateInvitationResponse:
    """
    Create an invitation. The organizer is admitted as the first YES.
    Returns the share link guests open to answer.
    """
    try:
        created = await write_model.create_invitation(
            title=request.title,
            event_at=request.event_at,
            organizer_name=request.organizer_name,
            event_has_time=request.event_has_time,
            confirm_by=request.confirm_by,
            confirm_offset=request.confirm_offset,
            capacity_min=request.capacity_min,
            capacity_max=request.capacity_max,
            invitation_id=request.id,
        )
    except InvitationError as e:
        raise to_http_exception(e)

    return CreateInvitationResponse(
        invitation=InvitationResponse(**asdict(created.invitation)),
        status=created.state.status,
        closure_cause=created.state.closure_cause,
        share_link=created.share_link,
        organizer_device_id=created.organizer_device_id,
        warnings=created.warnings,
    )
