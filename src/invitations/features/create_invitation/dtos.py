"""Request and response bodies for the create invitation endpoint."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.invitations.dtos import ClosureCause, ConfirmOffset, InvitationStatus


class CreateInvitationRequest(BaseModel):
    """Either confirm_by or confirm_offset must be given."""

    title: str
    event_at: datetime
    organizer_name: str
    event_has_time: bool = True
    confirm_by: datetime | None = None
    confirm_offset: ConfirmOffset | None = None
    capacity_min: int | None = None
    capacity_max: int | None = None
    id: str | None = Field(default=None, description="Optional client-generated id")


class InvitationResponse(BaseModel):
    id: str
    title: str
    event_at: datetime
    event_has_time: bool
    confirm_by: datetime | None = None
    capacity_min: int
    capacity_max: int | None = None
    created_at: datetime


class CreateInvitationResponse(BaseModel):
    invitation: InvitationResponse
    status: InvitationStatus
    closure_cause: ClosureCause | None = None
    share_link: str
    organizer_device_id: str
    warnings: list[str] = []
