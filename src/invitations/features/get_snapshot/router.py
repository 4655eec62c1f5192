from dataclasses import asdict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.invitations.dependencies import get_clock, get_table_store
from src.invitations.dtos import (
    Choice,
    ClosureCause,
    InvitationError,
    InvitationStatus,
    Verdict,
)
from src.invitations.features.create_invitation.dtos import InvitationResponse
from src.invitations.features.get_snapshot.read_model import (
    SnapshotReadModel,
    StoreSnapshotReadModel,
)
from src.invitations.http_errors import to_http_exception
from src.invitations.repository.store import TableStore
from src.invitations.urls import GET_SNAPSHOT_URL
from src.invitations.utils import Clock

router = APIRouter()


class MyResponseResponse(BaseModel):
    choice: Choice
    name: str


class OrganizerCountsResponse(BaseModel):
    yes: int
    no: int
    maybe: int
    views: int


class SnapshotResponse(BaseModel):
    """Fields the viewer is not allowed to see are null."""

    invitation: InvitationResponse
    status: InvitationStatus
    closure_cause: ClosureCause | None = None
    verdict: Verdict | None = None
    total_positions: int | None = None
    participants: list[str] | None = None
    my_response: MyResponseResponse | None = None
    counts: OrganizerCountsResponse | None = None
    no_names: list[str] | None = None
    maybe_names: list[str] | None = None


def get_snapshot_read_model(
    store: TableStore = Depends(get_table_store),
    clock: Clock = Depends(get_clock),
) -> SnapshotReadModel:
    """Dependency to get snapshot read model instance."""
    return StoreSnapshotReadModel(store=store, clock=clock)


@router.get(GET_SNAPSHOT_URL, response_model=SnapshotResponse)
async def get_snapshot(
    invitation_id: str,
    device_id: str | None = None,
    is_organizer: bool = False,
    read_model: SnapshotReadModel = Depends(get_snapshot_read_model),
) -> SnapshotResponse:
    """
    Get the current state of an invitation as seen by one device.
    """
    try:
        snapshot = await read_model.get_snapshot(
            invitation_id, device_id=device_id, is_organizer=is_organizer
        )
    except InvitationError as e:
        raise to_http_exception(e)

    return SnapshotResponse(
        invitation=InvitationResponse(**asdict(snapshot.invitation)),
        status=snapshot.state.status,
        closure_cause=snapshot.state.closure_cause,
        verdict=snapshot.verdict,
        total_positions=snapshot.total_positions,
        participants=snapshot.participants,
        my_response=(
            MyResponseResponse(**asdict(snapshot.my_response)) if snapshot.my_response else None
        ),
        counts=OrganizerCountsResponse(**asdict(snapshot.counts)) if snapshot.counts else None,
        no_names=snapshot.no_names,
        maybe_names=snapshot.maybe_names,
    )
